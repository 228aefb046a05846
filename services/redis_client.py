import redis
import logging
import time

# ---------------------------------------------------------
# LOGGING
# ---------------------------------------------------------
logger = logging.getLogger("api.redis")


# ---------------------------------------------------------
# REDIS INIT
# ---------------------------------------------------------
def build_redis_client(redis_url: str) -> redis.Redis:
    if not redis_url:
        raise RuntimeError("REDIS_URL not set")

    logger.info("[REDIS] Initializing Redis client REDIS_URL=%s", redis_url)

    client = redis.Redis.from_url(
        redis_url,
        decode_responses=True,
        socket_keepalive=True,
        socket_connect_timeout=2,
        retry_on_timeout=True,
    )
    log_connection_diagnostics(client)
    return client


# ---------------------------------------------------------
# CONNECTION DIAGNOSTICS
# ---------------------------------------------------------
def log_connection_diagnostics(client: redis.Redis) -> None:
    try:
        t0 = time.time()
        pong = client.ping()
        ms = int((time.time() - t0) * 1000)
        logger.info("[REDIS] Connected OK ping=%s latency=%sms", pong, ms)
    except redis.RedisError as e:
        # Startup continues; /health reports the outage.
        logger.error("[REDIS] Initial ping failed: %s", e)
