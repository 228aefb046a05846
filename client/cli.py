import argparse
import logging
import os
import sys

from client.poller import PollState, TranscriptPoller

EXIT_CODES = {
    PollState.COMPLETED: 0,
    PollState.ERROR: 2,
    PollState.TIMEOUT: 3,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Fetch a transcript for a YouTube or Instagram video.")
    parser.add_argument("url")
    parser.add_argument("--base-url", default=os.getenv("TRANSCRIPT_API_BASE_URL", "http://localhost:8000"))
    parser.add_argument("--interval", type=float, default=3.0, help="Seconds between status checks")
    parser.add_argument("--backoff", type=float, default=1.0, help="Interval multiplier per check (1.0 = fixed)")
    parser.add_argument("--max-interval", type=float, default=30.0)
    parser.add_argument("--max-attempts", type=int, default=200)
    parser.add_argument("--max-wait", type=float, default=None, help="Give up after this many seconds")
    parser.add_argument("-v", "--verbose", action="store_true")
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=logging.INFO if args.verbose else logging.WARNING, format="%(levelname)s %(message)s")

    poller = TranscriptPoller(
        args.base_url,
        interval_sec=args.interval,
        backoff=args.backoff,
        max_interval_sec=args.max_interval,
        max_attempts=args.max_attempts,
        max_wait_sec=args.max_wait,
    )
    try:
        outcome = poller.run(args.url)
    except KeyboardInterrupt:
        poller.cancel()
        print("Cancelled", file=sys.stderr)
        return 130

    if outcome.state is PollState.COMPLETED:
        print(outcome.text)
    else:
        print(f"{outcome.state.value}: {outcome.error}", file=sys.stderr)
    return EXIT_CODES.get(outcome.state, 1)


if __name__ == "__main__":
    raise SystemExit(main())
