from fastapi import APIRouter, Response

from utils.metrics import render_latest

router = APIRouter(tags=["metrics"])


@router.get("/metrics", include_in_schema=False)
def metrics():
    data, content_type = render_latest()
    return Response(content=data, media_type=content_type)
