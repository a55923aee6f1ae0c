from fastapi import APIRouter, Response
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST

router = APIRouter(prefix="/metrics")


@router.get("", summary="Prometheus metrics scrape endpoint", include_in_schema=False)
def metrics_root():
    """Export counters/histograms from app.utils.metrics (plus process defaults)."""
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
