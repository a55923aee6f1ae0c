from fastapi import APIRouter
from app.api import export, health, metrics


api_router = APIRouter()

api_router.include_router(export.router, tags=["export"])
api_router.include_router(health.router, tags=["health"])
api_router.include_router(metrics.router, tags=["metrics"])  # /metrics for Prometheus

__all__ = ["api_router"]
