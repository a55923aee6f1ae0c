# app/api/health.py
from datetime import datetime
from fastapi import APIRouter
from app.config import settings
from app.models import DocumentType
from app.services.exporters.document_builders import DOCUMENT_BUILDERS

router = APIRouter()

@router.get("/api/health")
async def health_check():
    """Detailed health check"""
    return {
        "status": "healthy",
        "timestamp": datetime.now().isoformat(),
        "environment": settings.environment,
        "document_types": sorted(t.value for t in DOCUMENT_BUILDERS),
        "fallback_type": DocumentType.UNKNOWN.value,
    }
