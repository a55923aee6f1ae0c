# app/core/lifespan.py
from contextlib import asynccontextmanager
from app.config import settings
from app.utils.logging import logger
from app.services.exporters.document_builders import DOCUMENT_BUILDERS


@asynccontextmanager
async def lifespan(app):
    """Run setup and teardown logic for the app lifecycle."""

    # ---------- Startup ----------
    logger.info("Application starting", extra={
        "environment": settings.environment,
        "export_prefix": settings.export_filename_prefix,
        "document_types": len(DOCUMENT_BUILDERS),
    })

    # yield control to the running app
    yield

    # ---------- Shutdown ----------
    logger.info("Application shutting down")
