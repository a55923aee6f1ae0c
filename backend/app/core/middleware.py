# app/core/middleware.py
from typing import Callable

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from app.api.export import EXPORT_PATH, preflight_response
from app.config import settings


class ExportPreflightMiddleware(BaseHTTPMiddleware):
    """Answer browser preflights for the export endpoint from any origin.

    Must wrap CORSMiddleware: that middleware rejects preflights from origins
    outside `settings.cors_origins` before they reach the router.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if (
            request.method == "OPTIONS"
            and request.url.path == EXPORT_PATH
            and "origin" in request.headers
            and "access-control-request-method" in request.headers
        ):
            return preflight_response()
        return await call_next(request)


def setup_middleware(app: FastAPI):
    """Configure all middleware"""
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        # Browsers need this to read the attachment filename of an export
        expose_headers=["Content-Disposition", "Content-Length"],
    )
    # Added last so it runs first
    app.add_middleware(ExportPreflightMiddleware)
