# app/api/export.py
"""Spreadsheet export endpoint.

Takes an extracted record ({documentType, metadata, data}) and streams back an
.xlsx workbook. Every failure is answered with {"success": false, "error": ...}.
"""
import uuid

from fastapi import APIRouter, Request, Response
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

from app.models import DocumentType, ErrorResponse
from app.services.exporter import ExportError, export_from_body
from app.utils.metrics import (
    EXPORT_BYTES_TOTAL,
    EXPORT_FAILURES,
    EXPORT_GENERATION_SECONDS,
    EXPORT_REQUESTS,
    EXPORT_SHEETS_TOTAL,
)
from app.utils.logging import logger

router = APIRouter()

EXPORT_PATH = "/api/export"

PREFLIGHT_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
}


def _error(message: str, status_code: int) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=message).model_dump(),
    )


@router.post(EXPORT_PATH)
async def export_document(request: Request):
    """
    Export an extracted document to Excel.

    Returns:
        - 200 OK: .xlsx attachment
        - 400 Bad Request: malformed JSON, missing documentType/data, unsafe keys
        - 500 Error: workbook generation failed
    """
    request_id = str(uuid.uuid4())
    raw = await request.body()

    with EXPORT_GENERATION_SECONDS.time():
        try:
            # Workbook generation is CPU-bound; keep it off the event loop
            result = await run_in_threadpool(export_from_body, raw)
        except ExportError as e:
            EXPORT_FAILURES.labels(reason=e.reason).inc()
            logger.warning("Export rejected", extra={"request_id": request_id, "reason": e.reason, "error": e.message})
            return _error(e.message, e.status_code)
        except Exception as e:
            EXPORT_FAILURES.labels(reason="unexpected").inc()
            logger.exception("Unexpected export failure", extra={"request_id": request_id})
            return _error(f"Export failed: {e}", 500)

    known = DocumentType.parse(result.document_type)
    EXPORT_REQUESTS.labels(document_type=known.value if known else DocumentType.UNKNOWN.value).inc()
    EXPORT_BYTES_TOTAL.inc(len(result.content))
    EXPORT_SHEETS_TOTAL.inc(result.sheet_count)

    return Response(
        content=result.content,
        media_type=result.content_type,
        headers={
            "Content-Disposition": f'attachment; filename="{result.filename}"',
            "Content-Length": str(len(result.content)),
        },
    )


def preflight_response() -> Response:
    return Response(status_code=200, headers=PREFLIGHT_HEADERS)


@router.options(EXPORT_PATH)
def export_preflight():
    """CORS preflight for clients that call the export endpoint cross-origin.

    Browser preflights (Origin + Access-Control-Request-Method) are answered by
    ExportPreflightMiddleware before CORSMiddleware can reject the origin.
    """
    return preflight_response()
