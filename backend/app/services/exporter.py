"""Export orchestration: request JSON -> validated record -> workbook bytes + filename.

Design choices:
- Reject unsafe payloads before anything walks the object graph.
- Errors carry the HTTP status they map to; the API layer only formats them.
- Unknown document types are not errors: they export through the generic sheet.
"""
from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, List, Optional

from pydantic import ValidationError

from app.config import settings
from app.models import ExportRequest
from app.services.exporters.document_builders import build_workbook
from app.services.exporters.xlsx_renderer import XLSX_CONTENT_TYPE, render_workbook
from app.utils.file_utils import make_export_filename
from app.utils.logging import logger

# Prototype-pollution keys; any dunder key is rejected too.
DANGEROUS_KEYS = frozenset({"__proto__", "constructor", "prototype"})


class ExportError(Exception):
    """Base class for export failures that map to an HTTP status."""
    status_code = 500
    reason = "error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidRequestError(ExportError):
    status_code = 400
    reason = "invalid_request"


class UnsafePayloadError(ExportError):
    status_code = 400
    reason = "unsafe_payload"


class ExportRenderError(ExportError):
    status_code = 500
    reason = "render_failed"


@dataclass
class ExportResult:
    content: bytes
    filename: str
    content_type: str = XLSX_CONTENT_TYPE
    document_type: str = "unknown"
    sheet_count: int = 0


def _is_dangerous_key(key: Any) -> bool:
    if not isinstance(key, str):
        return False
    return key in DANGEROUS_KEYS or (len(key) > 4 and key.startswith("__") and key.endswith("__"))


def find_unsafe_key(obj: Any, path: str = "") -> Optional[str]:
    """Return the dotted path of the first dangerous key in `obj`, or None."""
    if isinstance(obj, dict):
        for key, value in obj.items():
            child_path = f"{path}.{key}" if path else str(key)
            if _is_dangerous_key(key):
                return child_path
            found = find_unsafe_key(value, child_path)
            if found:
                return found
    elif isinstance(obj, list):
        for idx, item in enumerate(obj):
            found = find_unsafe_key(item, f"{path}[{idx}]")
            if found:
                return found
    return None


def format_validation_error(error: ValidationError) -> str:
    """'Validation failed: extractedData.documentType: Field required, ...'"""
    issues: List[str] = []
    for issue in error.errors():
        loc = ".".join(str(part) for part in issue.get("loc", ()))
        issues.append(f"{loc}: {issue.get('msg')}" if loc else str(issue.get("msg")))
    return f"Validation failed: {', '.join(issues)}"


def parse_export_request(payload: Any) -> ExportRequest:
    """Guard + validate a decoded request body."""
    if not isinstance(payload, dict):
        raise InvalidRequestError("Request body must be a JSON object")

    unsafe = find_unsafe_key(payload)
    if unsafe:
        logger.warning("Rejected export payload with unsafe key", extra={"path": unsafe})
        raise UnsafePayloadError("Invalid input: potentially malicious data detected")

    if payload.get("extractedData") is None:
        raise InvalidRequestError("No extracted data provided")

    try:
        return ExportRequest.model_validate(payload)
    except ValidationError as e:
        raise InvalidRequestError(format_validation_error(e)) from e


def export_workbook(payload: Any) -> ExportResult:
    """Build the XLSX export for a decoded request body.

    Raises:
        InvalidRequestError / UnsafePayloadError: request rejected (400)
        ExportRenderError: building or serializing the workbook failed (500)
    """
    request = parse_export_request(payload)
    record = request.extracted_data

    try:
        sheets = build_workbook(record, request.options)
        content = render_workbook(sheets)
    except Exception as e:
        logger.exception("Export generation failed", extra={"document_type": record.document_type})
        raise ExportRenderError(f"Export failed: {e}") from e

    filename = make_export_filename(settings.export_filename_prefix, record.document_type)
    logger.info(
        "Export generated",
        extra={"document_type": record.document_type, "sheets": len(sheets), "bytes": len(content), "export_filename": filename},
    )
    return ExportResult(
        content=content,
        filename=filename,
        document_type=record.document_type,
        sheet_count=len(sheets),
    )


def export_from_body(raw: bytes) -> ExportResult:
    """Decode a raw request body and export it."""
    try:
        payload = json.loads(raw)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise InvalidRequestError(f"Invalid JSON in request body: {e}") from e
    return export_workbook(payload)


__all__ = [
    "DANGEROUS_KEYS",
    "ExportError",
    "InvalidRequestError",
    "UnsafePayloadError",
    "ExportRenderError",
    "ExportResult",
    "find_unsafe_key",
    "parse_export_request",
    "export_workbook",
    "export_from_body",
]
