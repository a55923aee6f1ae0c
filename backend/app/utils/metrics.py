"""Prometheus metrics helpers for export observability.

Metrics taxonomy:
Export operations:
    - export_requests_total (label document_type)
    - export_failures_total (label reason)
    - export_generation_seconds
    - export_bytes_total (counter of bytes delivered)
    - export_sheets_total (counter of worksheets rendered)
"""
from prometheus_client import Counter, Histogram

EXPORT_REQUESTS = Counter(
    "export_requests_total",
    "Total export requests that passed validation",
    ["document_type"]
)
EXPORT_FAILURES = Counter(
    "export_failures_total",
    "Total rejected or failed export requests",
    ["reason"]
)

# Export generation timing (record -> sheet definitions -> xlsx bytes)
EXPORT_GENERATION_SECONDS = Histogram(
    "export_generation_seconds",
    "Time to build and render an export workbook",
    buckets=(0.01, 0.05, 0.1, 0.25, 0.5, 1, 2, 5)
)
EXPORT_BYTES_TOTAL = Counter(
    "export_bytes_total",
    "Total bytes generated for exports"
)
EXPORT_SHEETS_TOTAL = Counter(
    "export_sheets_total",
    "Total worksheets rendered across all exports"
)

__all__ = [
    "EXPORT_REQUESTS",
    "EXPORT_FAILURES",
    "EXPORT_GENERATION_SECONDS",
    "EXPORT_BYTES_TOTAL",
    "EXPORT_SHEETS_TOTAL",
]
