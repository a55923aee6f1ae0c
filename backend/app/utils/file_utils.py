# app/utils/file_utils.py
from datetime import datetime, timezone
from typing import Optional
import re

def sanitize_filename(filename: str) -> str:
    """Remove unsafe characters and limit length for filenames."""
    safe = re.sub(r'[^a-zA-Z0-9_-]', '_', filename)
    return safe[:50]  # prevent super long names

def export_timestamp(now: Optional[datetime] = None) -> str:
    """ISO-8601 UTC timestamp to the second with colons replaced, e.g. 2025-01-31T14-05-09."""
    now = now or datetime.now(timezone.utc)
    return now.strftime("%Y-%m-%dT%H:%M:%S").replace(":", "-")

def make_export_filename(prefix: str, document_type: str, now: Optional[datetime] = None) -> str:
    """Generate the attachment filename: <prefix>_<documentType>_<timestamp>.xlsx"""
    safe_type = sanitize_filename(document_type) or "unknown"
    return f"{sanitize_filename(prefix)}_{safe_type}_{export_timestamp(now)}.xlsx"
