"""XLSX rendering backend: SheetDefinitions -> workbook bytes.

Uses pandas + XlsxWriter. Each sheet is written as a headerless DataFrame,
then styled rows are re-written with the format derived from their role.
"""
from __future__ import annotations

import io
import re
from typing import Any, Dict, Optional, Sequence, Set

import pandas as pd

from app.config import settings

from .sheets import CellStyle, RowRole, SheetDefinition, column_widths, style_for

XLSX_CONTENT_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

# Excel sheet name limit 31 chars, and these characters are rejected
MAX_SHEET_NAME = 31
_INVALID_SHEET_CHARS = re.compile(r"[\[\]:*?/\\]")

# Extracted text is data: never let "=..." become a formula or URLs become links
WORKBOOK_OPTIONS = {"strings_to_formulas": False, "strings_to_urls": False}


def safe_sheet_name(name: str, used: Set[str]) -> str:
    """Excel-safe, unique (case-insensitive) sheet name."""
    base = _INVALID_SHEET_CHARS.sub("", name or "").strip().strip("'")[:MAX_SHEET_NAME] or "Sheet"
    candidate = base
    counter = 2
    while candidate.lower() in used:
        suffix = f" ({counter})"
        candidate = f"{base[:MAX_SHEET_NAME - len(suffix)]}{suffix}"
        counter += 1
    used.add(candidate.lower())
    return candidate


def format_properties(style: CellStyle) -> Dict[str, Any]:
    """Translate a style descriptor into XlsxWriter format properties."""
    props: Dict[str, Any] = {}
    if style.bold:
        props["bold"] = True
    if style.font_size:
        props["font_size"] = style.font_size
    if style.font_color:
        props["font_color"] = f"#{style.font_color}"
    if style.fill_color:
        props["bg_color"] = f"#{style.fill_color}"
        props["pattern"] = 1
    if style.border:
        props["border"] = 1
    if style.wrap:
        props["text_wrap"] = True
    return props


def render_workbook(sheets: Sequence[SheetDefinition]) -> bytes:
    """Serialize sheet definitions into an .xlsx byte string."""
    bio = io.BytesIO()
    used_names: Set[str] = set()

    with pd.ExcelWriter(bio, engine="xlsxwriter", engine_kwargs={"options": WORKBOOK_OPTIONS}) as writer:
        workbook = writer.book
        formats: Dict[RowRole, Any] = {}

        def format_for(role: RowRole) -> Optional[Any]:
            style = style_for(role)
            if style is None:
                return None
            if role not in formats:
                formats[role] = workbook.add_format(format_properties(style))
            return formats[role]

        for sheet in sheets:
            name = safe_sheet_name(sheet.name, used_names)
            frame = pd.DataFrame(sheet.values)
            frame.to_excel(writer, sheet_name=name, header=False, index=False)
            worksheet = writer.sheets[name]

            for idx, row in enumerate(sheet.rows):
                cell_format = format_for(row.role)
                if cell_format is not None and row.values:
                    worksheet.write_row(idx, 0, row.values, cell_format)

            for idx, width in enumerate(column_widths(
                sheet.rows, settings.export_min_column_width, settings.export_max_column_width
            )):
                worksheet.set_column(idx, idx, width)

            if sheet.raw_text:
                wrap = workbook.add_format({"text_wrap": True, "valign": "top"})
                worksheet.set_column(0, 0, settings.export_raw_text_column_width, wrap)

            if sheet.freeze_rows:
                worksheet.freeze_panes(sheet.freeze_rows, 0)

    return bio.getvalue()


__all__ = [
    "XLSX_CONTENT_TYPE",
    "safe_sheet_name",
    "format_properties",
    "render_workbook",
]
