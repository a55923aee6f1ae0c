"""Sheet definitions and declarative styling.

The export engine never touches a spreadsheet library. Builders append rows to
a SheetDefinition and tag each row with a role; the renderer turns roles into
concrete formats via `style_for`.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence

# Excel (and XlsxWriter) cap a cell at 32,767 characters; longer strings are truncated
MAX_CELL_CHARS = 32767


class RowRole(str, Enum):
    TITLE = "title"
    HEADER = "header"
    SECTION = "section"
    DATA = "data"
    BLANK = "blank"


@dataclass(frozen=True)
class CellStyle:
    """Backend-agnostic style descriptor for a whole row."""
    bold: bool = False
    font_size: Optional[int] = None
    font_color: Optional[str] = None  # hex RGB without '#'
    fill_color: Optional[str] = None
    border: bool = False
    wrap: bool = False


_STYLES: Dict[RowRole, CellStyle] = {
    RowRole.TITLE: CellStyle(bold=True, font_size=14, font_color="1F3864"),
    RowRole.HEADER: CellStyle(bold=True, fill_color="E6F3FF", border=True),
    RowRole.SECTION: CellStyle(bold=True, font_size=12, fill_color="F2F2F2"),
}


def style_for(role: RowRole) -> Optional[CellStyle]:
    """Style descriptor for a row role (None means default formatting)."""
    return _STYLES.get(role)


@dataclass
class SheetRow:
    values: List[Any]
    role: RowRole = RowRole.DATA


@dataclass
class SheetDefinition:
    """One worksheet: an ordered list of rows plus layout hints."""
    name: str
    rows: List[SheetRow] = field(default_factory=list)
    freeze_rows: Optional[int] = None
    # Widen column 0 for sheets holding one long text cell (raw JSON dumps)
    raw_text: bool = False

    def add_row(self, values: Sequence[Any], role: RowRole = RowRole.DATA) -> SheetRow:
        row = SheetRow(values=list(values), role=role)
        self.rows.append(row)
        return row

    def add_title(self, text: str) -> SheetRow:
        return self.add_row([text], RowRole.TITLE)

    def add_blank_row(self) -> None:
        self.rows.append(SheetRow(values=[], role=RowRole.BLANK))

    def ensure_spacing(self) -> None:
        """Add a blank separator row unless the sheet is empty or already ends with one."""
        if self.rows and self.rows[-1].role != RowRole.BLANK:
            self.add_blank_row()

    @property
    def title(self) -> Optional[str]:
        for row in self.rows:
            if row.role == RowRole.TITLE and row.values:
                return str(row.values[0])
        return None

    @property
    def values(self) -> List[List[Any]]:
        return [row.values for row in self.rows]

    def is_empty(self) -> bool:
        return not any(row.values for row in self.rows)


def split_cell_text(text: str, limit: int = MAX_CELL_CHARS) -> List[str]:
    """Split text into cell-sized chunks so that `"".join(chunks) == text`.

    Whole lines are packed together while they fit; a single line longer than
    `limit` is cut into fixed-size pieces.
    """
    chunks: List[str] = []
    current = ""
    for line in text.splitlines(keepends=True):
        if len(current) + len(line) <= limit:
            current += line
            continue
        if current:
            chunks.append(current)
            current = ""
        while len(line) > limit:
            chunks.append(line[:limit])
            line = line[limit:]
        current = line
    if current or not chunks:
        chunks.append(current)
    return chunks


def column_widths(rows: Sequence[SheetRow], min_width: int, max_width: int) -> List[int]:
    """Width per column, wide enough for the longest cell text.

    Header cells are never clamped so every column label stays readable; other
    cells are clamped to `max_width`. Title rows are ignored so a long sheet
    title does not blow up column A.
    """
    widths: List[int] = []
    for row in rows:
        if row.role == RowRole.TITLE:
            continue
        for idx, value in enumerate(row.values):
            length = len(str(value)) + 2 if value is not None else 0
            if row.role != RowRole.HEADER:
                length = min(length, max_width)
            if idx >= len(widths):
                widths.append(min_width)
            widths[idx] = max(widths[idx], length)
    return widths


__all__ = [
    "RowRole",
    "CellStyle",
    "SheetRow",
    "SheetDefinition",
    "MAX_CELL_CHARS",
    "style_for",
    "split_cell_text",
    "column_widths",
]
