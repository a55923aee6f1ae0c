"""Sheet composition primitives shared by every document builder.

- build_table: array of records -> header row + one row per record
- render_sections: one record -> labelled key/value blocks grouped by path prefix
- render_list: array of narrative items -> labelled one-item-per-row block
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from .flattening import NOT_AVAILABLE, flatten, format_title, stringify_element
from .sheets import RowRole, SheetDefinition

NO_DATA_MARKER = "No data available"
OTHER_SECTION = "Other"

# Prefix used when a table is built over bare scalars instead of records
SCALAR_COLUMN = "value"


@dataclass
class TableOptions:
    title: Optional[str] = None
    exclude_fields: frozenset = frozenset()
    field_order: Sequence[str] = ()


@dataclass(frozen=True)
class Section:
    name: str
    prefix: str


def _flatten_record(record: Any) -> Dict[str, Any]:
    if isinstance(record, dict):
        return flatten(record)
    return flatten(record, SCALAR_COLUMN)


def resolve_columns(first_record: Any, options: TableOptions) -> List[str]:
    """Column set discovered from the first record, then excluded and reordered.

    Paths that only appear in later records are not columns; their values are
    dropped from the sheet.
    """
    discovered = [
        path for path in _flatten_record(first_record)
        if path not in options.exclude_fields
    ]
    ordered = [path for path in options.field_order if path in discovered]
    # field_order may repeat a path; keep the first occurrence only
    ordered = list(dict.fromkeys(ordered))
    return ordered + [path for path in discovered if path not in ordered]


def build_table(sheet: SheetDefinition, records: Optional[Sequence[Any]], options: Optional[TableOptions] = None) -> None:
    """Append a table for `records` to `sheet`.

    An empty or missing array writes the single no-data row and nothing else,
    whatever the options say.
    """
    options = options or TableOptions()
    starts_sheet = not sheet.rows
    sheet.ensure_spacing()
    if not records:
        sheet.add_row([NO_DATA_MARKER])
        return

    columns = resolve_columns(records[0], options)

    if options.title:
        sheet.add_title(options.title)
    sheet.add_row([format_title(column) for column in columns], RowRole.HEADER)
    if starts_sheet:
        sheet.freeze_rows = len(sheet.rows)

    for record in records:
        flat = _flatten_record(record)
        sheet.add_row([flat.get(column, NOT_AVAILABLE) for column in columns])


def render_sections(sheet: SheetDefinition, record: Any, sections: Sequence[Section]) -> None:
    """Append one labelled block per section, then an "Other" block for the rest.

    Blocks come out in declaration order with the residual block last. Sections
    that match no field are skipped, as is an empty residual block.
    """
    flat = flatten(record)
    claimed = set()

    for section in sections:
        marker = f"{section.prefix}."
        rows = []
        for path, value in flat.items():
            if path.startswith(marker):
                claimed.add(path)
                rows.append([format_title(path[len(marker):]), value])
        _emit_block(sheet, section.name, rows)

    residual = [[format_title(path), value] for path, value in flat.items() if path not in claimed]
    _emit_block(sheet, OTHER_SECTION, residual)


def render_list(sheet: SheetDefinition, title: str, items: Any) -> None:
    """Append a labelled block with one narrative item per row."""
    if items is None:
        return
    if not isinstance(items, (list, tuple)):
        items = [items]
    rows = [["", _list_item_text(item)] for item in items]
    _emit_block(sheet, title, rows)


def _list_item_text(item: Any) -> str:
    if isinstance(item, dict):
        return "; ".join(f"{format_title(path)}: {value}" for path, value in flatten(item).items())
    return stringify_element(item)


def _emit_block(sheet: SheetDefinition, name: str, rows: List[List[Any]]) -> None:
    if not rows:
        return
    sheet.ensure_spacing()
    sheet.add_row([name], RowRole.SECTION)
    for row in rows:
        sheet.add_row(row)


__all__ = [
    "NO_DATA_MARKER",
    "OTHER_SECTION",
    "TableOptions",
    "Section",
    "resolve_columns",
    "build_table",
    "render_sections",
    "render_list",
]
