"""Structured-to-tabular export engine.

Architecture:
- flattening: title formatting + nested payload -> dotted-path fields
- tables: dynamic tables, prefix-grouped sections, list blocks
- normalizers: canonical payload shapes for drifting extraction output
- document_builders: per-document-type sheet builders + dispatcher
- xlsx_renderer: SheetDefinitions -> .xlsx bytes (pandas + XlsxWriter)
"""

from .document_builders import build_workbook
from .flattening import flatten, format_title
from .sheets import SheetDefinition
from .tables import Section, TableOptions, build_table, render_sections
from .xlsx_renderer import render_workbook

__all__ = [
    'build_workbook',
    'flatten',
    'format_title',
    'SheetDefinition',
    'Section',
    'TableOptions',
    'build_table',
    'render_sections',
    'render_workbook',
]
