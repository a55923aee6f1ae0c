"""Per-document-type workbook builders and the dispatcher that routes to them.

Every DocumentType except UNKNOWN has exactly one registered builder; this is
checked when the module is imported, so adding an enum member without a builder
fails fast. Tags outside the enum (and UNKNOWN itself) go to the generic
fallback, which dumps the raw payload so nothing is ever exported empty.

Builders only compose the primitives in `tables`; they never touch a
spreadsheet library.
"""
from __future__ import annotations

import json
from typing import Any, Callable, Dict, Iterable, List, Optional

from app.models import DocumentType, ExportOptions, ExtractedRecord
from app.utils.logging import logger

from .flattening import NOT_AVAILABLE
from .normalizers import (
    as_records,
    normalize_broker_lease_comparables,
    normalize_broker_sales_comparables,
    normalize_financial_statements,
    normalize_offering_memo,
)
from .sheets import RowRole, SheetDefinition, split_cell_text
from .tables import Section, TableOptions, build_table, render_list, render_sections

Builder = Callable[[ExtractedRecord, ExportOptions], List[SheetDefinition]]

DOCUMENT_BUILDERS: Dict[DocumentType, Builder] = {}

PROPERTY_SECTION = Section("Property Information", "metadata")


def register_builder(*document_types: DocumentType) -> Callable[[Builder], Builder]:
    """Register a builder for one or more document types."""
    def decorator(func: Builder) -> Builder:
        for document_type in document_types:
            if document_type in DOCUMENT_BUILDERS:
                raise RuntimeError(f"Duplicate export builder for {document_type.value}")
            DOCUMENT_BUILDERS[document_type] = func
        return func
    return decorator


# ---------- helpers ----------

def _pick(data: Dict[str, Any], keys: Iterable[str]) -> Dict[str, Any]:
    return {key: data[key] for key in keys if key in data}


def _omit(data: Dict[str, Any], keys: Iterable[str]) -> Dict[str, Any]:
    skip = set(keys)
    return {key: value for key, value in data.items() if key not in skip}


def _summary_record(record: ExtractedRecord, options: ExportOptions, body: Dict[str, Any]) -> Dict[str, Any]:
    """Record for render_sections with the metadata block first (when requested)."""
    if not (options.include_metadata and record.metadata):
        return dict(body)

    # A "metadata" block inside the payload is merged under the record's own
    # metadata, which wins on conflicting keys.
    nested = body.get("metadata")
    merged: Dict[str, Any] = {}
    if isinstance(nested, dict):
        merged.update(nested)
    elif nested is not None:
        merged["value"] = nested
    merged.update(record.metadata)

    composed: Dict[str, Any] = {"metadata": merged}
    composed.update(_omit(body, ("metadata",)))
    return composed


def _sections(options: ExportOptions, *sections: Section) -> List[Section]:
    declared = [PROPERTY_SECTION] if options.include_metadata else []
    return declared + list(sections)


def _extraction_timestamp(metadata: Dict[str, Any]) -> Any:
    for key in ("extractionTimestamp", "extractedDate"):
        if metadata.get(key) not in (None, ""):
            return metadata[key]
    return NOT_AVAILABLE


def _raw_text(data: Any) -> str:
    return json.dumps(data, indent=2, ensure_ascii=False, default=str)


def _add_raw_text(sheet: SheetDefinition, data: Any) -> None:
    # Large payloads span consecutive rows; joining the cells restores the JSON
    for chunk in split_cell_text(_raw_text(data)):
        sheet.add_row([chunk])


# ---------- builders ----------

@register_builder(DocumentType.RENT_ROLL)
def build_rent_roll(record: ExtractedRecord, options: ExportOptions) -> List[SheetDefinition]:
    data = record.data
    tenants = as_records(data.get("tenants"))
    if tenants is None:
        # first-generation rent rolls listed units under "properties"
        tenants = as_records(data.get("properties"))

    summary = SheetDefinition("Summary")
    summary.add_title("Rent Roll Summary")
    render_sections(
        summary,
        _summary_record(record, options, _omit(data, ("tenants", "properties"))),
        _sections(options, Section("Financial Summary", "summary")),
    )

    details = SheetDefinition("Tenant Details")
    build_table(details, tenants, TableOptions(
        title="Tenant Details",
        field_order=(
            "suiteUnit", "tenantName", "squareFootage", "baseRent", "leaseStart",
            "leaseEnd", "leaseType", "occupancyStatus",
        ),
    ))
    return [summary, details]


@register_builder(DocumentType.OPERATING_BUDGET)
def build_operating_budget(record: ExtractedRecord, options: ExportOptions) -> List[SheetDefinition]:
    data = record.data
    body = {
        "budget": _pick(data, ("period",)),
        **_pick(data, ("income", "expenses")),
        "results": _pick(data, ("noi", "capexForecast", "cashFlow")),
        **_omit(data, ("period", "income", "expenses", "noi", "capexForecast", "cashFlow")),
    }
    sheet = SheetDefinition("Operating Budget")
    sheet.add_title("Operating Budget")
    render_sections(sheet, _summary_record(record, options, body), _sections(
        options,
        Section("Budget Period", "budget"),
        Section("Income", "income"),
        Section("Expenses", "expenses"),
        Section("Results", "results"),
    ))
    return [sheet]


@register_builder(DocumentType.BROKER_SALES_COMPARABLES)
def build_broker_sales_comparables(record: ExtractedRecord, options: ExportOptions) -> List[SheetDefinition]:
    data = normalize_broker_sales_comparables(record.data)

    summary = SheetDefinition("Summary")
    summary.add_title("Sales Comparables Summary")
    render_sections(summary, _summary_record(record, options, _omit(data, ("comparables",))), _sections(
        options,
        Section("Market Summary", "summary"),
        Section("Market Analysis", "marketAnalysis"),
    ))

    comps = SheetDefinition("Sales Comparables")
    build_table(comps, as_records(data.get("comparables")), TableOptions(
        title="Sales Comparables",
        field_order=("propertyAddress", "propertyType", "saleDate", "salePrice", "pricePerSF", "capRate"),
    ))
    return [summary, comps]


@register_builder(DocumentType.BROKER_LEASE_COMPARABLES)
def build_broker_lease_comparables(record: ExtractedRecord, options: ExportOptions) -> List[SheetDefinition]:
    data = normalize_broker_lease_comparables(record.data)

    summary = SheetDefinition("Summary")
    summary.add_title("Lease Comparables Summary")
    render_sections(summary, _summary_record(record, options, _omit(data, ("comparables",))), _sections(
        options,
        Section("Market Summary", "summary"),
    ))

    comps = SheetDefinition("Lease Comparables")
    build_table(comps, as_records(data.get("comparables")), TableOptions(
        title="Lease Comparables",
        field_order=(
            "propertyAddress", "tenantIndustry", "leaseCommencementDate", "leaseTerm",
            "squareFootage", "baseRent", "effectiveRent", "leaseType",
        ),
    ))
    return [summary, comps]


@register_builder(DocumentType.BROKER_LISTING)
def build_broker_listing(record: ExtractedRecord, options: ExportOptions) -> List[SheetDefinition]:
    data = record.data
    list_fields = ("brokerDuties", "terminationProvisions")

    sheet = SheetDefinition("Listing")
    sheet.add_title("Broker Listing Agreement")
    render_sections(sheet, _summary_record(record, options, _omit(data, list_fields)), _sections(
        options,
        Section("Listing Details", "listingDetails"),
        Section("Property Details", "propertyDetails"),
    ))
    render_list(sheet, "Broker Duties", data.get("brokerDuties"))
    render_list(sheet, "Termination Provisions", data.get("terminationProvisions"))
    return [sheet]


@register_builder(DocumentType.OFFERING_MEMO)
def build_offering_memo(record: ExtractedRecord, options: ExportOptions) -> List[SheetDefinition]:
    data = normalize_offering_memo(record.data)
    list_fields = ("investmentHighlights", "leaseTerms", "comparables")

    sheet = SheetDefinition("Offering Memo")
    sheet.add_title("Offering Memorandum")
    render_sections(sheet, _summary_record(record, options, _omit(data, list_fields)), _sections(
        options,
        Section("Property Overview", "propertyOverview"),
        Section("Pricing", "pricing"),
        Section("Rent Roll Summary", "rentRollSummary"),
        Section("Operating Statement", "operatingStatement"),
        Section("Location", "locationData"),
    ))
    render_list(sheet, "Investment Highlights", data.get("investmentHighlights"))
    render_list(sheet, "Lease Terms", data.get("leaseTerms"))

    comps = SheetDefinition("Comparables")
    build_table(comps, as_records(data.get("comparables")), TableOptions(
        title="Comparable Sales",
        field_order=("address", "salePrice", "capRate"),
    ))
    return [sheet, comps]


@register_builder(DocumentType.LEASE_AGREEMENT)
def build_lease_agreement(record: ExtractedRecord, options: ExportOptions) -> List[SheetDefinition]:
    data = record.data
    list_fields = ("renewalOptions", "defaultRemedies", "insuranceRequirements")

    sheet = SheetDefinition("Lease Agreement")
    sheet.add_title("Lease Agreement")
    render_sections(sheet, _summary_record(record, options, _omit(data, list_fields)), _sections(
        options,
        Section("Parties", "parties"),
        Section("Premises", "premises"),
        Section("Lease Term", "leaseTerm"),
        Section("Rent Schedule", "rentSchedule"),
        Section("Operating Expenses", "operatingExpenses"),
        Section("Maintenance Obligations", "maintenanceObligations"),
    ))
    render_list(sheet, "Renewal Options", data.get("renewalOptions"))
    render_list(sheet, "Default Remedies", data.get("defaultRemedies"))
    render_list(sheet, "Insurance Requirements", data.get("insuranceRequirements"))
    return [sheet]


@register_builder(DocumentType.FINANCIAL_STATEMENTS)
def build_financial_statements(record: ExtractedRecord, options: ExportOptions) -> List[SheetDefinition]:
    data = normalize_financial_statements(record.data)

    income = SheetDefinition("Income Statement")
    income.add_title("Financial Statements")
    render_sections(income, _summary_record(record, options, _omit(data, ("balanceSheet",))), _sections(
        options,
        Section("Operating Income", "operatingIncome"),
        Section("Operating Expenses", "operatingExpenses"),
        Section("Capital Expenditures", "capex"),
    ))
    sheets = [income]

    balance = data.get("balanceSheet")
    if isinstance(balance, dict) and balance:
        balance_sheet = SheetDefinition("Balance Sheet")
        balance_sheet.add_title("Balance Sheet")
        render_sections(balance_sheet, balance, [
            Section("Assets", "assets"),
            Section("Liabilities", "liabilities"),
        ])
        sheets.append(balance_sheet)
    return sheets


@register_builder(DocumentType.COMPARABLE_SALES)
def build_comparable_sales(record: ExtractedRecord, options: ExportOptions) -> List[SheetDefinition]:
    sheet = SheetDefinition("Comparable Sales")
    build_table(sheet, as_records(record.data.get("properties")), TableOptions(
        title="Comparable Sales",
        field_order=("address", "salePrice", "saleDate", "squareFeet", "pricePerSqFt", "propertyType", "yearBuilt"),
    ))
    return [sheet]


@register_builder(DocumentType.FINANCIAL_STATEMENT)
def build_financial_statement(record: ExtractedRecord, options: ExportOptions) -> List[SheetDefinition]:
    sheet = SheetDefinition("Financial Statement")
    sheet.add_title("Financial Statement")
    render_sections(sheet, _summary_record(record, options, record.data), _sections(
        options,
        Section("Revenue", "revenue"),
        Section("Expenses", "expenses"),
    ))
    return [sheet]


def build_generic(record: ExtractedRecord, options: ExportOptions) -> List[SheetDefinition]:
    """Fallback for unknown tags: type, extraction date and the raw payload as text."""
    sheet = SheetDefinition("Extracted Data", raw_text=True)
    sheet.add_row(["Document Type", record.document_type])
    sheet.add_row(["Extraction Date", _extraction_timestamp(record.metadata)])
    sheet.add_blank_row()
    sheet.add_row(["Raw Data"], RowRole.SECTION)
    _add_raw_text(sheet, record.data)
    return [sheet]


def build_raw_data_sheet(record: ExtractedRecord) -> SheetDefinition:
    sheet = SheetDefinition("Raw Data", raw_text=True)
    sheet.add_title("Raw Extraction Data")
    _add_raw_text(sheet, {"documentType": record.document_type, "metadata": record.metadata, "data": record.data})
    return sheet


def _check_coverage() -> None:
    missing = [t.value for t in DocumentType if t is not DocumentType.UNKNOWN and t not in DOCUMENT_BUILDERS]
    if missing:
        raise RuntimeError(f"No export builder registered for: {', '.join(missing)}")


_check_coverage()


def build_workbook(record: ExtractedRecord, options: Optional[ExportOptions] = None) -> List[SheetDefinition]:
    """Route a tagged record to its builder and return the sheets to render."""
    options = options or ExportOptions()
    document_type = record.known_type
    builder = DOCUMENT_BUILDERS.get(document_type) if document_type else None

    if builder is None:
        logger.info("No dedicated builder, using generic export", extra={"document_type": record.document_type})
        builder = build_generic

    sheets = builder(record, options)
    if options.include_raw_data:
        sheets.append(build_raw_data_sheet(record))
    return sheets


__all__ = [
    "DOCUMENT_BUILDERS",
    "register_builder",
    "build_generic",
    "build_workbook",
]
