import json
import re
from datetime import datetime, timezone

import pytest

from app.services import exporter
from app.services.exporter import (
    ExportRenderError,
    InvalidRequestError,
    UnsafePayloadError,
    export_from_body,
    export_workbook,
    find_unsafe_key,
)
from app.utils.file_utils import make_export_filename, sanitize_filename

FILENAME_PATTERN = re.compile(r"^Extraction_rent_roll_\d{4}-\d{2}-\d{2}T\d{2}-\d{2}-\d{2}\.xlsx$")


def test_export_rent_roll_end_to_end(rent_roll_payload, read_workbook):
    result = export_workbook(rent_roll_payload)

    assert FILENAME_PATTERN.match(result.filename)
    assert result.sheet_count == 2
    assert result.content_type == "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

    sheets = read_workbook(result.content)
    assert list(sheets) == ["Summary", "Tenant Details"]
    assert ["Property Name", "Acme Plaza"] in sheets["Summary"]
    assert ["Total Rent", 12000] in sheets["Summary"]
    assert ["Occupancy Rate", 0.95] in sheets["Summary"]
    assert sheets["Tenant Details"] == [
        ["Tenant Details"],
        ["Suite Unit", "Tenant Name", "Base Rent"],
        ["101", "Foo", 1000],
    ]


def test_export_unknown_type_falls_back(read_workbook):
    result = export_workbook({"extractedData": {"documentType": "tax_return", "data": {"x": 1}}})
    sheets = read_workbook(result.content)
    assert list(sheets) == ["Extracted Data"]
    assert sheets["Extracted Data"][0] == ["Document Type", "tax_return"]
    assert result.filename.startswith("Extraction_tax_return_")


def test_export_options_raw_data_sheet(rent_roll_payload, read_workbook):
    rent_roll_payload["options"] = {"format": "xlsx", "includeRawData": True}
    sheets = read_workbook(export_workbook(rent_roll_payload).content)
    assert list(sheets)[-1] == "Raw Data"


@pytest.mark.parametrize("payload,message", [
    ({}, "No extracted data provided"),
    ({"extractedData": None}, "No extracted data provided"),
    ({"extractedData": {"data": {}}}, "Validation failed"),
    ({"extractedData": {"documentType": "rent_roll"}}, "Validation failed"),
    ({"extractedData": {"documentType": "", "data": {}}}, "Validation failed"),
    ({"extractedData": {"documentType": "rent_roll", "data": []}}, "Validation failed"),
    ({"extractedData": {"documentType": "rent_roll", "data": {}}, "options": {"format": "csv"}}, "Validation failed"),
    ([1, 2], "Request body must be a JSON object"),
])
def test_invalid_requests_are_rejected(payload, message):
    with pytest.raises(InvalidRequestError) as exc:
        export_workbook(payload)
    assert exc.value.status_code == 400
    assert exc.value.message.startswith(message)


@pytest.mark.parametrize("key", ["__proto__", "constructor", "prototype", "__class__"])
def test_unsafe_keys_are_rejected(key, rent_roll_payload):
    rent_roll_payload["extractedData"]["data"]["tenants"].append({key: {"polluted": True}})
    with pytest.raises(UnsafePayloadError) as exc:
        export_workbook(rent_roll_payload)
    assert exc.value.status_code == 400
    assert exc.value.message == "Invalid input: potentially malicious data detected"


def test_find_unsafe_key_reports_path():
    payload = {"extractedData": {"data": {"rows": [{}, {"__proto__": {}}]}}}
    assert find_unsafe_key(payload) == "extractedData.data.rows[1].__proto__"
    assert find_unsafe_key({"proto": 1, "constructors": [1]}) is None


def test_invalid_json_body():
    with pytest.raises(InvalidRequestError) as exc:
        export_from_body(b"{not json")
    assert exc.value.message.startswith("Invalid JSON")


def test_export_from_body(rent_roll_payload):
    result = export_from_body(json.dumps(rent_roll_payload).encode("utf-8"))
    assert result.document_type == "rent_roll"


def test_render_failure_maps_to_render_error(monkeypatch, rent_roll_payload):
    def boom(sheets):
        raise RuntimeError("disk full")

    monkeypatch.setattr(exporter, "render_workbook", boom)
    with pytest.raises(ExportRenderError) as exc:
        export_workbook(rent_roll_payload)
    assert exc.value.status_code == 500
    assert exc.value.message == "Export failed: disk full"


def test_make_export_filename():
    now = datetime(2025, 1, 31, 14, 5, 9, tzinfo=timezone.utc)
    assert make_export_filename("Extraction", "rent_roll", now) == "Extraction_rent_roll_2025-01-31T14-05-09.xlsx"
    assert make_export_filename("Extraction", "../etc/passwd", now).startswith("Extraction____etc_passwd_")


def test_sanitize_filename():
    assert sanitize_filename("a b/c") == "a_b_c"
    assert len(sanitize_filename("x" * 80)) == 50
