import os
from io import BytesIO
from typing import Dict, List

import pytest

# Keep test runs from writing logs/app.log
os.environ.setdefault("LOG_TO_FILE", "false")

from openpyxl import load_workbook  # noqa: E402


def _trim(row) -> List:
    values = list(row)
    while values and values[-1] in (None, ""):
        values.pop()
    return values


@pytest.fixture
def read_workbook():
    """Load .xlsx bytes into {sheet name: [row values]} with trailing blanks trimmed."""
    def _read(content: bytes) -> Dict[str, List[List]]:
        wb = load_workbook(BytesIO(content))
        return {
            ws.title: [_trim(row) for row in ws.iter_rows(values_only=True)]
            for ws in wb.worksheets
        }
    return _read


@pytest.fixture
def rent_roll_payload() -> Dict:
    return {
        "extractedData": {
            "documentType": "rent_roll",
            "metadata": {"propertyName": "Acme Plaza"},
            "data": {
                "summary": {"totalRent": 12000, "occupancyRate": 0.95},
                "tenants": [{"suiteUnit": "101", "tenantName": "Foo", "baseRent": 1000}],
            },
        }
    }


@pytest.fixture
def sample_records() -> Dict[str, Dict]:
    """Representative `data` payload per document type."""
    return {
        "rent_roll": {
            "tenants": [
                {"tenantName": "Foo LLC", "suiteUnit": "101", "baseRent": 1000, "squareFootage": 800,
                 "leaseType": "NNN", "occupancyStatus": "occupied"},
            ],
            "summary": {"totalRent": 1000, "occupancyRate": 1.0},
        },
        "operating_budget": {
            "period": "FY2024",
            "income": {"grossRentalIncome": 500000, "vacancyAllowance": -25000},
            "expenses": {"propertyTaxes": 60000, "insurance": 12000},
            "noi": 403000,
            "capexForecast": 20000,
            "cashFlow": 383000,
        },
        "broker_sales_comparables": {
            "comparables": [
                {"propertyAddress": "1 Main St", "salePrice": 1000000, "pricePerSF": 200, "capRate": 0.06},
            ],
        },
        "broker_lease_comparables": {
            "comparables": [
                {"propertyAddress": "2 Oak Ave", "baseRent": 30, "effectiveRent": 28},
            ],
        },
        "broker_listing": {
            "listingDetails": {"propertyOwner": "Owner LLC", "brokerFirm": "Brokers Inc", "listingType": "sale"},
            "propertyDetails": {"address": "3 Pine Rd", "squareFootage": 12000},
            "brokerDuties": ["Market the property", "Host tours"],
            "terminationProvisions": ["30 days notice"],
        },
        "offering_memo": {
            "propertyOverview": {"name": "Acme Plaza", "address": "1 Main St"},
            "investmentHighlights": ["Fully leased"],
            "pricing": {"askingPrice": 5000000, "capRate": 0.065},
            "comparables": [{"address": "9 Elm St", "salePrice": 4500000, "capRate": 0.07}],
        },
        "lease_agreement": {
            "parties": {"tenant": "Foo LLC", "landlord": "Acme Owner"},
            "leaseTerm": {"startDate": "2024-01-01", "endDate": "2029-12-31", "termMonths": 72},
            "defaultRemedies": ["Cure within 10 days"],
        },
        "financial_statements": {
            "period": "2023",
            "operatingIncome": {"rentalIncome": 900000, "totalIncome": 950000},
            "operatingExpenses": {"totalExpenses": 400000},
            "noi": 550000,
            "balanceSheet": {
                "assets": {"cash": 100000, "totalAssets": 5100000},
                "liabilities": {"mortgage": 3000000},
                "equity": 2100000,
            },
        },
        "comparable_sales": {
            "properties": [{"address": "5 Birch Ln", "salePrice": 750000, "saleDate": "2023-05-01"}],
        },
        "financial_statement": {
            "period": "2022",
            "revenue": {"grossRent": 100, "totalRevenue": 110},
            "expenses": {"totalExpenses": 50},
            "netOperatingIncome": 60,
        },
        "unknown": {"whatever": {"nested": [1, 2, 3]}},
    }
