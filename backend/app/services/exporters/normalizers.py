"""Reshape raw extraction payloads into the canonical per-type layout.

The extraction model does not always return the documented shape: broker
comparables arrive nested, summaries are sometimes missing, offering memos and
financial statements drop whole blocks. These helpers never raise; anything
they do not understand is passed through untouched.
"""
from __future__ import annotations

import math
from typing import Any, Dict, List, Optional

# nested comparable groups emitted by the extraction prompt
_NESTED_COMP_GROUPS = (
    "transactionDetails",
    "pricingMetrics",
    "propertyCharacteristics",
    "financialPerformance",
    "transactionParties",
)


def _group(item: Dict[str, Any], name: str) -> Dict[str, Any]:
    value = item.get(name)
    return value if isinstance(value, dict) else {}


def _first(*values: Any) -> Any:
    """First value that is not None/empty-string/zero (mirrors `a || b` fallbacks)."""
    for value in values:
        if value not in (None, "", 0):
            return value
    return None


def _numeric_values(items: List[Any], field: str) -> List[float]:
    values = []
    for item in items:
        if not isinstance(item, dict):
            continue
        value = item.get(field)
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            continue
        if math.isnan(value):
            continue
        values.append(value)
    return values


def calculate_average(items: List[Any], field: str) -> float:
    values = _numeric_values(items, field)
    if not values:
        return 0
    return sum(values) / len(values)


def calculate_range(items: List[Any], field: str) -> Dict[str, float]:
    values = _numeric_values(items, field)
    if not values:
        return {"min": 0, "max": 0}
    return {"min": min(values), "max": max(values)}


def _flatten_sales_comparable(comp: Any) -> Any:
    if not isinstance(comp, dict) or not any(name in comp for name in _NESTED_COMP_GROUPS):
        return comp

    tx = _group(comp, "transactionDetails")
    pricing = _group(comp, "pricingMetrics")
    chars = _group(comp, "propertyCharacteristics")
    perf = _group(comp, "financialPerformance")
    parties = _group(comp, "transactionParties")
    return {
        "propertyAddress": _first(comp.get("propertyAddress"), chars.get("propertyAddress")) or "N/A",
        "propertyType": _first(chars.get("propertyType"), comp.get("propertyType")) or "N/A",
        "saleDate": _first(tx.get("saleDate"), comp.get("saleDate")) or "",
        "salePrice": _first(tx.get("salePrice"), comp.get("salePrice")) or 0,
        "pricePerSF": _first(pricing.get("pricePerSquareFoot"), comp.get("pricePerSF")) or 0,
        "pricePerUnit": _first(pricing.get("pricePerUnit"), comp.get("pricePerUnit")),
        "buildingSize": _first(chars.get("totalBuildingSquareFeet"), comp.get("buildingSize")) or 0,
        "landSize": _first(chars.get("landAreaSquareFeet"), comp.get("landSize")),
        "yearBuilt": _first(chars.get("yearBuilt"), comp.get("yearBuilt")),
        "yearRenovated": _first(chars.get("yearRenovated"), comp.get("yearRenovated")),
        "occupancyAtSale": _first(perf.get("occupancyRateAtSale"), comp.get("occupancyAtSale")) or 0,
        "capRate": _first(perf.get("capRateAtSale"), comp.get("capRate")),
        "noiAtSale": _first(perf.get("noiAtSale"), comp.get("noiAtSale")),
        "buyer": _first(parties.get("buyerName"), comp.get("buyer")),
        "seller": _first(parties.get("sellerName"), comp.get("seller")),
    }


def normalize_broker_sales_comparables(data: Any) -> Any:
    if not isinstance(data, dict):
        return data
    if isinstance(data.get("comparables"), list) and isinstance(data.get("summary"), dict):
        return data

    raw_comps = data.get("comparableSales") or data.get("comparables") or []
    if not isinstance(raw_comps, list):
        raw_comps = [raw_comps]
    comparables = [_flatten_sales_comparable(comp) for comp in raw_comps]

    summary = data.get("summary")
    if not isinstance(summary, dict) or not summary.get("averagePricePerSF"):
        market = data.get("marketAnalysis") if isinstance(data.get("marketAnalysis"), dict) else {}
        pricing = market.get("pricingAnalysis") if isinstance(market.get("pricingAnalysis"), dict) else {}
        cap_rates = market.get("capRateAnalysis") if isinstance(market.get("capRateAnalysis"), dict) else {}
        summary = {
            "averagePricePerSF": pricing.get("averagePricePerSF") or calculate_average(comparables, "pricePerSF"),
            "averageCapRate": cap_rates.get("averageCapRate") or calculate_average(comparables, "capRate"),
            "priceRange": pricing.get("pricePerSFRange") or calculate_range(comparables, "pricePerSF"),
        }

    normalized = {key: value for key, value in data.items() if key not in ("comparableSales", "comparables", "summary")}
    normalized["comparables"] = comparables
    normalized["summary"] = summary
    return normalized


def normalize_broker_lease_comparables(data: Any) -> Any:
    if not isinstance(data, dict):
        return data
    comparables = data.get("comparables") or []
    if not isinstance(comparables, list):
        comparables = [comparables]
    summary = data.get("summary")
    if not isinstance(summary, dict):
        summary = {
            "averageBaseRent": calculate_average(comparables, "baseRent"),
            "averageEffectiveRent": calculate_average(comparables, "effectiveRent"),
            "rentRange": calculate_range(comparables, "baseRent"),
        }
    return {**data, "comparables": comparables, "summary": summary}


def _with_defaults(data: Dict[str, Any], defaults: Dict[str, Any]) -> Dict[str, Any]:
    normalized = dict(data)
    for key, default in defaults.items():
        if normalized.get(key) is None:
            normalized[key] = default
    return normalized


def normalize_offering_memo(data: Any) -> Any:
    if not isinstance(data, dict):
        return data
    return _with_defaults(data, {
        "propertyOverview": {},
        "investmentHighlights": [],
        "marketOverview": "",
        "rentRollSummary": {},
        "operatingStatement": {},
        "leaseTerms": [],
        "comparables": [],
        "pricing": {},
        "locationData": {},
    })


def normalize_financial_statements(data: Any) -> Any:
    if not isinstance(data, dict):
        return data
    return _with_defaults(data, {
        "period": "",
        "operatingIncome": {},
        "operatingExpenses": {},
    })


def as_records(value: Any) -> Optional[List[Any]]:
    """Coerce a payload field into a list of table records (None when absent)."""
    if value is None:
        return None
    if isinstance(value, list):
        return value
    if isinstance(value, tuple):
        return list(value)
    return [value]


__all__ = [
    "calculate_average",
    "calculate_range",
    "normalize_broker_sales_comparables",
    "normalize_broker_lease_comparables",
    "normalize_offering_memo",
    "normalize_financial_statements",
    "as_records",
]
