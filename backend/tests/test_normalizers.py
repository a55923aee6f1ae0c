from app.services.exporters.normalizers import (
    as_records,
    calculate_average,
    calculate_range,
    normalize_broker_lease_comparables,
    normalize_broker_sales_comparables,
    normalize_financial_statements,
    normalize_offering_memo,
)


def test_calculate_average_skips_non_numeric():
    items = [{"p": 100}, {"p": "n/a"}, {"p": None}, {"p": 300}, {"p": True}, "junk"]
    assert calculate_average(items, "p") == 200
    assert calculate_average([], "p") == 0


def test_calculate_range():
    assert calculate_range([{"p": 5}, {"p": 1}, {"p": 3}], "p") == {"min": 1, "max": 5}
    assert calculate_range([{"q": 1}], "p") == {"min": 0, "max": 0}


def test_sales_comparables_canonical_shape_passes_through():
    data = {"comparables": [{"propertyAddress": "1 Main"}], "summary": {"averagePricePerSF": 10}}
    assert normalize_broker_sales_comparables(data) is data


def test_sales_comparables_nested_groups_are_flattened():
    data = {
        "comparableSales": [
            {
                "propertyAddress": "1 Main St",
                "transactionDetails": {"saleDate": "2024-03-01", "salePrice": 2000000},
                "pricingMetrics": {"pricePerSquareFoot": 250},
                "propertyCharacteristics": {"propertyType": "Office", "totalBuildingSquareFeet": 8000},
                "financialPerformance": {"capRateAtSale": 0.06},
                "transactionParties": {"buyerName": "Buyer Co", "sellerName": "Seller Co"},
            },
            {
                "propertyAddress": "2 Main St",
                "pricingMetrics": {"pricePerSquareFoot": 150},
            },
        ]
    }
    result = normalize_broker_sales_comparables(data)

    first = result["comparables"][0]
    assert first["propertyType"] == "Office"
    assert first["salePrice"] == 2000000
    assert first["pricePerSF"] == 250
    assert first["buildingSize"] == 8000
    assert first["capRate"] == 0.06
    assert first["buyer"] == "Buyer Co"
    assert result["comparables"][1]["propertyType"] == "N/A"
    assert "comparableSales" not in result

    assert result["summary"]["averagePricePerSF"] == 200
    assert result["summary"]["priceRange"] == {"min": 150, "max": 250}


def test_sales_comparables_summary_prefers_market_analysis():
    data = {
        "comparables": [{"pricePerSF": 100, "capRate": 0.05}],
        "marketAnalysis": {
            "pricingAnalysis": {"averagePricePerSF": 180},
            "capRateAnalysis": {"averageCapRate": 0.07},
        },
    }
    summary = normalize_broker_sales_comparables(data)["summary"]
    assert summary["averagePricePerSF"] == 180
    assert summary["averageCapRate"] == 0.07
    assert summary["priceRange"] == {"min": 100, "max": 100}


def test_lease_comparables_summary_is_derived():
    data = {"comparables": [{"baseRent": 30, "effectiveRent": 28}, {"baseRent": 40, "effectiveRent": 36}]}
    result = normalize_broker_lease_comparables(data)
    assert result["summary"] == {
        "averageBaseRent": 35,
        "averageEffectiveRent": 32,
        "rentRange": {"min": 30, "max": 40},
    }


def test_lease_comparables_existing_summary_kept():
    summary = {"averageBaseRent": 1}
    assert normalize_broker_lease_comparables({"summary": summary})["summary"] is summary


def test_offering_memo_defaults_fill_only_missing_blocks():
    result = normalize_offering_memo({"pricing": {"askingPrice": 1}, "investmentHighlights": None})
    assert result["pricing"] == {"askingPrice": 1}
    assert result["investmentHighlights"] == []
    assert result["comparables"] == []
    assert result["propertyOverview"] == {}


def test_financial_statements_defaults():
    result = normalize_financial_statements({"noi": 5})
    assert result == {"noi": 5, "period": "", "operatingIncome": {}, "operatingExpenses": {}}


def test_non_mapping_payloads_pass_through():
    for normalize in (
        normalize_broker_sales_comparables,
        normalize_broker_lease_comparables,
        normalize_offering_memo,
        normalize_financial_statements,
    ):
        assert normalize(["not", "a", "dict"]) == ["not", "a", "dict"]


def test_as_records():
    assert as_records(None) is None
    assert as_records([1]) == [1]
    assert as_records({"a": 1}) == [{"a": 1}]
