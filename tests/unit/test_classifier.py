import pytest

from etf_allocator.data.definitions.etf_classifier import (
    DEFAULT_METHOD,
    ETFClassifier,
    KeywordRule,
    classify_fund,
    get_classifier,
)
from etf_allocator.models.portfolio import MacroCategory


@pytest.mark.parametrize("category, benchmark, expected", [
    ("Obbligazionari Globali", None, MacroCategory.BONDS),
    ("Global BOND", None, MacroCategory.BONDS),
    ("Azionari Europa", None, MacroCategory.EQUITY),
    ("Equity World", None, MacroCategory.EQUITY),
    ("Materie Prime", None, MacroCategory.COMMODITIES),
    ("Broad Commodities", None, MacroCategory.COMMODITIES),
    ("Immobiliare", None, MacroCategory.REAL_ESTATE),
    ("Global Real Estate", None, MacroCategory.REAL_ESTATE),
    (None, "Property - Indirect Global", MacroCategory.REAL_ESTATE),
    (None, "Commodity Broad Basket", MacroCategory.COMMODITIES),
])
def test_keyword_classification(category, benchmark, expected):
    assert classify_fund(category, benchmark).macro_category is expected


def test_primary_field_recorded_in_method():
    result = classify_fund("Obbligazionari Euro", "EUR Government Bond")
    assert result.method == "KEYWORD:bonds:primary"
    assert result.matched_keyword == "obbl"


def test_secondary_field_recorded_in_method():
    result = classify_fund("Tematici", "Property - Indirect Global")
    assert result.method == "KEYWORD:real_estate:secondary"
    assert result.matched_keyword == "property"


def test_category_priority_beats_field_priority():
    # nel turno "bonds" si guarda anche il campo secondario, prima di passare a "equity"
    result = classify_fund("Azionari", "Global Bond")
    assert result.macro_category is MacroCategory.BONDS
    assert result.method == "KEYWORD:bonds:secondary"


def test_bonds_checked_before_equity_in_same_field():
    assert classify_fund("Bond Equity Mix").macro_category is MacroCategory.BONDS


@pytest.mark.parametrize("category, benchmark", [
    ("Bilanciati", "EUR Moderate Allocation"),
    ("", ""),
    (None, None),
])
def test_unmatched_defaults_to_equity(category, benchmark):
    result = classify_fund(category, benchmark)
    assert result.macro_category is MacroCategory.EQUITY
    assert result.method == DEFAULT_METHOD
    assert result.is_default


def test_custom_rules():
    classifier = ETFClassifier(rules=(
        KeywordRule(MacroCategory.COMMODITIES, ("oro",), ("gold",)),
    ))
    assert classifier.macro_category("ETC Oro fisico") is MacroCategory.COMMODITIES
    assert classifier.classify("Azionari").is_default


def test_get_classifier_is_singleton():
    assert get_classifier() is get_classifier()
