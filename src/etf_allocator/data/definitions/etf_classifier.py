"""
ETF Classifier (deterministico)
===============================

Obiettivo: assegnare ogni ETF del catalogo a una sola macro categoria
(bonds, equity, commodities, real_estate) usando i campi testuali del CSV:
1) "Categoria" (campo primario, testo libero)
2) "Categoria Morningstar" (tassonomia secondaria)

Le regole sono valutate in ordine di priorità: obbligazionari, azionari,
materie prime, immobiliare. Nel turno di ciascuna categoria si controllano
prima le keyword del campo primario, poi quelle del secondario.
Se nessuna regola scatta, il fallback è EQUITY (metodo DEFAULT).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

from etf_allocator.models.portfolio import MacroCategory


@dataclass(frozen=True)
class KeywordRule:
    category: MacroCategory
    primary_keywords: Tuple[str, ...]
    secondary_keywords: Tuple[str, ...]


@dataclass(frozen=True)
class ClassificationResult:
    macro_category: MacroCategory
    method: str
    matched_keyword: Optional[str] = None

    @property
    def is_default(self) -> bool:
        return self.method == DEFAULT_METHOD


DEFAULT_METHOD = "DEFAULT"
DEFAULT_CATEGORY = MacroCategory.EQUITY

DEFAULT_RULES: Tuple[KeywordRule, ...] = (
    KeywordRule(MacroCategory.BONDS, ("obbl", "bond"), ("bond",)),
    KeywordRule(MacroCategory.EQUITY, ("azion", "equity"), ("equity",)),
    KeywordRule(MacroCategory.COMMODITIES, ("mater", "commod"), ("commodity",)),
    KeywordRule(MacroCategory.REAL_ESTATE, ("immobil", "real estate"), ("property",)),
)


class ETFClassifier:
    """Classificatore deterministico basato su keyword."""

    def __init__(self, rules: Optional[Tuple[KeywordRule, ...]] = None):
        self.rules: Tuple[KeywordRule, ...] = tuple(rules) if rules else DEFAULT_RULES

    def classify(
        self,
        category: Optional[str],
        benchmark_category: Optional[str] = None,
    ) -> ClassificationResult:
        primary = (category or "").lower()
        secondary = (benchmark_category or "").lower()

        for rule in self.rules:
            for kw in rule.primary_keywords:
                if kw in primary:
                    return ClassificationResult(
                        rule.category, f"KEYWORD:{rule.category.value}:primary", kw
                    )
            for kw in rule.secondary_keywords:
                if kw in secondary:
                    return ClassificationResult(
                        rule.category, f"KEYWORD:{rule.category.value}:secondary", kw
                    )

        # fallback deliberato, non un errore
        return ClassificationResult(DEFAULT_CATEGORY, DEFAULT_METHOD)

    def macro_category(self, category: Optional[str], benchmark_category: Optional[str] = None) -> MacroCategory:
        return self.classify(category, benchmark_category).macro_category


_classifier: Optional[ETFClassifier] = None


def get_classifier() -> ETFClassifier:
    global _classifier
    if _classifier is None:
        _classifier = ETFClassifier()
    return _classifier


def classify_fund(category: Optional[str], benchmark_category: Optional[str] = None) -> ClassificationResult:
    return get_classifier().classify(category, benchmark_category)
