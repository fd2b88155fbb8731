"""
Models Module
=============
Dataclass ed enum del motore di allocazione.

- MacroCategory: le quattro macro categorie (ordine canonico di iterazione)
- FundRecord: una riga normalizzata e classificata del catalogo
- FilterState: filtri/ordinamento di visualizzazione per categoria
- ExportRow: riga della tabella riepilogativa esportabile
"""

from dataclasses import dataclass, field, replace, asdict
from enum import Enum
from typing import Any, Dict, List, Optional

from etf_allocator.config.user_config import DISTRIBUTION_SYNONYMS, FILTER_ALL
from etf_allocator.data.field_resolver import (
    format_aum,
    format_percentage,
    parse_aum,
    parse_percentage,
)
from etf_allocator.utils.exceptions import InvalidFilterError, UnknownCategoryError


# ================================================================================
# ENUMS
# ================================================================================

class MacroCategory(str, Enum):
    """Macro categorie di asset. L'ordine di dichiarazione è quello canonico."""
    BONDS = "bonds"
    EQUITY = "equity"
    COMMODITIES = "commodities"
    REAL_ESTATE = "real_estate"

    @property
    def label(self) -> str:
        return _CATEGORY_LABELS[self]

    @classmethod
    def parse(cls, value: Any) -> "MacroCategory":
        """Accetta un membro o il suo valore stringa."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise UnknownCategoryError(value, [c.value for c in cls]) from None


_CATEGORY_LABELS = {
    MacroCategory.BONDS: "Obbligazionari",
    MacroCategory.EQUITY: "Azionari",
    MacroCategory.COMMODITIES: "Materie Prime",
    MacroCategory.REAL_ESTATE: "Immobiliare",
}


class SortKey(str, Enum):
    """Ordinamento della vista per categoria."""
    AUM = "aum"     # decrescente
    TER = "ter"     # crescente
    NAME = "name"   # alfabetico crescente


class AllocationStatus(str, Enum):
    """Stato della somma delle allocazioni di categoria."""
    PERFECT = "perfect"
    UNDER = "under"
    OVER = "over"


# ================================================================================
# FUND RECORD
# ================================================================================

@dataclass(frozen=True)
class FundRecord:
    """
    Un ETF del catalogo, normalizzato e classificato all'ingestione.

    I campi testuali mancanti sono None ("non disponibile"), mai stringa vuota.
    La macro categoria viene decisa una volta sola e non cambia nella sessione.
    """
    id: str
    name: Optional[str]
    identifier_code: Optional[str]
    macro_category: MacroCategory
    ticker_symbol: Optional[str] = None
    category: Optional[str] = None
    benchmark_category: Optional[str] = None
    expense_ratio: Optional[str] = None
    currency: Optional[str] = None
    assets_under_management: Optional[str] = None
    distribution_policy: Optional[str] = None
    replication_method: Optional[str] = None
    classification_method: str = "DEFAULT"
    source_row: int = 0
    raw_fields: Dict[str, Optional[str]] = field(default_factory=dict, compare=False, repr=False)

    @property
    def expense_ratio_value(self) -> Optional[float]:
        """TER numerico in punti percentuali (0.07 = 0.07%), None se non disponibile."""
        return parse_percentage(self.expense_ratio)

    @property
    def aum_value(self) -> Optional[float]:
        """AuM in milioni, None se assente o non numerico."""
        return parse_aum(self.assets_under_management)

    @property
    def ter_display(self) -> str:
        return format_percentage(self.expense_ratio)

    @property
    def aum_display(self) -> str:
        return format_aum(self.assets_under_management)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["macro_category"] = self.macro_category.value
        data.pop("raw_fields")
        return data


# ================================================================================
# FILTER STATE
# ================================================================================

@dataclass(frozen=True)
class FilterState:
    """
    Filtri di visualizzazione di una categoria.

    Non influenza mai l'allocazione: è solo un parametro di vista.
    """
    distribution: str = FILTER_ALL
    replication: str = FILTER_ALL
    currency: str = FILTER_ALL
    sort_by: SortKey = SortKey.AUM

    def __post_init__(self):
        allowed = [FILTER_ALL, *DISTRIBUTION_SYNONYMS]
        if self.distribution not in allowed:
            raise InvalidFilterError("distribution", self.distribution, allowed)
        try:
            object.__setattr__(self, "sort_by", SortKey(self.sort_by))
        except ValueError:
            raise InvalidFilterError("sort_by", self.sort_by, [k.value for k in SortKey]) from None
        for name in ("replication", "currency"):
            value = getattr(self, name)
            if not isinstance(value, str) or not value.strip():
                raise InvalidFilterError(name, value)

    @property
    def is_filtered(self) -> bool:
        return any(v != FILTER_ALL for v in (self.distribution, self.replication, self.currency))

    def cleared(self) -> "FilterState":
        """Azzera i filtri mantenendo l'ordinamento scelto."""
        return FilterState(sort_by=self.sort_by)

    def updated(self, **changes: Any) -> "FilterState":
        return replace(self, **changes)


def default_filters() -> Dict[MacroCategory, FilterState]:
    return {category: FilterState() for category in MacroCategory}


# ================================================================================
# EXPORT OUTPUT
# ================================================================================

@dataclass(frozen=True)
class ExportRow:
    """Un ETF selezionato con il suo peso effettivo sull'intero portafoglio (0-100)."""
    category: MacroCategory
    fund_id: str
    name: Optional[str]
    identifier_code: Optional[str]
    ticker_symbol: Optional[str]
    ter: str
    effective_weight: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "category": self.category.value,
            "category_label": self.category.label,
            "fund_id": self.fund_id,
            "name": self.name,
            "isin": self.identifier_code,
            "ticker": self.ticker_symbol,
            "ter": self.ter,
            "effective_weight": self.effective_weight,
        }


@dataclass
class PortfolioExport:
    """Proiezione esportabile: righe, subtotali, costi e lista ISIN."""
    rows: List[ExportRow]
    category_subtotals: Dict[MacroCategory, float]
    weighted_expense_ratio: str
    cost_table: Dict[int, float]
    isin_list: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "rows": [row.to_dict() for row in self.rows],
            "category_subtotals": {c.value: v for c, v in self.category_subtotals.items()},
            "weighted_expense_ratio": self.weighted_expense_ratio,
            "cost_table": {str(amount): cost for amount, cost in self.cost_table.items()},
            "isin_list": self.isin_list.split("\n") if self.isin_list else [],
        }
