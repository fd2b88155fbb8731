"""
View Engine
===========
Proiezione in sola lettura del catalogo: filtri e ordinamento per categoria.

Funzioni pure: non modificano mai il catalogo né l'allocazione.
"""

from __future__ import annotations

from typing import Dict, Iterable, List, Mapping, Optional

from etf_allocator.config.user_config import DISTRIBUTION_SYNONYMS, FILTER_ALL
from etf_allocator.data.catalogue import Catalogue
from etf_allocator.models.portfolio import FilterState, FundRecord, MacroCategory, SortKey


def _passes(record: FundRecord, filters: FilterState) -> bool:
    if filters.distribution != FILTER_ALL:
        accepted = DISTRIBUTION_SYNONYMS.get(filters.distribution, (filters.distribution,))
        if record.distribution_policy not in accepted:
            return False
    if filters.replication != FILTER_ALL and record.replication_method != filters.replication:
        return False
    if filters.currency != FILTER_ALL and record.currency != filters.currency:
        return False
    return True


def filter_funds(records: Iterable[FundRecord], filters: FilterState) -> List[FundRecord]:
    """Mantiene l'ordine di input; un valore mancante non passa un filtro attivo."""
    return [r for r in records if _passes(r, filters)]


def _aum_key(record: FundRecord) -> float:
    value = record.aum_value
    return -(value if value is not None else 0.0)


def _ter_key(record: FundRecord) -> float:
    value = record.expense_ratio_value
    return value if value is not None else 0.0


def _name_key(record: FundRecord):
    name = record.name or ""
    return (name.casefold(), name)


_SORT_KEYS = {
    SortKey.AUM: _aum_key,
    SortKey.TER: _ter_key,
    SortKey.NAME: _name_key,
}


def sort_funds(records: Iterable[FundRecord], sort_by: SortKey = SortKey.AUM) -> List[FundRecord]:
    """
    Ordinamento stabile.

    - aum: decrescente, AuM non interpretabile vale 0 (in fondo)
    - ter: crescente, TER non disponibile vale 0
    - name: alfabetico crescente (casefold, poi stringa originale)

    A parità di chiave resta l'ordine di input.
    """
    return sorted(records, key=_SORT_KEYS[SortKey(sort_by)])


def category_view(
    catalogue: Catalogue,
    category: MacroCategory,
    filters: Optional[FilterState] = None,
) -> List[FundRecord]:
    """ETF di una categoria, filtrati e ordinati secondo ``filters``."""
    filters = filters or FilterState()
    filtered = filter_funds(catalogue.by_category(category), filters)
    return sort_funds(filtered, filters.sort_by)


def grouped_views(
    catalogue: Catalogue,
    filters: Optional[Mapping[MacroCategory, FilterState]] = None,
) -> Dict[MacroCategory, List[FundRecord]]:
    filters = filters or {}
    return {
        category: category_view(catalogue, category, filters.get(category))
        for category in MacroCategory
    }
