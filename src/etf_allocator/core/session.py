"""
Portfolio Session
=================
Unico proprietario dello stato di una sessione di costruzione del portafoglio.

Lo stato (catalogo, filtri per categoria, allocazioni) vive in un solo
SessionState. Una nuova ingestione costruisce uno stato nuovo e lo sostituisce
con un'unica assegnazione: non esiste uno stato intermedio con il catalogo
nuovo e le selezioni vecchie.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional

from etf_allocator.analytics.metrics import PortfolioMetrics
from etf_allocator.analytics.views import category_view, grouped_views
from etf_allocator.config.user_config import REFERENCE_AMOUNTS
from etf_allocator.core.allocation import AllocationLedger
from etf_allocator.data.catalogue import Catalogue
from etf_allocator.data.csv_source import load_csv_records
from etf_allocator.data.definitions.etf_classifier import ETFClassifier
from etf_allocator.data.field_resolver import FieldResolver
from etf_allocator.models.portfolio import (
    FilterState,
    FundRecord,
    MacroCategory,
    PortfolioExport,
    default_filters,
)
from etf_allocator.reporting.export import build_export
from etf_allocator.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass
class SessionState:
    """Snapshot completo della sessione, sostituito in blocco a ogni ingestione."""
    catalogue: Catalogue
    ledger: AllocationLedger = field(default_factory=AllocationLedger)
    filters: Dict[MacroCategory, FilterState] = field(default_factory=default_filters)
    source_name: Optional[str] = None


class PortfolioSession:
    """
    Facciata sul motore: ingestione, viste, mutazioni e metriche.

    Example:
        >>> session = PortfolioSession()
        >>> session.ingest(records)
        >>> session.set_category_allocation("equity", 60)
        >>> session.metrics().weighted_expense_ratio()
    """

    def __init__(
        self,
        resolver: Optional[FieldResolver] = None,
        classifier: Optional[ETFClassifier] = None,
        reference_amounts: Iterable[int] = REFERENCE_AMOUNTS,
    ):
        self.resolver = resolver
        self.classifier = classifier
        self.reference_amounts = tuple(reference_amounts)
        self.state = SessionState(catalogue=self._new_catalogue())

    def _new_catalogue(self) -> Catalogue:
        return Catalogue(resolver=self.resolver, classifier=self.classifier)

    # ------------------------------------------------------------------
    # Ingestion
    # ------------------------------------------------------------------

    def ingest(self, raw_records: Iterable[Mapping[str, Any]], source_name: Optional[str] = None) -> int:
        """
        Carica un nuovo catalogo azzerando allocazioni, selezioni, stelle e filtri.

        Returns:
            Numero di ETF caricati
        """
        catalogue = self._new_catalogue()
        count = catalogue.ingest(raw_records)
        if self.has_pending_work:
            logger.warning("Nuovo catalogo caricato: allocazioni e selezioni precedenti azzerate")
        self.state = SessionState(catalogue=catalogue, source_name=source_name)
        return count

    def load_csv(self, path) -> int:
        """Legge un CSV da disco e lo ingerisce."""
        return self.ingest(load_csv_records(path), source_name=str(path))

    # ------------------------------------------------------------------
    # Read accessors
    # ------------------------------------------------------------------

    @property
    def catalogue(self) -> Catalogue:
        return self.state.catalogue

    @property
    def ledger(self) -> AllocationLedger:
        return self.state.ledger

    @property
    def has_pending_work(self) -> bool:
        """True se c'è qualcosa che un nuovo caricamento farebbe perdere."""
        ledger = self.state.ledger
        selected = sum(len(w) for w in ledger.fund_weights.values())
        return selected > 0 or sum(ledger.category_allocations.values()) > 0

    def filters(self, category: MacroCategory) -> FilterState:
        return self.state.filters[MacroCategory.parse(category)]

    def view(self, category: MacroCategory) -> List[FundRecord]:
        category = MacroCategory.parse(category)
        return category_view(self.state.catalogue, category, self.state.filters[category])

    def views(self) -> Dict[MacroCategory, List[FundRecord]]:
        return grouped_views(self.state.catalogue, self.state.filters)

    def metrics(self) -> PortfolioMetrics:
        return PortfolioMetrics(self.state.catalogue, self.state.ledger)

    def export(self) -> PortfolioExport:
        return build_export(self.state.catalogue, self.state.ledger, self.reference_amounts)

    # ------------------------------------------------------------------
    # Filters
    # ------------------------------------------------------------------

    def set_filter(self, category: MacroCategory, **changes: Any) -> FilterState:
        category = MacroCategory.parse(category)
        updated = self.state.filters[category].updated(**changes)
        self.state.filters[category] = updated
        return updated

    def reset_filters(self, category: MacroCategory) -> FilterState:
        """Riporta i filtri ad 'all' mantenendo l'ordinamento."""
        category = MacroCategory.parse(category)
        cleared = self.state.filters[category].cleared()
        self.state.filters[category] = cleared
        return cleared

    # ------------------------------------------------------------------
    # Allocation mutations
    # ------------------------------------------------------------------

    def set_category_allocation(self, category: MacroCategory, value: Any) -> int:
        return self.state.ledger.set_category_allocation(category, value)

    def toggle_fund_selection(self, category: MacroCategory, fund_id: str) -> bool:
        return self.state.ledger.toggle_fund_selection(category, fund_id)

    def set_fund_weight(self, category: MacroCategory, fund_id: str, value: Any) -> int:
        return self.state.ledger.set_fund_weight(category, fund_id, value)

    def toggle_star(self, fund_id: str) -> bool:
        return self.state.ledger.toggle_star(fund_id)

    def is_starred(self, fund_id: str) -> bool:
        return self.state.ledger.is_starred(fund_id)

    def clear_allocations(self) -> None:
        self.state.ledger.clear_allocations()
