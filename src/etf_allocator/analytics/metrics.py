"""
Portfolio Metrics
=================
Derivazioni pure su (Catalogo, AllocationLedger).

Ogni metrica viene ricalcolata a ogni chiamata: nessuna cache, così il
valore letto riflette sempre lo stato corrente del ledger.

Convenzioni:
- una categoria è "attiva" se la sua allocazione è >= 1%
- "completa" se la somma dei pesi interni è esattamente 100
- gli id selezionati che non esistono nel catalogo vengono ignorati
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Dict, List, Tuple

import numpy as np
import pandas as pd

from etf_allocator.config.user_config import ACTIVE_CATEGORY_THRESHOLD, WEIGHTED_TER_DECIMALS
from etf_allocator.core.allocation import AllocationLedger
from etf_allocator.data.catalogue import Catalogue
from etf_allocator.models.portfolio import AllocationStatus, FundRecord, MacroCategory

UNALLOCATED_KEY = "unallocated"
UNALLOCATED_LABEL = "Non allocato"


def format_ter(value: float, decimals: int = WEIGHTED_TER_DECIMALS) -> str:
    """Arrotonda a `decimals` cifre con i pareggi verso l'alto (0.03125 -> '0.0313')."""
    quantum = Decimal(1).scaleb(-decimals)
    return format(Decimal(repr(float(value))).quantize(quantum, rounding=ROUND_HALF_UP), "f")


class PortfolioMetrics:
    """Metriche aggregate del portafoglio in costruzione."""

    def __init__(self, catalogue: Catalogue, ledger: AllocationLedger):
        self.catalogue = catalogue
        self.ledger = ledger

    # ------------------------------------------------------------------
    # Allocation totals
    # ------------------------------------------------------------------

    def total_allocation(self) -> int:
        return sum(self.ledger.category_allocations.values())

    def allocation_status(self) -> AllocationStatus:
        total = self.total_allocation()
        if total == 100:
            return AllocationStatus.PERFECT
        return AllocationStatus.UNDER if total < 100 else AllocationStatus.OVER

    def unallocated(self) -> int:
        return max(0, 100 - self.total_allocation())

    def active_categories(self) -> List[MacroCategory]:
        return [
            c for c in MacroCategory
            if self.ledger.category_allocations[c] >= ACTIVE_CATEGORY_THRESHOLD
        ]

    # ------------------------------------------------------------------
    # Effective weights
    # ------------------------------------------------------------------

    def weighted_positions(self) -> List[Tuple[MacroCategory, FundRecord, int]]:
        """
        (categoria, ETF, peso interno) per ogni ETF con peso > 0 in una
        categoria attiva, nell'ordine categoria -> ordine di selezione.
        """
        positions = []
        for category in self.active_categories():
            for fund_id, weight in self.ledger.fund_weights[category].items():
                if weight <= 0:
                    continue
                record = self.catalogue.by_id(fund_id)
                if record is None:
                    continue
                positions.append((category, record, weight))
        return positions

    def weighted_expense_ratio(self) -> str:
        """
        TER medio ponderato per il peso effettivo, formattato a 4 decimali.

        Peso effettivo = (peso ETF / 100) * (allocazione categoria / 100).
        Un TER non disponibile contribuisce 0 al numeratore ma il suo peso
        resta nel denominatore (approssimazione nota).
        """
        positions = self.weighted_positions()
        if not positions:
            return format_ter(0.0)

        effective = np.array(
            [(w / 100) * (self.ledger.category_allocations[c] / 100) for c, _, w in positions],
            dtype=float,
        )
        ters = np.array(
            [r.expense_ratio_value if r.expense_ratio_value is not None else 0.0 for _, r, _ in positions],
            dtype=float,
        )
        total_weight = effective.sum()
        if total_weight <= 0:
            return format_ter(0.0)
        return format_ter(np.dot(effective, ters) / total_weight)

    # ------------------------------------------------------------------
    # Coverage and completeness
    # ------------------------------------------------------------------

    def selected_fund_count(self) -> int:
        return sum(len(self.ledger.fund_weights[c]) for c in self.active_categories())

    def portfolio_coverage(self) -> int:
        return sum(
            self.ledger.category_allocations[c]
            for c in self.active_categories()
            if self.ledger.is_category_complete(c)
        )

    def is_portfolio_complete(self) -> bool:
        return (
            self.portfolio_coverage() == 100
            and self.selected_fund_count() > 0
            and self.total_allocation() == 100
        )

    # ------------------------------------------------------------------
    # Summaries
    # ------------------------------------------------------------------

    def allocation_breakdown(self) -> List[Dict[str, Any]]:
        """Fette del grafico a torta: categorie > 0 più l'eventuale quota non allocata."""
        slices = [
            {"key": c.value, "label": c.label, "value": v}
            for c, v in self.ledger.category_allocations.items()
            if v > 0
        ]
        total = self.total_allocation()
        if total < 100:
            slices.append({"key": UNALLOCATED_KEY, "label": UNALLOCATED_LABEL, "value": 100 - total})
        return slices

    def category_summary(self) -> pd.DataFrame:
        """Una riga per macro categoria con allocazione, somma pesi e stato."""
        counts = self.catalogue.counts_by_category()
        rows = []
        for c in MacroCategory:
            rows.append({
                "category": c.value,
                "label": c.label,
                "funds_available": counts[c],
                "allocation": self.ledger.category_allocations[c],
                "selected": len(self.ledger.fund_weights[c]),
                "weight_sum": self.ledger.category_weight_sum(c),
                "active": self.ledger.category_allocations[c] >= ACTIVE_CATEGORY_THRESHOLD,
                "complete": self.ledger.is_category_complete(c),
            })
        return pd.DataFrame(rows).set_index("category")

    def summary(self) -> Dict[str, Any]:
        return {
            "total_allocation": self.total_allocation(),
            "allocation_status": self.allocation_status().value,
            "weighted_expense_ratio": self.weighted_expense_ratio(),
            "selected_fund_count": self.selected_fund_count(),
            "portfolio_coverage": self.portfolio_coverage(),
            "is_portfolio_complete": self.is_portfolio_complete(),
        }
