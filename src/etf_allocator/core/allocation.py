"""
Allocation Ledger
=================
Stato mutabile dei pesi a due livelli:
- allocazione percentuale per macro categoria
- peso percentuale di ciascun ETF selezionato dentro la categoria

Regole:
- ogni valore viene troncato a intero e clampato in [0, 100], mai rifiutato
- i pesi interni NON vengono normalizzati: "categoria completa" è un
  predicato derivato (somma == 100), non un vincolo
- un ETF selezionato con peso 0 è uno stato transitorio lecito
- portare una categoria da >0 a 0 svuota le sue selezioni
- le stelle sono indipendenti dall'allocazione
"""

from __future__ import annotations

import math
from typing import Any, Dict, List, Set

from etf_allocator.models.portfolio import MacroCategory
from etf_allocator.utils.exceptions import InvalidWeightError


def clamp_percentage(value: Any) -> int:
    """Tronca verso zero a intero e limita a [0, 100]."""
    if isinstance(value, bool):
        raise InvalidWeightError(value)
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise InvalidWeightError(value) from None
    if math.isnan(number):
        raise InvalidWeightError(value)
    if math.isinf(number):
        return 100 if number > 0 else 0
    return max(0, min(100, int(number)))


class AllocationLedger:
    """Pesi di categoria, selezioni ETF e preferiti della sessione."""

    def __init__(self):
        self.category_allocations: Dict[MacroCategory, int] = {c: 0 for c in MacroCategory}
        self.fund_weights: Dict[MacroCategory, Dict[str, int]] = {c: {} for c in MacroCategory}
        self.starred: Set[str] = set()

    # ------------------------------------------------------------------
    # Category allocation
    # ------------------------------------------------------------------

    def set_category_allocation(self, category: MacroCategory, value: Any) -> int:
        category = MacroCategory.parse(category)
        new_value = clamp_percentage(value)
        if new_value == 0 and self.category_allocations[category] > 0:
            self.fund_weights[category] = {}
        self.category_allocations[category] = new_value
        return new_value

    def allocation(self, category: MacroCategory) -> int:
        return self.category_allocations[MacroCategory.parse(category)]

    # ------------------------------------------------------------------
    # Fund selection and weights
    # ------------------------------------------------------------------

    def toggle_fund_selection(self, category: MacroCategory, fund_id: str) -> bool:
        """Seleziona (peso 0) o rimuove del tutto. Restituisce il nuovo stato."""
        weights = self.fund_weights[MacroCategory.parse(category)]
        if fund_id in weights:
            del weights[fund_id]
            return False
        weights[fund_id] = 0
        return True

    def set_fund_weight(self, category: MacroCategory, fund_id: str, value: Any) -> int:
        """Imposta il peso; se l'ETF non era selezionato lo diventa."""
        new_value = clamp_percentage(value)
        self.fund_weights[MacroCategory.parse(category)][fund_id] = new_value
        return new_value

    def is_selected(self, category: MacroCategory, fund_id: str) -> bool:
        return fund_id in self.fund_weights[MacroCategory.parse(category)]

    def weight(self, category: MacroCategory, fund_id: str) -> int:
        return self.fund_weights[MacroCategory.parse(category)].get(fund_id, 0)

    def selected_ids(self, category: MacroCategory) -> List[str]:
        """Id selezionati nell'ordine di selezione."""
        return list(self.fund_weights[MacroCategory.parse(category)])

    def category_weight_sum(self, category: MacroCategory) -> int:
        return sum(self.fund_weights[MacroCategory.parse(category)].values())

    def is_category_complete(self, category: MacroCategory) -> bool:
        return self.category_weight_sum(category) == 100

    # ------------------------------------------------------------------
    # Stars
    # ------------------------------------------------------------------

    def toggle_star(self, fund_id: str) -> bool:
        if fund_id in self.starred:
            self.starred.discard(fund_id)
            return False
        self.starred.add(fund_id)
        return True

    def is_starred(self, fund_id: str) -> bool:
        return fund_id in self.starred

    # ------------------------------------------------------------------
    # Bulk
    # ------------------------------------------------------------------

    def clear_allocations(self) -> None:
        """Azzera allocazioni e selezioni; le stelle restano."""
        self.category_allocations = {c: 0 for c in MacroCategory}
        self.fund_weights = {c: {} for c in MacroCategory}

    def snapshot(self) -> Dict[str, Any]:
        return {
            "allocations": {c.value: v for c, v in self.category_allocations.items()},
            "fund_weights": {c.value: dict(w) for c, w in self.fund_weights.items()},
            "starred": sorted(self.starred),
        }
