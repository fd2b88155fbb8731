"""
Cost Projection Model
=====================
Stima del costo annuo di gestione (TER) per importi investiti di riferimento.

Il TER medio ponderato è espresso in punti percentuali (0.2000 = 0,20% annuo):
    costo annuo = importo * TER / 100

Non modellati: spread bid-ask, commissioni di negoziazione, tassazione.
"""

from typing import Dict, Iterable, Optional, Union

import numpy as np

from etf_allocator.config.user_config import REFERENCE_AMOUNTS

TerLike = Union[str, float]


def annual_cost(amount: float, weighted_ter: TerLike) -> float:
    """
    Costo annuo stimato per un importo.

    Args:
        amount: Importo investito (valuta del portafoglio)
        weighted_ter: TER medio ponderato, come stringa formattata o float

    Returns:
        Costo annuo nella stessa valuta dell'importo
    """
    return float(amount) * float(weighted_ter) / 100


def project_annual_costs(
    weighted_ter: TerLike,
    amounts: Optional[Iterable[int]] = None,
) -> Dict[int, float]:
    """Tabella {importo: costo annuo} sugli importi di riferimento (10k, 50k, 100k)."""
    amounts = list(amounts) if amounts is not None else list(REFERENCE_AMOUNTS)
    costs = np.asarray(amounts, dtype=float) * float(weighted_ter) / 100
    return {int(amount): float(cost) for amount, cost in zip(amounts, costs)}


def format_cost_table(costs: Dict[int, float], currency_symbol: str = "€") -> Dict[str, str]:
    """Etichette pronte per la stampa: {'Su 10.000€': '€20.00', ...}."""
    return {
        f"Su {amount:,}{currency_symbol}".replace(",", "."): f"{currency_symbol}{cost:.2f}"
        for amount, cost in costs.items()
    }
