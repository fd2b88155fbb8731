"""
ETF Allocator
=============
Motore di costruzione di portafogli ETF a partire da un catalogo CSV.

Main Components:
    - data: Lettura CSV, risoluzione campi, classificazione, catalogo
    - analytics: Viste filtrate/ordinate e metriche di portafoglio
    - core: Ledger delle allocazioni e sessione
    - reporting: Riepilogo console ed export (CSV, JSON, lista ISIN)
    - config: Default e piani di allocazione JSON/YAML
    - models: Enum e dataclass del dominio
    - utils: Logging, eccezioni, stima costi

Example:
    >>> from etf_allocator.core.session import PortfolioSession
    >>> session = PortfolioSession()
    >>> session.load_csv("catalogo.csv")
    >>> session.set_category_allocation("equity", 100)
"""

__version__ = "1.0.0"
