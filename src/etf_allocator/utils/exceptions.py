"""
Exception Hierarchy
===================
Errori del motore di allocazione.

Regola: il motore non solleva eccezioni per dati "sporchi" (righe senza ISIN,
campi mancanti, AuM non numerico, pesi fuori range). Quelli vengono scartati,
rappresentati come None o clampati. Le eccezioni qui sotto segnalano solo
errori di programmazione o di I/O.
"""

from typing import Any, Iterable, Optional


# =============================================================================
# BASE EXCEPTION HIERARCHY
# =============================================================================

class ETFAllocatorError(Exception):
    """
    Base exception for the allocator.

    All package errors inherit from this to allow catching them
    with a single except clause (the CLI does exactly that).
    """
    pass


class UnknownCategoryError(ETFAllocatorError, ValueError):
    """Raised when a macro category key is not one of the four known ones."""

    def __init__(self, value: Any, allowed: Optional[Iterable[str]] = None):
        self.value = value
        self.allowed = list(allowed or [])
        msg = f"Categoria sconosciuta: {value!r}"
        if self.allowed:
            msg += f". Valori ammessi: {', '.join(self.allowed)}"
        super().__init__(msg)


class InvalidFilterError(ETFAllocatorError, ValueError):
    """Raised when a filter field receives a value outside its domain."""

    def __init__(self, field_name: str, value: Any, allowed: Optional[Iterable[str]] = None):
        self.field_name = field_name
        self.value = value
        self.allowed = list(allowed or [])
        msg = f"Valore filtro non valido per '{field_name}': {value!r}"
        if self.allowed:
            msg += f" (ammessi: {', '.join(self.allowed)})"
        super().__init__(msg)


class InvalidWeightError(ETFAllocatorError, ValueError):
    """
    Raised when an allocation or weight is not a number at all.

    Out-of-range numbers are clamped, never rejected.
    """

    def __init__(self, value: Any):
        self.value = value
        super().__init__(f"Percentuale non numerica: {value!r}")


class CatalogueLoadError(ETFAllocatorError):
    """Raised when a CSV catalogue cannot be read from disk."""

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Impossibile leggere il catalogo '{path}': {reason}")


class ConfigError(ETFAllocatorError, ValueError):
    """Raised for malformed configuration or allocation plan files."""
    pass
