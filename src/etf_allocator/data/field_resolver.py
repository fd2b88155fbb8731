"""
Field Resolver
==============
Estrae valori semantici (AuM, TER, distribuzione, ...) da righe CSV i cui
nomi di colonna variano per maiuscole, spazi e simboli (€ vs EUR).

Due fasi, in quest'ordine:
1) Match esatto (case-sensitive) su una lista ordinata di nomi noti
2) Scansione case-insensitive delle colonne della riga alla ricerca di
   marcatori (es. "aum", "assets", oppure "mln" + "eur")

Un campo non trovato restituisce None, mai 0 né stringa vuota.
"""

from __future__ import annotations

import math
import re
from decimal import Decimal, ROUND_HALF_UP
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Tuple

NOT_AVAILABLE_LABEL = "N/D"


class SemanticField(str, Enum):
    """Campi che il motore sa interpretare."""
    NAME = "name"
    IDENTIFIER = "identifier"
    TICKER = "ticker"
    CATEGORY = "category"
    BENCHMARK_CATEGORY = "benchmark_category"
    EXPENSE_RATIO = "expense_ratio"
    CURRENCY = "currency"
    AUM = "aum"
    DISTRIBUTION = "distribution"
    REPLICATION = "replication"


# exact: nomi colonna in ordine di priorità
# markers: gruppi di sottostringhe (tutte presenti nel gruppo -> match)
DEFAULT_FIELD_ALIASES: Dict[SemanticField, Dict[str, Tuple]] = {
    SemanticField.NAME: {
        "exact": ("Nome", "Name", "Nome ETF", "Fund Name", "nome", "name"),
        "markers": (("nome",), ("fund name",)),
    },
    SemanticField.IDENTIFIER: {
        "exact": ("ISIN", "Isin", "isin", "Codice ISIN", "ISIN Code"),
        "markers": (("isin",),),
    },
    SemanticField.TICKER: {
        "exact": ("Ticker", "TICKER", "ticker", "Simbolo", "Symbol"),
        "markers": (("ticker",),),
    },
    SemanticField.CATEGORY: {
        # niente fallback: "categoria" comparirebbe anche in "Categoria Morningstar"
        "exact": ("Categoria", "Category", "categoria", "Asset Class", "Classe"),
        "markers": (),
    },
    SemanticField.BENCHMARK_CATEGORY: {
        "exact": ("Categoria Morningstar", "Morningstar Category", "Categoria MS"),
        "markers": (("morningstar",),),
    },
    SemanticField.EXPENSE_RATIO: {
        "exact": ("TER", "Ter", "ter", "TER (%)", "TER %", "Expense Ratio", "Costo (TER)"),
        "markers": (("expense",), ("ter", "%")),
    },
    SemanticField.CURRENCY: {
        "exact": ("Valuta", "Currency", "Valuta di quotazione", "Valuta Quotazione"),
        "markers": (("valuta",), ("currency",)),
    },
    SemanticField.AUM: {
        "exact": (
            "AuM (Mln EUR)",
            "AuM(Mln EUR)",
            "AUM (MLN EUR)",
            "AuM",
            "AUM",
            "Assets under Management",
            "AuM (Mln €)",
            "AuM Mln EUR",
            "AuM Mln €",
            "aum",
            "Aum",
        ),
        "markers": (("aum",), ("assets",), ("mln", "eur")),
    },
    SemanticField.DISTRIBUTION: {
        "exact": ("Distribuzione", "Distribution", "Politica di distribuzione", "Dividendi"),
        "markers": (("distribu",),),
    },
    SemanticField.REPLICATION: {
        "exact": ("Replica", "Replication", "Metodo di replica", "Replication Method"),
        "markers": (("replic",),),
    },
}


_ZERO_WIDTH_RE = re.compile("[\u200b-\u200d\ufeff]")
_WHITESPACE_RE = re.compile(r"\s+")
_LEADING_DECIMAL_RE = re.compile(r"^[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?")
_NOT_AUM_CHARS_RE = re.compile(r"[^\d.,]")


def normalize_column_name(name: Any) -> str:
    """Strip, collapse whitespace runs, drop zero-width characters and BOM."""
    text = _WHITESPACE_RE.sub(" ", str(name).strip())
    return _ZERO_WIDTH_RE.sub("", text).strip()


def _has_value(value: Any, allow_blank: bool = False) -> bool:
    if value is None:
        return False
    text = str(value)
    return text != "" if allow_blank else text.strip() != ""


class FieldResolver:
    """Resolver a due fasi (lista esatta, poi fallback per sottostringa)."""

    def __init__(self, aliases: Optional[Mapping[SemanticField, Mapping[str, Tuple]]] = None):
        self.aliases: Dict[SemanticField, Mapping[str, Tuple]] = dict(DEFAULT_FIELD_ALIASES)
        if aliases:
            self.aliases.update(aliases)

    def resolve(
        self,
        record: Mapping[str, Any],
        field: SemanticField,
        allow_blank: bool = False,
    ) -> Optional[str]:
        """
        Return the best-matching value for ``field`` or None.

        ``allow_blank`` accepts whitespace-only values (still rejecting
        None and the empty string).
        """
        key = self.resolve_key(record, field, allow_blank)
        if key is None:
            return None
        return str(record[key])

    def resolve_key(
        self,
        record: Mapping[str, Any],
        field: SemanticField,
        allow_blank: bool = False,
    ) -> Optional[str]:
        """Return the column name that ``resolve`` would read, or None."""
        field_aliases = self.aliases.get(SemanticField(field), {})

        # 1) match esatto
        for column in field_aliases.get("exact", ()):
            if column in record and _has_value(record[column], allow_blank):
                return column

        # 2) fallback per sottostringa, ordine naturale delle colonne
        marker_groups = field_aliases.get("markers", ())
        if not marker_groups:
            return None
        for column, value in record.items():
            lowered = str(column).lower()
            if any(all(m in lowered for m in group) for group in marker_groups):
                if _has_value(value, allow_blank):
                    return column
        return None


# ================================================================================
# NUMERIC COERCION
# ================================================================================

def _parse_leading_decimal(text: str) -> Optional[float]:
    # Legge il prefisso numerico più lungo e ignora il resto ("12abc" -> 12.0)
    match = _LEADING_DECIMAL_RE.match(text.strip())
    if match is None:
        return None
    return float(match.group(0))


def parse_aum(value: Optional[str]) -> Optional[float]:
    """
    Converte un AuM grezzo in numero (milioni).

    Rimuove tutto tranne cifre, virgola, punto e segno meno iniziale,
    sostituisce la prima virgola con un punto e interpreta il risultato.

    Returns:
        float, oppure None se il valore manca o non è numerico
    """
    if not _has_value(value):
        return None
    text = str(value).strip()
    sign = "-" if text.startswith("-") else ""
    cleaned = sign + _NOT_AUM_CHARS_RE.sub("", text)
    return _parse_leading_decimal(cleaned.replace(",", ".", 1))


def parse_percentage(value: Optional[str]) -> Optional[float]:
    """TER e simili: virgola -> punto, poi parse. Fallimento = None, mai 0."""
    if not _has_value(value):
        return None
    return _parse_leading_decimal(str(value).replace(",", ".", 1))


def _format_it_integer(number: float) -> str:
    rounded = int(Decimal(repr(number)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))
    return f"{rounded:,}".replace(",", ".")


def format_aum(value: Optional[str]) -> str:
    """'1.234M€' se numerico, il valore originale se non interpretabile, 'N/D' se assente."""
    if not _has_value(value):
        return NOT_AVAILABLE_LABEL
    number = parse_aum(value)
    if number is None or not math.isfinite(number):
        return str(value)
    return f"{_format_it_integer(number)}M€"


def format_percentage(value: Optional[str], decimals: int = 2) -> str:
    number = parse_percentage(value)
    if number is None:
        return NOT_AVAILABLE_LABEL
    return f"{number:.{decimals}f}%"
