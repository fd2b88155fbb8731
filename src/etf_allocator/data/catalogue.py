"""
Catalogue Module
================
Possiede la sequenza autorevole di FundRecord della sessione corrente.

Politica di import permissiva:
- righe senza nome o senza ISIN vengono scartate in silenzio
  (solo il totale caricato è visibile)
- tutti i valori stringa vengono ripuliti dagli spazi
- ISIN vuoto dopo il trim -> id surrogato deterministico (hash di indice + nome)
- ISIN ripetuto -> id con suffisso "#n", così gli id restano univoci
"""

from __future__ import annotations

import hashlib
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional

import pandas as pd

from etf_allocator.data.definitions.etf_classifier import ETFClassifier, get_classifier
from etf_allocator.data.field_resolver import FieldResolver, SemanticField, normalize_column_name
from etf_allocator.models.portfolio import FundRecord, MacroCategory
from etf_allocator.utils.logger import get_logger

logger = get_logger(__name__)

_RECORD_FIELDS = {
    "ticker_symbol": SemanticField.TICKER,
    "category": SemanticField.CATEGORY,
    "benchmark_category": SemanticField.BENCHMARK_CATEGORY,
    "expense_ratio": SemanticField.EXPENSE_RATIO,
    "currency": SemanticField.CURRENCY,
    "assets_under_management": SemanticField.AUM,
    "distribution_policy": SemanticField.DISTRIBUTION,
    "replication_method": SemanticField.REPLICATION,
}

# Campi per cui ha senso offrire una scelta nei filtri
_FILTERABLE_FIELDS = ("currency", "replication_method", "distribution_policy")


def surrogate_id(row_index: int, name: str) -> str:
    """Id riproducibile per righe con ISIN vuoto: mai uguale per due righe diverse."""
    digest = hashlib.sha1(f"{row_index}:{name}".encode("utf-8")).hexdigest()
    return f"row-{digest[:12]}"


def _clean_values(columns: Mapping[str, Any]) -> Dict[str, Optional[str]]:
    cleaned: Dict[str, Optional[str]] = {}
    for column, value in columns.items():
        if value is None:
            cleaned[column] = None
        else:
            cleaned[column] = value.strip() if isinstance(value, str) else str(value).strip()
    return cleaned


def _free_id(base: str, issued: Mapping[str, Any], reserved: Iterable[str]) -> str:
    """Primo ``base#n`` (n >= 2) non ancora assegnato né riservato."""
    n = 2
    while f"{base}#{n}" in issued or f"{base}#{n}" in reserved:
        n += 1
    return f"{base}#{n}"


class Catalogue:
    """Catalogo ETF della sessione (ordine = ordine delle righe sorgente)."""

    def __init__(
        self,
        resolver: Optional[FieldResolver] = None,
        classifier: Optional[ETFClassifier] = None,
    ):
        self.resolver = resolver or FieldResolver()
        self.classifier = classifier or get_classifier()
        self._records: List[FundRecord] = []
        self._index: Dict[str, FundRecord] = {}

    # ------------------------------------------------------------------
    # Ingestion
    # ------------------------------------------------------------------

    def ingest(self, raw_records: Iterable[Mapping[str, Any]]) -> int:
        """
        Sostituisce l'intero contenuto con le righe valide di ``raw_records``.

        Returns:
            Numero di ETF caricati
        """
        prepared = []
        dropped = 0
        for row_index, raw in enumerate(raw_records):
            columns = {normalize_column_name(k): v for k, v in raw.items()}
            # Il filtro guarda i valori grezzi, prima del trim
            raw_name = self.resolver.resolve(columns, SemanticField.NAME, allow_blank=True)
            raw_identifier = self.resolver.resolve(columns, SemanticField.IDENTIFIER, allow_blank=True)
            if raw_name is None or raw_identifier is None:
                dropped += 1
                continue

            prepared.append((row_index, _clean_values(columns)))

        # Gli ISIN letterali hanno la precedenza sugli id con suffisso
        reserved = {
            identifier
            for identifier in (self.resolver.resolve(fields, SemanticField.IDENTIFIER) for _, fields in prepared)
            if identifier
        }
        records: List[FundRecord] = []
        index: Dict[str, FundRecord] = {}
        defaulted = 0

        for row_index, fields in prepared:
            name = self.resolver.resolve(fields, SemanticField.NAME)
            identifier = self.resolver.resolve(fields, SemanticField.IDENTIFIER)

            if identifier and identifier not in index:
                fund_id = identifier
            elif identifier:
                fund_id = _free_id(identifier, index, reserved)
                logger.warning(f"ISIN duplicato {identifier} (riga {row_index}): id assegnato {fund_id}")
            else:
                fund_id = surrogate_id(row_index, name or "")
                if fund_id in index or fund_id in reserved:
                    fund_id = _free_id(fund_id, index, reserved)

            values = {attr: self.resolver.resolve(fields, sf) for attr, sf in _RECORD_FIELDS.items()}
            result = self.classifier.classify(values["category"], values["benchmark_category"])
            if result.is_default:
                defaulted += 1

            record = FundRecord(
                id=fund_id,
                name=name,
                identifier_code=identifier,
                macro_category=result.macro_category,
                classification_method=result.method,
                source_row=row_index,
                raw_fields=fields,
                **values,
            )
            records.append(record)
            index[fund_id] = record

        self._records = records
        self._index = index

        if dropped:
            logger.debug(f"{dropped} righe scartate (nome o ISIN mancante)")
        if defaulted:
            logger.debug(f"{defaulted} ETF senza keyword di categoria: assegnati a {MacroCategory.EQUITY.value}")
        logger.info(f"Catalogo caricato: {len(records)} ETF")
        return len(records)

    # ------------------------------------------------------------------
    # Read accessors
    # ------------------------------------------------------------------

    def all(self) -> List[FundRecord]:
        return list(self._records)

    def by_id(self, fund_id: str) -> Optional[FundRecord]:
        return self._index.get(fund_id)

    def by_category(self, category: MacroCategory) -> List[FundRecord]:
        category = MacroCategory.parse(category)
        return [r for r in self._records if r.macro_category is category]

    def counts_by_category(self) -> Dict[MacroCategory, int]:
        counts = {category: 0 for category in MacroCategory}
        for record in self._records:
            counts[record.macro_category] += 1
        return counts

    def available_values(self, attribute: str, category: Optional[MacroCategory] = None) -> List[str]:
        """Valori distinti (ordinati) di un campo filtrabile, per popolare i menu."""
        if attribute not in _FILTERABLE_FIELDS:
            raise ValueError(f"Campo non filtrabile: {attribute}. Ammessi: {', '.join(_FILTERABLE_FIELDS)}")
        records = self._records if category is None else self.by_category(category)
        return sorted({getattr(r, attribute) for r in records if getattr(r, attribute)})

    def to_frame(self) -> pd.DataFrame:
        """Catalogo come DataFrame indicizzato per id (colonne = campi del modello)."""
        if not self._records:
            return pd.DataFrame(columns=["id"]).set_index("id")
        frame = pd.DataFrame([r.to_dict() for r in self._records])
        frame["aum_value"] = [r.aum_value for r in self._records]
        frame["expense_ratio_value"] = [r.expense_ratio_value for r in self._records]
        return frame.set_index("id")

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[FundRecord]:
        return iter(self._records)

    def __contains__(self, fund_id: object) -> bool:
        return fund_id in self._index
