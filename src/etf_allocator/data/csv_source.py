"""
CSV Source
==========
Lettura del catalogo ETF da file CSV esportati da screener/broker.

- delimitatore rilevato automaticamente tra , ; TAB |
- tutte le celle lette come stringhe (nessuna conversione NA/numerica:
  l'interpretazione dei valori spetta al FieldResolver)
- righe vuote saltate, BOM iniziale rimosso, intestazioni normalizzate
"""

import csv
import io
from pathlib import Path
from typing import Dict, List, Optional, Union

import pandas as pd

from etf_allocator.config.user_config import CSV_OPTIONS
from etf_allocator.data.field_resolver import normalize_column_name
from etf_allocator.utils.exceptions import CatalogueLoadError
from etf_allocator.utils.logger import get_logger

logger = get_logger(__name__)

PathLike = Union[str, Path]


def sniff_delimiter(sample: str, candidates: str = CSV_OPTIONS["delimiters"]) -> str:
    """
    Rileva il delimitatore dal campione.

    Il risultato dello Sniffer vale solo se compare nell'intestazione: con
    decimali italiani ("0,22") la virgola è frequente in ogni riga di dati.
    Altrimenti vince il candidato più frequente nell'intestazione, ',' se nessuno.
    """
    lines = [line for line in sample.splitlines() if line.strip()]
    header = lines[0] if lines else ""
    try:
        sniffed = csv.Sniffer().sniff(sample, delimiters=candidates).delimiter
    except csv.Error:
        sniffed = None
    if sniffed and sniffed in header:
        return sniffed

    counts = {d: header.count(d) for d in candidates}
    best = max(counts, key=counts.get) if counts else ","
    return best if counts.get(best) else ","


def _header_width(text: str, sep: str) -> int:
    first = next((line for line in text.splitlines() if line.strip()), "")
    return len(next(csv.reader([first], delimiter=sep), []))


def read_catalogue_text(text: str, delimiter: Optional[str] = None) -> List[Dict[str, str]]:
    """
    Converte il contenuto CSV in righe grezze {colonna normalizzata: valore}.

    Le righe con più campi dell'intestazione vengono troncate alla sua
    larghezza; quelle più corte hanno le celle mancanti vuote.
    """
    if not text.strip():
        return []
    sep = delimiter or sniff_delimiter(text[: CSV_OPTIONS["sample_size"]])
    width = _header_width(text, sep)

    def trim_row(fields: List[str]) -> List[str]:
        logger.warning(f"Riga con {len(fields)} campi invece di {width}: campi in eccesso ignorati")
        return fields[:width]

    try:
        frame = pd.read_csv(
            io.StringIO(text),
            sep=sep,
            dtype=str,
            keep_default_na=False,
            skip_blank_lines=True,
            engine="python",
            on_bad_lines=trim_row,
        )
    except pd.errors.EmptyDataError:
        return []
    frame = frame.fillna("")
    frame.columns = [normalize_column_name(c) for c in frame.columns]
    return frame.to_dict("records")


def load_csv_records(path: PathLike, delimiter: Optional[str] = None) -> List[Dict[str, str]]:
    """
    Carica un catalogo CSV da disco.

    Raises:
        CatalogueLoadError: file mancante, non leggibile o malformato
    """
    file_path = Path(path)
    if not file_path.is_file():
        raise CatalogueLoadError(str(path), "file non trovato")
    try:
        text = file_path.read_text(encoding=CSV_OPTIONS["encoding"])
    except (OSError, UnicodeDecodeError) as exc:
        raise CatalogueLoadError(str(path), str(exc)) from exc

    try:
        records = read_catalogue_text(text, delimiter)
    except pd.errors.ParserError as exc:
        raise CatalogueLoadError(str(path), str(exc)) from exc

    logger.debug(f"{file_path.name}: {len(records)} righe lette")
    return records
