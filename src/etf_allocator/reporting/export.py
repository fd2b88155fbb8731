"""
Export Module
=============
Proiezione esportabile del portafoglio e scrittura su file.

Include:
- build_export: righe con peso effettivo, subtotali, tabella costi, lista ISIN
- export_to_frame: tabella riepilogativa come DataFrame
- export_to_csv / export_to_json / export_isin_list: scrittura file
- export_all_data: orchestrazione export
"""

import json
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

import pandas as pd

from etf_allocator.analytics.metrics import PortfolioMetrics
from etf_allocator.config.user_config import EXPORT, REFERENCE_AMOUNTS
from etf_allocator.core.allocation import AllocationLedger
from etf_allocator.data.catalogue import Catalogue
from etf_allocator.models.portfolio import ExportRow, MacroCategory, PortfolioExport
from etf_allocator.utils.costs import project_annual_costs
from etf_allocator.utils.logger import get_logger

logger = get_logger(__name__)

EXPORT_COLUMNS = ["Categoria", "Nome ETF", "ISIN", "Ticker", "TER", "% Portafoglio"]


# ================================================================================
# PROJECTION
# ================================================================================

def build_export(
    catalogue: Catalogue,
    ledger: AllocationLedger,
    reference_amounts: Iterable[int] = REFERENCE_AMOUNTS,
) -> PortfolioExport:
    """
    Costruisce la proiezione esportabile dello stato corrente.

    Righe: ETF con peso > 0 nelle categorie con allocazione >= 1, in ordine
    categoria -> ordine di selezione. Peso effettivo = (peso / 100) * allocazione.
    """
    metrics = PortfolioMetrics(catalogue, ledger)

    rows: List[ExportRow] = []
    subtotals: Dict[MacroCategory, float] = {}
    for category, record, weight in metrics.weighted_positions():
        effective = (weight / 100) * ledger.category_allocations[category]
        rows.append(ExportRow(
            category=category,
            fund_id=record.id,
            name=record.name,
            identifier_code=record.identifier_code,
            ticker_symbol=record.ticker_symbol,
            ter=record.ter_display,
            effective_weight=effective,
        ))
        subtotals[category] = subtotals.get(category, 0.0) + effective

    weighted_ter = metrics.weighted_expense_ratio()
    isin_list = "\n".join(row.identifier_code for row in rows if row.identifier_code)

    return PortfolioExport(
        rows=rows,
        category_subtotals=subtotals,
        weighted_expense_ratio=weighted_ter,
        cost_table=project_annual_costs(weighted_ter, reference_amounts),
        isin_list=isin_list,
    )


def export_to_frame(export: PortfolioExport) -> pd.DataFrame:
    """Tabella riepilogativa con le colonne mostrate all'utente."""
    records = [
        {
            "Categoria": row.category.label,
            "Nome ETF": row.name,
            "ISIN": row.identifier_code,
            "Ticker": row.ticker_symbol,
            "TER": row.ter,
            "% Portafoglio": round(row.effective_weight, 2),
        }
        for row in export.rows
    ]
    return pd.DataFrame(records, columns=EXPORT_COLUMNS)


# ================================================================================
# UTILITY FUNCTIONS
# ================================================================================

def create_output_dir(output_dir: str = "./output") -> Path:
    """Crea directory di output se non esiste."""
    path = Path(output_dir)
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_timestamp() -> str:
    """Genera timestamp per i nomi dei file."""
    return datetime.now().strftime("%Y%m%d_%H%M%S")


# ================================================================================
# FILE EXPORT
# ================================================================================

def export_to_csv(output_dir: Path, export: PortfolioExport, basename: str, timestamp: str) -> Path:
    """Esporta la tabella riepilogativa in CSV (separatore ';', decimali con virgola)."""
    filepath = Path(output_dir) / f"{basename}_{timestamp}.csv"
    export_to_frame(export).to_csv(filepath, index=False, sep=";", decimal=",")
    return filepath


def export_to_json(output_dir: Path, export: PortfolioExport, basename: str, timestamp: str,
                   summary: Optional[Dict[str, Any]] = None) -> Path:
    """Esporta proiezione completa (righe, subtotali, costi, ISIN) in JSON."""
    data = {
        "metadata": {
            "export_timestamp": datetime.now().isoformat(),
        },
        **export.to_dict(),
    }
    if summary is not None:
        data["summary"] = summary

    filepath = Path(output_dir) / f"{basename}_{timestamp}.json"
    with open(filepath, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2, ensure_ascii=False, default=str)
    return filepath


def export_isin_list(output_dir: Path, export: PortfolioExport, basename: str, timestamp: str) -> Path:
    """Lista ISIN, uno per riga, pronta da incollare nel broker."""
    filepath = Path(output_dir) / f"{basename}_isin_{timestamp}.txt"
    content = export.isin_list + "\n" if export.isin_list else ""
    filepath.write_text(content, encoding="utf-8")
    return filepath


def export_all_data(
    export: PortfolioExport,
    export_config: Optional[Dict[str, Any]] = None,
    summary: Optional[Dict[str, Any]] = None,
) -> List[Path]:
    """
    Esporta la proiezione nei formati richiesti.

    Returns:
        Lista dei file scritti (vuota se export disabilitato)
    """
    export_config = {**EXPORT, **(export_config or {})}
    if not export_config.get("enabled", False):
        logger.info("Export disabilitato")
        return []

    output_dir = create_output_dir(export_config.get("output_dir", EXPORT["output_dir"]))
    formats = export_config.get("formats", [])
    basename = export_config.get("basename", EXPORT["basename"])
    timestamp = get_timestamp()

    exported_files: List[Path] = []
    if "csv" in formats:
        exported_files.append(export_to_csv(output_dir, export, basename, timestamp))
    if "json" in formats:
        exported_files.append(export_to_json(output_dir, export, basename, timestamp, summary))
    if "txt" in formats:
        exported_files.append(export_isin_list(output_dir, export, basename, timestamp))

    for path in exported_files:
        logger.info(f"Esportato: {path}")
    return exported_files
