"""
Allocator Configuration
=======================
Costanti e default del motore di allocazione ETF.
Modifica questo file (o passa un file JSON/YAML alla CLI) senza toccare il motore.
"""

from typing import Dict, Tuple


# =========================
# IMPORTI DI RIFERIMENTO PER LA STIMA COSTI
# =========================
# Costo annuo mostrato nel riepilogo: importo * TER medio ponderato / 100
REFERENCE_AMOUNTS: Tuple[int, ...] = (10_000, 50_000, 100_000)

# Decimali del TER medio ponderato (il valore viene esposto come stringa)
WEIGHTED_TER_DECIMALS = 4

# Soglia minima (in %) perché una categoria sia considerata attiva
ACTIVE_CATEGORY_THRESHOLD = 1


# =========================
# FILTRI DI VISUALIZZAZIONE
# =========================
# Token corto -> forme accettate nel campo "Distribuzione"
DISTRIBUTION_SYNONYMS: Dict[str, Tuple[str, ...]] = {
    "Acc": ("Acc", "Accumulazione"),
    "Dist": ("Dist", "Distribuzione"),
}

# Valori proposti nei menu filtro (il motore accetta qualsiasi stringa esatta)
REPLICATION_CHOICES: Tuple[str, ...] = ("Fisica", "Sintetica")
CURRENCY_CHOICES: Tuple[str, ...] = ("EUR", "USD", "GBP")

FILTER_ALL = "all"


# =========================
# IMPORT CSV
# =========================
CSV_OPTIONS = {
    "delimiters": ",;\t|",   # Delimitatori candidati per lo sniffing
    "encoding": "utf-8-sig", # Rimuove il BOM iniziale se presente
    "sample_size": 64 * 1024,
}


# =========================
# EXPORT OPTIONS
# =========================
EXPORT = {
    "enabled": False,                     # True = salva file, False = solo riepilogo
    "output_dir": "./output",             # Directory di output
    "formats": ["csv", "json", "txt"],    # csv = tabella, json = strutturato, txt = lista ISIN
    "basename": "portafoglio_etf",
}


# =========================
# CONFIG BUILDER
# =========================
def get_config() -> dict:
    """
    Costruisce la configurazione di default per la CLI.

    Restituisce copie: il chiamante può modificarle senza toccare i default.
    """
    return {
        "reference_amounts": list(REFERENCE_AMOUNTS),
        "allocations": {},
        "fund_weights": {},
        "starred": [],
        "filters": {},
        "export": dict(EXPORT, formats=list(EXPORT["formats"])),
    }
