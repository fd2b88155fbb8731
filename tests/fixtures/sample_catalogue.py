"""
Sample catalogue fixtures for deterministic tests.

Righe grezze come le produce un export CSV di screener italiano:
decimali con virgola, colonne con nomi variabili, qualche riga sporca.
"""

import copy

BOND_GLOBAL = "IE00B3F81409"
BOND_EURO_GOV = "IE00B4WXJJ64"
EQUITY_ALL_WORLD = "IE00BK5BQT80"
EQUITY_MSCI_WORLD = "IE00B4L5Y983"
EQUITY_WORLD_SWAP = "LU0274208692"
GOLD = "IE00B579F325"
PROPERTY = "IE00B1FZS244"
MULTI_ASSET = "IE00BYZ2X986"

BLANK_ISIN_NAME = "ETF senza ISIN"

SAMPLE_ROWS = [
    {
        "Nome": "iShares Core Global Aggregate Bond",
        "ISIN": BOND_GLOBAL,
        "Ticker": "AGGH",
        "Categoria": "Obbligazionari Globali",
        "Categoria Morningstar": "Global Bond - EUR Hedged",
        "TER": "0,10",
        "Valuta": "EUR",
        "AuM (Mln EUR)": "7500",
        "Distribuzione": "Accumulazione",
        "Replica": "Fisica",
    },
    {
        "Nome": "iShares Core Euro Government Bond",
        "ISIN": BOND_EURO_GOV,
        "Ticker": "IEGA",
        "Categoria": "Obbligazionari Euro",
        "Categoria Morningstar": "EUR Government Bond",
        "TER": "0,09",
        "Valuta": "EUR",
        "AuM (Mln EUR)": "3200",
        "Distribuzione": "Dist",
        "Replica": "Fisica",
    },
    {
        "Nome": " Vanguard FTSE All-World ",
        "ISIN": EQUITY_ALL_WORLD,
        "Ticker": "VWCE",
        "Categoria": "Azionari Globali",
        "Categoria Morningstar": "Global Large-Cap Blend Equity",
        "TER": "0,22",
        "Valuta": "EUR",
        "AuM (Mln EUR)": "15000",
        "Distribuzione": "Acc",
        "Replica": "Fisica",
    },
    {
        "Nome": "iShares Core MSCI World",
        "ISIN": EQUITY_MSCI_WORLD,
        "Ticker": "SWDA",
        "Categoria": "Azionari Globali",
        "Categoria Morningstar": "Global Large-Cap Blend Equity",
        "TER": "0,20",
        "Valuta": "USD",
        "AuM (Mln EUR)": "60000",
        "Distribuzione": "Accumulazione",
        "Replica": "Fisica",
    },
    {
        "Nome": "Xtrackers MSCI World Swap",
        "ISIN": EQUITY_WORLD_SWAP,
        "Ticker": "XMWO",
        "Categoria": "Azionari",
        "Categoria Morningstar": "Global Large-Cap Blend Equity",
        "TER": "0,45",
        "Valuta": "USD",
        "AuM (Mln EUR)": "4000",
        "Distribuzione": "Distribuzione",
        "Replica": "Sintetica",
    },
    {
        "Nome": "Invesco Physical Gold",
        "ISIN": GOLD,
        "Ticker": "SGLD",
        "Categoria": "Materie Prime",
        "Categoria Morningstar": "Commodities - Precious Metals",
        "TER": "0,12",
        "Valuta": "USD",
        "AuM (Mln EUR)": "15000",
        "Distribuzione": "Acc",
        "Replica": "Fisica",
    },
    {
        "Nome": "iShares Developed Markets Property Yield",
        "ISIN": PROPERTY,
        "Ticker": "IWDP",
        "Categoria": "Immobiliare",
        "Categoria Morningstar": "Property - Indirect Global",
        "TER": "0,59",
        "Valuta": "USD",
        "AuM (Mln EUR)": "n.d.",
        "Distribuzione": "Dist",
        "Replica": "Fisica",
    },
    {
        "Nome": "Multi Asset Balanced",
        "ISIN": MULTI_ASSET,
        "Ticker": "MABL",
        "Categoria": "Bilanciati",
        "Categoria Morningstar": "EUR Moderate Allocation",
        "TER": "",
        "Valuta": "EUR",
        "AuM (Mln EUR)": "",
        "Distribuzione": "Acc",
        "Replica": "",
    },
    # nome vuoto: scartata
    {
        "Nome": "",
        "ISIN": "IE00BDBRDM35",
        "Categoria": "Obbligazionari",
    },
    # ISIN assente: scartata
    {
        "Nome": "ETF senza colonna ISIN",
        "ISIN": None,
        "Categoria": "Azionari",
    },
    # ISIN di soli spazi: tenuta con id surrogato
    {
        "Nome": BLANK_ISIN_NAME,
        "ISIN": "   ",
        "Ticker": "NOIS",
        "Categoria": "Azionari Europa",
        "TER": "0,15",
        "Valuta": "EUR",
        "AuM (Mln EUR)": "800",
        "Distribuzione": "Acc",
        "Replica": "Fisica",
    },
]

VALID_ROW_COUNT = 9
DROPPED_ROW_COUNT = 2


def get_sample_rows():
    """Copia profonda: i test possono modificarla liberamente."""
    return copy.deepcopy(SAMPLE_ROWS)


def rows_to_csv(rows=None, delimiter=";") -> str:
    """Serializza le righe campione in testo CSV (celle None -> vuote)."""
    rows = rows if rows is not None else SAMPLE_ROWS
    columns = []
    for row in rows:
        for column in row:
            if column not in columns:
                columns.append(column)
    lines = [delimiter.join(columns)]
    for row in rows:
        values = []
        for column in columns:
            value = row.get(column)
            values.append("" if value is None else value)
        lines.append(delimiter.join(values))
    return "\n".join(lines) + "\n"
