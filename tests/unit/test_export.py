import json

import pandas as pd
import pytest

from etf_allocator.models.portfolio import MacroCategory
from etf_allocator.reporting.export import (
    EXPORT_COLUMNS,
    build_export,
    export_all_data,
    export_to_frame,
)

from tests.fixtures.sample_catalogue import (
    BLANK_ISIN_NAME,
    BOND_GLOBAL,
    EQUITY_ALL_WORLD,
    EQUITY_MSCI_WORLD,
    GOLD,
)

BONDS = MacroCategory.BONDS
EQUITY = MacroCategory.EQUITY


@pytest.fixture
def complete_ledger(ledger):
    ledger.set_category_allocation(BONDS, 60)
    ledger.set_category_allocation(EQUITY, 40)
    ledger.set_fund_weight(BONDS, BOND_GLOBAL, 100)
    ledger.set_fund_weight(EQUITY, EQUITY_ALL_WORLD, 50)
    ledger.set_fund_weight(EQUITY, EQUITY_MSCI_WORLD, 50)
    return ledger


def test_rows_carry_effective_weight_of_whole_portfolio(catalogue, complete_ledger):
    export = build_export(catalogue, complete_ledger)
    assert [(r.fund_id, r.effective_weight) for r in export.rows] == [
        (BOND_GLOBAL, pytest.approx(60.0)),
        (EQUITY_ALL_WORLD, pytest.approx(20.0)),
        (EQUITY_MSCI_WORLD, pytest.approx(20.0)),
    ]
    assert export.rows[0].ter == "0.10%"
    assert export.rows[1].name == "Vanguard FTSE All-World"
    assert export.category_subtotals == {BONDS: pytest.approx(60.0), EQUITY: pytest.approx(40.0)}


def test_rows_follow_category_then_selection_order(catalogue, ledger):
    ledger.set_category_allocation(EQUITY, 70)
    ledger.set_category_allocation(BONDS, 30)
    ledger.set_fund_weight(EQUITY, EQUITY_MSCI_WORLD, 50)
    ledger.set_fund_weight(EQUITY, EQUITY_ALL_WORLD, 50)
    ledger.set_fund_weight(BONDS, BOND_GLOBAL, 100)
    export = build_export(catalogue, ledger)
    assert [r.fund_id for r in export.rows] == [BOND_GLOBAL, EQUITY_MSCI_WORLD, EQUITY_ALL_WORLD]


def test_rows_skip_weight_zero_inactive_and_dangling(catalogue, ledger):
    ledger.set_category_allocation(EQUITY, 100)
    ledger.toggle_fund_selection(EQUITY, EQUITY_MSCI_WORLD)
    ledger.set_fund_weight(EQUITY, "IE00GONE0000", 50)
    ledger.set_fund_weight(EQUITY, EQUITY_ALL_WORLD, 50)
    ledger.set_fund_weight(MacroCategory.COMMODITIES, GOLD, 100)
    export = build_export(catalogue, ledger)
    assert [r.fund_id for r in export.rows] == [EQUITY_ALL_WORLD]
    assert export.isin_list == EQUITY_ALL_WORLD


def test_cost_table_uses_weighted_ter(catalogue, complete_ledger):
    export = build_export(catalogue, complete_ledger)
    assert export.weighted_expense_ratio == "0.1440"
    assert list(export.cost_table) == [10_000, 50_000, 100_000]
    assert export.cost_table[10_000] == pytest.approx(14.40)
    assert export.cost_table[50_000] == pytest.approx(72.00)
    assert export.cost_table[100_000] == pytest.approx(144.00)


def test_custom_reference_amounts(catalogue, complete_ledger):
    export = build_export(catalogue, complete_ledger, reference_amounts=[1_000])
    assert export.cost_table == {1_000: pytest.approx(1.44)}


def test_isin_list_in_row_order_and_omits_blank_codes(catalogue, ledger):
    blank = next(r for r in catalogue if r.name == BLANK_ISIN_NAME)
    ledger.set_category_allocation(EQUITY, 100)
    ledger.set_fund_weight(EQUITY, EQUITY_MSCI_WORLD, 40)
    ledger.set_fund_weight(EQUITY, blank.id, 30)
    ledger.set_fund_weight(EQUITY, EQUITY_ALL_WORLD, 30)
    export = build_export(catalogue, ledger)
    assert len(export.rows) == 3
    assert export.isin_list == f"{EQUITY_MSCI_WORLD}\n{EQUITY_ALL_WORLD}"


def test_empty_export(catalogue, ledger):
    export = build_export(catalogue, ledger)
    assert export.rows == []
    assert export.isin_list == ""
    assert export.weighted_expense_ratio == "0.0000"
    assert all(cost == 0 for cost in export.cost_table.values())
    assert export_to_frame(export).empty


def test_export_to_frame(catalogue, complete_ledger):
    frame = export_to_frame(build_export(catalogue, complete_ledger))
    assert list(frame.columns) == EXPORT_COLUMNS
    assert list(frame["Categoria"]) == ["Obbligazionari", "Azionari", "Azionari"]
    assert list(frame["% Portafoglio"]) == [60.0, 20.0, 20.0]


def test_export_all_data_disabled(catalogue, complete_ledger, tmp_path):
    export = build_export(catalogue, complete_ledger)
    assert export_all_data(export, {"enabled": False, "output_dir": str(tmp_path)}) == []
    assert list(tmp_path.iterdir()) == []


def test_export_all_data_writes_requested_formats(catalogue, complete_ledger, tmp_path):
    export = build_export(catalogue, complete_ledger)
    files = export_all_data(
        export,
        {"enabled": True, "output_dir": str(tmp_path), "formats": ["csv", "json", "txt"], "basename": "test"},
        summary={"is_portfolio_complete": True},
    )
    assert [f.suffix for f in files] == [".csv", ".json", ".txt"]
    assert all(f.exists() for f in files)

    table = pd.read_csv(files[0], sep=";", decimal=",", dtype={"% Portafoglio": float})
    assert list(table["ISIN"]) == [BOND_GLOBAL, EQUITY_ALL_WORLD, EQUITY_MSCI_WORLD]

    data = json.loads(files[1].read_text(encoding="utf-8"))
    assert data["weighted_expense_ratio"] == "0.1440"
    assert data["category_subtotals"] == {"bonds": 60.0, "equity": 40.0}
    assert data["summary"]["is_portfolio_complete"] is True
    assert data["rows"][0]["category_label"] == "Obbligazionari"

    assert files[2].read_text(encoding="utf-8").splitlines() == [BOND_GLOBAL, EQUITY_ALL_WORLD, EQUITY_MSCI_WORLD]


def test_export_all_data_only_txt(catalogue, complete_ledger, tmp_path):
    export = build_export(catalogue, complete_ledger)
    files = export_all_data(export, {"enabled": True, "output_dir": str(tmp_path), "formats": ["txt"]})
    assert len(files) == 1
    assert files[0].name.startswith("portafoglio_etf_isin_")
