import logging

import pytest

from etf_allocator.data.catalogue import Catalogue, surrogate_id
from etf_allocator.models.portfolio import MacroCategory

from tests.fixtures.sample_catalogue import (
    BLANK_ISIN_NAME,
    BOND_GLOBAL,
    EQUITY_ALL_WORLD,
    MULTI_ASSET,
    PROPERTY,
    VALID_ROW_COUNT,
)


def _find_by_name(catalogue, name):
    return next(r for r in catalogue if r.name == name)


def test_ingest_keeps_only_rows_with_name_and_identifier(sample_rows):
    catalogue = Catalogue()
    assert catalogue.ingest(sample_rows) == VALID_ROW_COUNT
    assert len(catalogue) == VALID_ROW_COUNT


def test_ingest_logs_drops_and_total(sample_rows, caplog):
    caplog.set_level(logging.DEBUG, logger="etf_allocator")
    Catalogue().ingest(sample_rows)
    messages = [r.getMessage() for r in caplog.records]
    assert any("2 righe scartate" in m for m in messages)
    assert any(f"Catalogo caricato: {VALID_ROW_COUNT} ETF" in m for m in messages)


def test_all_preserves_source_order(catalogue, sample_rows):
    assert [r.source_row for r in catalogue.all()] == sorted(r.source_row for r in catalogue.all())
    assert catalogue.all()[0].id == BOND_GLOBAL


def test_values_are_trimmed(catalogue):
    record = catalogue.by_id(EQUITY_ALL_WORLD)
    assert record.name == "Vanguard FTSE All-World"
    assert record.raw_fields["Nome"] == "Vanguard FTSE All-World"


def test_missing_values_are_none(catalogue):
    record = catalogue.by_id(MULTI_ASSET)
    assert record.expense_ratio is None
    assert record.assets_under_management is None
    assert record.replication_method is None
    assert record.ter_display == "N/D"
    assert record.aum_display == "N/D"


def test_unparseable_aum_kept_verbatim(catalogue):
    record = catalogue.by_id(PROPERTY)
    assert record.aum_value is None
    assert record.aum_display == "n.d."


def test_classification_at_ingest(catalogue):
    counts = catalogue.counts_by_category()
    assert counts[MacroCategory.BONDS] == 2
    assert counts[MacroCategory.EQUITY] == 5
    assert counts[MacroCategory.COMMODITIES] == 1
    assert counts[MacroCategory.REAL_ESTATE] == 1
    assert catalogue.by_id(MULTI_ASSET).classification_method == "DEFAULT"
    assert catalogue.by_id(BOND_GLOBAL).classification_method == "KEYWORD:bonds:primary"


def test_blank_identifier_gets_deterministic_surrogate(sample_rows):
    first, second = Catalogue(), Catalogue()
    first.ingest(sample_rows)
    second.ingest(sample_rows)

    record = _find_by_name(first, BLANK_ISIN_NAME)
    assert record.identifier_code is None
    assert record.id == surrogate_id(record.source_row, BLANK_ISIN_NAME)
    assert record.id.startswith("row-")
    assert _find_by_name(second, BLANK_ISIN_NAME).id == record.id


def test_blank_identifier_rows_never_merge():
    rows = [
        {"Nome": "Stesso nome", "ISIN": " ", "Categoria": "Azionari"},
        {"Nome": "Stesso nome", "ISIN": " ", "Categoria": "Azionari"},
    ]
    catalogue = Catalogue()
    assert catalogue.ingest(rows) == 2
    ids = [r.id for r in catalogue]
    assert len(set(ids)) == 2


def test_duplicate_identifier_gets_suffix(caplog):
    rows = [
        {"Nome": "Primo", "ISIN": "IE00TEST0001", "Categoria": "Azionari"},
        {"Nome": "Secondo", "ISIN": "IE00TEST0001", "Categoria": "Azionari"},
    ]
    catalogue = Catalogue()
    with caplog.at_level(logging.WARNING, logger="etf_allocator"):
        catalogue.ingest(rows)
    assert [r.id for r in catalogue] == ["IE00TEST0001", "IE00TEST0001#2"]
    assert all(r.identifier_code == "IE00TEST0001" for r in catalogue)
    assert any("duplicato" in r.getMessage() for r in caplog.records)


def test_duplicate_suffix_skips_literal_identifiers():
    rows = [
        {"Nome": "A", "ISIN": "X"},
        {"Nome": "B", "ISIN": "X"},
        {"Nome": "C", "ISIN": "X#2"},
    ]
    catalogue = Catalogue()
    assert catalogue.ingest(rows) == 3
    assert [r.id for r in catalogue] == ["X", "X#3", "X#2"]
    assert catalogue.by_id("X#3").name == "B"
    assert catalogue.by_id("X#2").name == "C"


def test_literal_suffixed_identifier_first():
    rows = [
        {"Nome": "A", "ISIN": "X#2"},
        {"Nome": "B", "ISIN": "X"},
        {"Nome": "C", "ISIN": "X"},
    ]
    catalogue = Catalogue()
    catalogue.ingest(rows)
    ids = [r.id for r in catalogue]
    assert ids == ["X#2", "X", "X#3"]
    assert len({catalogue.by_id(i).name for i in ids}) == 3


def test_column_names_are_normalised():
    rows = [{"\ufeffNome": "Fondo", " ISIN ": "IE00TEST0002", "AuM  (Mln EUR)": "10"}]
    catalogue = Catalogue()
    catalogue.ingest(rows)
    record = catalogue.by_id("IE00TEST0002")
    assert record.name == "Fondo"
    assert record.aum_value == 10.0


def test_ingest_replaces_previous_contents(catalogue):
    catalogue.ingest([{"Nome": "Unico", "ISIN": "IE00TEST0003"}])
    assert len(catalogue) == 1
    assert catalogue.by_id(BOND_GLOBAL) is None
    assert "IE00TEST0003" in catalogue


def test_by_id_miss_is_none(catalogue):
    assert catalogue.by_id("NOT-THERE") is None
    assert "NOT-THERE" not in catalogue


def test_by_category_accepts_string(catalogue):
    bonds = catalogue.by_category("bonds")
    assert [r.id for r in bonds] == [BOND_GLOBAL, "IE00B4WXJJ64"]


def test_available_values(catalogue):
    assert catalogue.available_values("currency") == ["EUR", "USD"]
    assert catalogue.available_values("replication_method", MacroCategory.EQUITY) == ["Fisica", "Sintetica"]
    with pytest.raises(ValueError):
        catalogue.available_values("name")


def test_to_frame(catalogue):
    frame = catalogue.to_frame()
    assert len(frame) == VALID_ROW_COUNT
    assert frame.loc[EQUITY_ALL_WORLD, "macro_category"] == "equity"
    assert frame.loc[EQUITY_ALL_WORLD, "aum_value"] == 15000.0
    assert "raw_fields" not in frame.columns


def test_to_frame_empty():
    assert Catalogue().to_frame().empty
