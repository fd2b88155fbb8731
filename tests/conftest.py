import pytest

from etf_allocator.core.session import PortfolioSession
from etf_allocator.data.catalogue import Catalogue
from etf_allocator.core.allocation import AllocationLedger

from tests.fixtures.sample_catalogue import get_sample_rows, rows_to_csv


@pytest.fixture
def sample_rows():
    return get_sample_rows()


@pytest.fixture
def catalogue(sample_rows):
    cat = Catalogue()
    cat.ingest(sample_rows)
    return cat


@pytest.fixture
def ledger():
    return AllocationLedger()


@pytest.fixture
def session(sample_rows):
    s = PortfolioSession()
    s.ingest(sample_rows, source_name="sample")
    return s


@pytest.fixture
def sample_csv(tmp_path):
    path = tmp_path / "catalogo.csv"
    # BOM iniziale come negli export Excel
    path.write_text("\ufeff" + rows_to_csv(), encoding="utf-8")
    return path
