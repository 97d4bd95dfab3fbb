"""
Tests for the flat-file dataset store and catalog.
"""

import json

import pytest

from fairvalue_engine import CompanyDataset, FinancialRecord
from fairvalue_service.errors import CorruptDatasetError, DatasetNotFoundError
from fairvalue_service.storage import DatasetStore, load_catalog


@pytest.fixture
def store(tmp_path):
    return DatasetStore(tmp_path / "out")


@pytest.fixture
def dataset():
    return CompanyDataset(
        ticker="AAPL",
        exchange="NASDAQ",
        rows=(
            FinancialRecord(2022, 394.3, 119.4, 99.8, 15.9),
            FinancialRecord(2023, 383.3, 114.3, 97.0, None),
        ),
    )


def test_path_for_is_upper_cased(store):
    assert store.path_for("nasdaq", "aapl").name == "NASDAQ_AAPL.json"


def test_save_writes_expected_document(store, dataset):
    path = store.save(dataset)

    assert path == store.data_dir / "NASDAQ_AAPL.json"
    payload = json.loads(path.read_text())
    assert payload["ticker"] == "AAPL"
    assert payload["exchange"] == "NASDAQ"
    assert payload["rows"][0] == {
        "year": 2022,
        "revenue": 394.3,
        "operatingIncome": 119.4,
        "netIncome": 99.8,
        "sharesOutstanding": 15.9,
    }
    assert payload["rows"][1]["sharesOutstanding"] is None


def test_load_round_trip(store, dataset):
    store.save(dataset)
    assert store.load("nasdaq", "aapl") == dataset


def test_load_missing_raises(store):
    with pytest.raises(DatasetNotFoundError) as exc_info:
        store.load("NYSE", "XYZ")
    assert isinstance(exc_info.value, LookupError)
    assert exc_info.value.ticker == "XYZ"


def test_load_normalizes_legacy_rows(store):
    store.data_dir.mkdir(parents=True)
    legacy = {
        "ticker": "TSLA",
        "exchange": "NASDAQ",
        "rows": [{"Year": "2021", "Sales": 53.8}, {"year": None, "revenue": 1}, {"year": 2020, "revenue": 31.5}],
    }
    (store.data_dir / "NASDAQ_TSLA.json").write_text(json.dumps(legacy))

    dataset = store.load("NASDAQ", "TSLA")

    assert [(r.year, r.revenue) for r in dataset.rows] == [(2020, 31.5), (2021, 53.8)]


def test_exists(store, dataset):
    assert not store.exists("NASDAQ", "AAPL")
    store.save(dataset)
    assert store.exists("NASDAQ", "AAPL")


def test_catalog(store, dataset, tmp_path):
    store.save(dataset)
    store.save(CompanyDataset("MSFT", "NASDAQ", (FinancialRecord(2023, 211.9),)))

    catalog = store.build_catalog()
    assert [c["ticker"] for c in catalog["companies"]] == ["AAPL", "MSFT"]

    catalog_path = store.write_catalog(tmp_path / "web" / "companies.json")
    loaded = load_catalog(catalog_path)
    assert [d.key for d in loaded] == ["NASDAQ_AAPL", "NASDAQ_MSFT"]
    assert loaded[0] == dataset


def test_catalog_in_data_dir_is_not_a_dataset(store, dataset):
    store.save(dataset)
    store.write_catalog(store.data_dir / "companies.json")

    assert [d.key for d in store.list_datasets()] == ["NASDAQ_AAPL"]


def test_list_datasets_missing_dir(store):
    assert store.list_datasets() == []
    assert store.build_catalog() == {"companies": []}


def test_load_catalog_without_companies(tmp_path):
    path = tmp_path / "companies.json"
    path.write_text(json.dumps({"items": []}))
    assert load_catalog(path) == []


@pytest.mark.parametrize("content", ["{not json", "[1, 2]", json.dumps({"ticker": "TSLA", "rows": {"year": 2020}})])
def test_load_corrupt_file_raises(store, content):
    store.data_dir.mkdir(parents=True)
    (store.data_dir / "NASDAQ_TSLA.json").write_text(content)

    with pytest.raises(CorruptDatasetError) as exc_info:
        store.load("NASDAQ", "TSLA")
    assert not isinstance(exc_info.value, ValueError)


def test_list_datasets_skips_corrupt_files(store, dataset, caplog):
    store.save(dataset)
    (store.data_dir / "NASDAQ_TSLA.json").write_text("{not json")

    assert [d.key for d in store.list_datasets()] == ["NASDAQ_AAPL"]
    assert any("NASDAQ_TSLA.json" in r.message for r in caplog.records)
