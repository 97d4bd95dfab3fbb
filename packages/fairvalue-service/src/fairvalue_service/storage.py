"""
Flat-file dataset store.

One JSON document per company, ``{EXCHANGE}_{TICKER}.json`` with shape
``{ticker, exchange, rows}``, plus a catalog document bundling every company
as ``{companies: [...]}`` for static dashboards.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Union

from fairvalue_engine import CompanyDataset, dataset_key

from fairvalue_service.errors import CorruptDatasetError, DatasetNotFoundError

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


class DatasetStore:
    def __init__(self, data_dir: PathLike):
        self.data_dir = Path(data_dir)

    def path_for(self, exchange: str, ticker: str) -> Path:
        return self.data_dir / f"{dataset_key(exchange, ticker)}.json"

    def save(self, dataset: CompanyDataset) -> Path:
        self.data_dir.mkdir(parents=True, exist_ok=True)
        path = self.path_for(dataset.exchange, dataset.ticker)
        path.write_text(json.dumps(dataset.to_dict(), indent=2), encoding="utf-8")
        logger.info(f"Saved {len(dataset.rows)} rows for {dataset.key} to {path}")
        return path

    def exists(self, exchange: str, ticker: str) -> bool:
        return self.path_for(exchange, ticker).is_file()

    def load(self, exchange: str, ticker: str) -> CompanyDataset:
        path = self.path_for(exchange, ticker)
        if not path.is_file():
            raise DatasetNotFoundError(exchange, ticker)
        return self._read(path, self._read_payload(path))

    @staticmethod
    def _read_payload(path: Path) -> Any:
        try:
            return json.loads(path.read_text(encoding="utf-8"))
        except ValueError as e:
            raise CorruptDatasetError(path, str(e)) from e

    @staticmethod
    def _read(path: Path, payload: Any) -> CompanyDataset:
        # InputShapeError from a malformed rows list is a storage fault, not a client one.
        if not isinstance(payload, dict):
            raise CorruptDatasetError(path, f"expected an object, got {type(payload).__name__}")
        try:
            return CompanyDataset.from_dict(payload)
        except ValueError as e:
            raise CorruptDatasetError(path, str(e)) from e

    def list_datasets(self) -> List[CompanyDataset]:
        """Every readable dataset in the store; unreadable files are logged and skipped."""
        if not self.data_dir.is_dir():
            return []
        datasets = []
        for path in sorted(self.data_dir.glob("*_*.json")):
            try:
                payload = self._read_payload(path)
                if not isinstance(payload, dict) or "rows" not in payload:
                    continue
                datasets.append(self._read(path, payload))
            except CorruptDatasetError as e:
                logger.warning(f"Skipping {e}")
        return sorted(datasets, key=lambda d: d.key)

    def build_catalog(self) -> Dict[str, Any]:
        return {"companies": [d.to_dict() for d in self.list_datasets()]}

    def write_catalog(self, path: PathLike) -> Path:
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        catalog = self.build_catalog()
        path.write_text(json.dumps(catalog, indent=2), encoding="utf-8")
        logger.info(f"Wrote catalog with {len(catalog['companies'])} companies to {path}")
        return path


def load_catalog(path: PathLike) -> List[CompanyDataset]:
    """Read a ``{companies: [...]}`` document; each company's rows are normalized."""
    payload = json.loads(Path(path).read_text(encoding="utf-8"))
    companies = payload.get("companies") if isinstance(payload, dict) else None
    if not isinstance(companies, list):
        return []
    return [CompanyDataset.from_dict(c) for c in companies if isinstance(c, dict)]
