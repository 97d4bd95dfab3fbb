"""
Spreadsheet ingestion.

Reads the first sheet of an Excel workbook (or a CSV export), normalizes the
rows and persists them as ``{EXCHANGE}_{TICKER}.json``.

Usage:
    fairvalue-ingest data/tesla.xlsx TSLA NASDAQ [--data-dir out] [--catalog]
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import pandas as pd

from fairvalue_engine import CompanyDataset, normalize

from fairvalue_service.config import get_settings
from fairvalue_service.storage import DatasetStore

logger = logging.getLogger(__name__)


def load_spreadsheet_rows(path: Path) -> List[Dict[str, Any]]:
    """Return the first sheet of ``path`` as a list of ``{header: cell}`` dicts."""
    if path.suffix.lower() == ".csv":
        frame = pd.read_csv(path)
    else:
        frame = pd.read_excel(path, sheet_name=0)

    # Empty cells come back as NaN; the normalizer expects None.
    frame = frame.astype(object).where(pd.notna(frame), None)
    return frame.to_dict(orient="records")


def ingest_file(path: Path, ticker: str, exchange: str, store: DatasetStore) -> Path:
    raw_rows = load_spreadsheet_rows(path)
    rows = normalize(raw_rows)
    logger.info(f"Normalized {len(rows)} of {len(raw_rows)} rows from {path}")

    dataset = CompanyDataset(ticker=ticker.upper(), exchange=exchange.upper(), rows=rows)
    return store.save(dataset)


def main(argv: Optional[Sequence[str]] = None) -> int:
    settings = get_settings()
    parser = argparse.ArgumentParser(description="Ingest an annual financials spreadsheet for one company.")
    parser.add_argument("path", type=Path, help="Excel (.xlsx/.xls) or CSV file; the first sheet is used")
    parser.add_argument("ticker", type=str, help="Ticker symbol (e.g., 'TSLA')")
    parser.add_argument("exchange", type=str, help="Exchange code (e.g., 'NASDAQ')")
    parser.add_argument("--data-dir", type=Path, default=settings.DATA_DIR, help="Output directory for datasets")
    parser.add_argument(
        "--catalog",
        action="store_true",
        help="Also rebuild the multi-company catalog (CATALOG_PATH)",
    )
    args = parser.parse_args(argv)

    logging.basicConfig(level=settings.LOG_LEVEL)

    if not args.path.is_file():
        print(f"Error: file not found: {args.path}", file=sys.stderr)
        return 1

    store = DatasetStore(args.data_dir)
    saved = ingest_file(args.path, args.ticker, args.exchange, store)
    print(f"Saved: {saved}")

    if args.catalog:
        catalog = store.write_catalog(settings.CATALOG_PATH)
        print(f"Catalog: {catalog}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
