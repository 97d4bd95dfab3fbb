"""
Normalizer
==========

Turns loosely-typed rows (spreadsheet exports, persisted JSON, catalog
entries) into an ordered tuple of ``FinancialRecord``.

Header matching is case-, whitespace- and spacing-insensitive, and a few
aliases are accepted per field (``sales`` for revenue, snake_case for the
camelCase names). Bad field content never raises: unparseable values become
``None`` and rows without a usable year are dropped.
"""

from __future__ import annotations

import logging
import math
import numbers
from collections.abc import Iterable, Mapping
from typing import Any, Dict, List, Optional, Tuple

from .errors import InputShapeError
from .models import FinancialRecord

logger = logging.getLogger(__name__)

# Normalized header keys, in lookup priority order.
YEAR_KEYS: Tuple[str, ...] = ("year",)
REVENUE_KEYS: Tuple[str, ...] = ("revenue", "sales")
OPERATING_INCOME_KEYS: Tuple[str, ...] = ("operatingincome", "operating_income")
NET_INCOME_KEYS: Tuple[str, ...] = ("netincome", "net_income")
SHARES_OUTSTANDING_KEYS: Tuple[str, ...] = ("sharesoutstanding", "shares_outstanding")


def normalize_header(header: Any) -> str:
    """``" Net Income "`` -> ``"netincome"``."""
    return "".join(str(header).split()).lower()


def to_number(value: Any) -> Optional[float]:
    """
    Coerce a cell to a finite float, or ``None``.

    Accepts ints/floats (numpy scalars included) and numeric strings with
    optional thousands separators. Booleans, empty strings, NaN and infinities
    are not numbers here.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, numbers.Number):
        try:
            number = float(value)
        except (TypeError, ValueError, OverflowError):
            return None
    elif isinstance(value, str):
        text = value.strip().replace(",", "")
        if not text:
            return None
        try:
            number = float(text)
        except ValueError:
            return None
    else:
        return None
    return number if math.isfinite(number) else None


def _to_year(value: Any) -> Optional[int]:
    number = to_number(value)
    if number is None or not number.is_integer():
        return None
    return int(number)


def _lookup(row: Mapping, keys: Tuple[str, ...]) -> Any:
    # First alias carrying a non-null value wins.
    for key in keys:
        value = row.get(key)
        if value is not None:
            return value
    return None


def _check_rows(raw_rows: Any) -> List[Mapping]:
    if raw_rows is None or isinstance(raw_rows, (str, bytes, Mapping)):
        raise InputShapeError(f"Expected a sequence of rows, got {type(raw_rows).__name__}")
    if not isinstance(raw_rows, Iterable):
        raise InputShapeError(f"Expected a sequence of rows, got {type(raw_rows).__name__}")

    rows = list(raw_rows)
    for index, row in enumerate(rows):
        if not isinstance(row, Mapping):
            raise InputShapeError(f"Row {index} is {type(row).__name__}, expected a mapping")
    return rows


def normalize_row(row: Mapping) -> Optional[FinancialRecord]:
    """Normalize a single row. Returns ``None`` when the row has no usable year."""
    lookup: Dict[str, Any] = {normalize_header(k): v for k, v in row.items()}

    year = _to_year(_lookup(lookup, YEAR_KEYS))
    if year is None:
        return None

    shares: Optional[float] = None
    if any(key in lookup for key in SHARES_OUTSTANDING_KEYS):
        shares = to_number(_lookup(lookup, SHARES_OUTSTANDING_KEYS))

    return FinancialRecord(
        year=year,
        revenue=to_number(_lookup(lookup, REVENUE_KEYS)),
        operating_income=to_number(_lookup(lookup, OPERATING_INCOME_KEYS)),
        net_income=to_number(_lookup(lookup, NET_INCOME_KEYS)),
        shares_outstanding=shares,
    )


def normalize(raw_rows: Iterable[Mapping]) -> Tuple[FinancialRecord, ...]:
    """
    Convert raw key-value rows into ``FinancialRecord`` sorted by year.

    Parameters
    ----------
    raw_rows : iterable of mappings
        Rows as produced by a spreadsheet reader or loaded from JSON.

    Returns
    -------
    tuple of FinancialRecord
        Ascending by year (stable, so duplicate years keep input order).

    Raises
    ------
    InputShapeError
        If ``raw_rows`` is not an iterable of mappings.
    """
    rows = _check_rows(raw_rows)
    records = []
    for row in rows:
        record = normalize_row(row)
        if record is not None:
            records.append(record)

    if len(records) < len(rows):
        logger.debug("Dropped %d row(s) without a valid year", len(rows) - len(records))

    return tuple(sorted(records, key=lambda r: r.year))
