"""
Metrics Engine
==============

Derived views over a normalized ``FinancialRecord`` series:

- ``compute_growth`` — year-over-year revenue growth
- ``compute_fair_value_per_year`` — target-multiple equity value per year
- ``compute_blended_fair_value`` — fixed-weight EV/PE/PS fair value per share
- ``build_valuation_snapshot`` — adapter from market fundamentals to a snapshot

Everything here is pure: no I/O, no configuration, no shared state. Missing
numeric content propagates as ``None``; only a malformed input shape raises.
"""

from __future__ import annotations

import math
import numbers
from collections.abc import Iterable, Mapping
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

from .errors import InputShapeError
from .models import (
    FairValuePoint,
    FinancialRecord,
    GrowthPoint,
    MarketFundamentals,
    SeriesPoint,
    ValuationSnapshot,
)

# Blend weights for the per-share fair value. EV-derived value dominates
# because it is neutral to capital structure.
EV_WEIGHT: float = 0.5
PE_WEIGHT: float = 0.25
PS_WEIGHT: float = 0.25
BLEND_WEIGHTS: Dict[str, float] = {"ev": EV_WEIGHT, "pe": PE_WEIGHT, "ps": PS_WEIGHT}

CHART_FIELDS: Tuple[Tuple[str, str], ...] = (
    ("revenue", "revenue"),
    ("operatingIncome", "operating_income"),
    ("netIncome", "net_income"),
)


def _is_finite(value: Any) -> bool:
    return isinstance(value, numbers.Real) and not isinstance(value, bool) and math.isfinite(value)


def _check_records(rows: Any) -> List[FinancialRecord]:
    if rows is None or isinstance(rows, (str, bytes, Mapping)) or not isinstance(rows, Iterable):
        raise InputShapeError(f"Expected a sequence of FinancialRecord, got {type(rows).__name__}")
    records = list(rows)
    for index, record in enumerate(records):
        if not isinstance(record, FinancialRecord):
            raise InputShapeError(f"Row {index} is {type(record).__name__}, expected FinancialRecord")
    return records


def compute_growth(rows: Sequence[FinancialRecord]) -> Tuple[GrowthPoint, ...]:
    """
    Year-over-year revenue growth for each adjacent pair, in input order.

    The result is one shorter than the input; the first point belongs to the
    second record. ``growth`` is ``None`` when either revenue is missing or the
    previous revenue is zero, so no NaN or infinity ever comes out.
    """
    records = _check_records(rows)
    points = []
    for prev, curr in zip(records, records[1:]):
        growth: Optional[float] = None
        if _is_finite(prev.revenue) and _is_finite(curr.revenue) and prev.revenue != 0:
            growth = (curr.revenue - prev.revenue) / prev.revenue
            if not math.isfinite(growth):
                growth = None
        points.append(GrowthPoint(year=curr.year, growth=growth))
    return tuple(points)


def compute_fair_value_per_year(
    rows: Sequence[FinancialRecord],
    target_multiple: float,
) -> Tuple[FairValuePoint, ...]:
    """
    Equity value (net income x target multiple) and its per-share value.

    Parameters
    ----------
    rows : sequence of FinancialRecord
        Normalized records; output is one-to-one and in the same order.
    target_multiple : float
        Caller-chosen P/E. Not validated here.

    Notes
    -----
    ``fair_value_per_share`` is ``None`` when shares outstanding is missing or
    zero; an explicit zero share count is treated as "not reported".
    """
    records = _check_records(rows)
    points = []
    for record in records:
        equity_value: Optional[float] = None
        if _is_finite(record.net_income):
            equity_value = record.net_income * target_multiple

        per_share: Optional[float] = None
        shares = record.shares_outstanding
        if equity_value is not None and _is_finite(shares) and shares:
            per_share = equity_value / shares

        points.append(
            FairValuePoint(year=record.year, equity_value=equity_value, fair_value_per_share=per_share)
        )
    return tuple(points)


def _snapshot_field(snapshot: Mapping, camel: str, snake: str) -> float:
    if camel in snapshot:
        return snapshot[camel]
    if snake in snapshot:
        return snapshot[snake]
    raise InputShapeError(f"Snapshot is missing {camel!r}")


def compute_blended_fair_value(snapshot: Union[ValuationSnapshot, Mapping[str, Any]]) -> float:
    """
    ``0.5 * fair_ev + 0.25 * fair_pe + 0.25 * fair_ps``.

    Accepts a ``ValuationSnapshot`` or a mapping with ``fairEV``/``fairPE``/
    ``fairPS`` (or snake_case) keys. The snapshot is expected to be fully
    resolved; non-finite fields are not guarded.
    """
    if isinstance(snapshot, ValuationSnapshot):
        fair_ev, fair_pe, fair_ps = snapshot.fair_ev, snapshot.fair_pe, snapshot.fair_ps
    elif isinstance(snapshot, Mapping):
        fair_ev = _snapshot_field(snapshot, "fairEV", "fair_ev")
        fair_pe = _snapshot_field(snapshot, "fairPE", "fair_pe")
        fair_ps = _snapshot_field(snapshot, "fairPS", "fair_ps")
    else:
        raise InputShapeError(f"Expected a ValuationSnapshot, got {type(snapshot).__name__}")

    return EV_WEIGHT * fair_ev + PE_WEIGHT * fair_pe + PS_WEIGHT * fair_ps


def as_number(value: Any) -> float:
    """
    Zero-defaulting coercion for market-data payloads.

    Unlike the normalizer, absent or unparseable values become ``0.0`` rather
    than ``None``: the live snapshot must always be fully numeric.
    """
    if value is None or isinstance(value, bool):
        return 0.0
    if isinstance(value, numbers.Real):
        try:
            number = float(value)
        except OverflowError:
            return 0.0
    elif isinstance(value, str):
        try:
            number = float(value.replace(",", "").strip())
        except ValueError:
            return 0.0
    else:
        return 0.0
    return number if math.isfinite(number) else 0.0


def build_valuation_snapshot(fundamentals: MarketFundamentals, currency: str = "USD") -> ValuationSnapshot:
    """
    Derive per-share EV, P/E and P/S fair values from market fundamentals.

    - EV per share: ``(enterprise_value - long_term_debt + cash) / shares``
    - P/E per share: ``forward_pe * net_income / shares``
    - P/S per share: ``price_to_sales * sales / shares``

    All three stay at 0 when the share count is not positive. Margins are
    converted from ratios to percentages.
    """
    fair_ev = fair_pe = fair_ps = 0.0
    shares = fundamentals.shares_outstanding
    if shares > 0:
        fair_ev = (fundamentals.enterprise_value - fundamentals.long_term_debt + fundamentals.cash) / shares
        fair_pe = (fundamentals.forward_pe * fundamentals.net_income) / shares
        fair_ps = (fundamentals.price_to_sales * fundamentals.sales) / shares

    return ValuationSnapshot(
        price=fundamentals.price,
        fair_ev=fair_ev,
        fair_pe=fair_pe,
        fair_ps=fair_ps,
        book_value=fundamentals.book_value_per_share,
        gross_margin=fundamentals.gross_margin * 100,
        net_margin=fundamentals.profit_margin * 100,
        op_margin=fundamentals.operating_margin * 100,
        currency=currency,
    )


def build_chart_series(rows: Sequence[FinancialRecord]) -> Dict[str, List[Dict[str, Any]]]:
    """Per-metric ``[{year, value}, ...]`` series for revenue, operating and net income."""
    records = _check_records(rows)
    return {
        name: [SeriesPoint(year=r.year, value=getattr(r, attr)).to_dict() for r in records]
        for name, attr in CHART_FIELDS
    }


def merge_series(series: Iterable[Mapping[str, Any]]) -> List[Dict[str, Any]]:
    """
    Merge ``[{"name": ..., "data": [{year, value}, ...]}, ...]`` into one row per year.

    Years are sorted ascending; a series without a point for a year gets ``None``.
    With duplicate years the first point of a series wins.
    """
    named = []
    for s in series:
        by_year: Dict[Any, Any] = {}
        for point in s["data"]:
            by_year.setdefault(point["year"], point.get("value"))
        named.append((s["name"], by_year))
    years = sorted({year for _, by_year in named for year in by_year})
    merged = []
    for year in years:
        row: Dict[str, Any] = {"year": year}
        for name, by_year in named:
            row[name] = by_year.get(year)
        merged.append(row)
    return merged
