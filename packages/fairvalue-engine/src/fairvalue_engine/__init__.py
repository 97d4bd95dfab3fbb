"""
Fair Value Engine
=================

Pure normalization and valuation-metrics core with zero external dependencies.

Public API:
- ``FinancialRecord`` / ``CompanyDataset`` / ``GrowthPoint`` / ``FairValuePoint``
  / ``ValuationSnapshot`` / ``MarketFundamentals`` — data contracts
- ``normalize(raw_rows)`` — heterogeneous rows to year-ordered records
- ``compute_growth(rows)`` / ``compute_fair_value_per_year(rows, multiple)``
- ``compute_blended_fair_value(snapshot)`` / ``build_valuation_snapshot(...)``
"""

from fairvalue_engine.errors import InputShapeError
from fairvalue_engine.metrics import (
    BLEND_WEIGHTS,
    EV_WEIGHT,
    PE_WEIGHT,
    PS_WEIGHT,
    as_number,
    build_chart_series,
    build_valuation_snapshot,
    compute_blended_fair_value,
    compute_fair_value_per_year,
    compute_growth,
    merge_series,
)
from fairvalue_engine.models import (
    CompanyDataset,
    FairValuePoint,
    FinancialRecord,
    GrowthPoint,
    MarketFundamentals,
    SeriesPoint,
    ValuationSnapshot,
    dataset_key,
)
from fairvalue_engine.normalizer import normalize, to_number

__all__ = [
    "BLEND_WEIGHTS",
    "EV_WEIGHT",
    "PE_WEIGHT",
    "PS_WEIGHT",
    "CompanyDataset",
    "FairValuePoint",
    "FinancialRecord",
    "GrowthPoint",
    "InputShapeError",
    "MarketFundamentals",
    "SeriesPoint",
    "ValuationSnapshot",
    "as_number",
    "build_chart_series",
    "build_valuation_snapshot",
    "compute_blended_fair_value",
    "compute_fair_value_per_year",
    "compute_growth",
    "dataset_key",
    "merge_series",
    "normalize",
    "to_number",
]
