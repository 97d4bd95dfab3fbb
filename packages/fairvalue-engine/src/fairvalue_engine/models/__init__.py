"""
Data models
===========

Immutable value types shared by the normalizer, the metrics engine and the
service layer. Python attributes are snake_case; ``to_dict()`` produces the
camelCase shape used by the persisted JSON datasets and the API.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple


@dataclass(frozen=True)
class FinancialRecord:
    """One fiscal year for one company."""

    year: int
    revenue: Optional[float] = None
    operating_income: Optional[float] = None
    net_income: Optional[float] = None
    shares_outstanding: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "year": self.year,
            "revenue": self.revenue,
            "operatingIncome": self.operating_income,
            "netIncome": self.net_income,
            "sharesOutstanding": self.shares_outstanding,
        }


@dataclass(frozen=True)
class CompanyDataset:
    """Company identity plus its year-ordered records.

    ``ticker`` and ``exchange`` are stored as given; upper-casing happens at the
    boundary (store, API, CLI).
    """

    ticker: str
    exchange: str
    rows: Tuple[FinancialRecord, ...] = ()

    @property
    def key(self) -> str:
        return dataset_key(self.exchange, self.ticker)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "ticker": self.ticker,
            "exchange": self.exchange,
            "rows": [r.to_dict() for r in self.rows],
        }

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "CompanyDataset":
        """Load a persisted ``{ticker, exchange, rows}`` document.

        Rows go back through the normalizer so hand-edited or older files load
        the same way a fresh ingestion would.
        """
        from fairvalue_engine.normalizer import normalize

        return cls(
            ticker=str(payload.get("ticker", "")),
            exchange=str(payload.get("exchange", "")),
            rows=normalize(payload.get("rows") or []),
        )


@dataclass(frozen=True)
class GrowthPoint:
    year: int
    growth: Optional[float]

    def to_dict(self) -> Dict[str, Any]:
        return {"year": self.year, "growth": self.growth}


@dataclass(frozen=True)
class FairValuePoint:
    year: int
    equity_value: Optional[float]
    fair_value_per_share: Optional[float]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "year": self.year,
            "equityValue": self.equity_value,
            "fairValuePerShare": self.fair_value_per_share,
        }


@dataclass(frozen=True)
class SeriesPoint:
    year: int
    value: Optional[float]

    def to_dict(self) -> Dict[str, Any]:
        return {"year": self.year, "value": self.value}


@dataclass(frozen=True)
class MarketFundamentals:
    """
    Already-resolved market and statement figures for one symbol.

    Produced by a market-data connector. Every field is a plain float; the
    connector is responsible for defaulting missing upstream values to 0.
    Margins are ratios (0.42 = 42%).
    """

    price: float = 0.0
    enterprise_value: float = 0.0
    shares_outstanding: float = 0.0
    cash: float = 0.0
    long_term_debt: float = 0.0
    forward_pe: float = 0.0
    net_income: float = 0.0
    price_to_sales: float = 0.0
    sales: float = 0.0
    book_value_per_share: float = 0.0
    gross_margin: float = 0.0
    profit_margin: float = 0.0
    operating_margin: float = 0.0


@dataclass(frozen=True)
class ValuationSnapshot:
    """
    Point-in-time per-share valuation inputs.

    ``fair_ev``, ``fair_pe`` and ``fair_ps`` are per-share values derived from
    enterprise value, earnings and sales multiples. Margins are percentages.
    """

    price: float = 0.0
    fair_ev: float = 0.0
    fair_pe: float = 0.0
    fair_ps: float = 0.0
    book_value: float = 0.0
    gross_margin: float = 0.0
    net_margin: float = 0.0
    op_margin: float = 0.0
    currency: str = "USD"

    def to_dict(self) -> Dict[str, Any]:
        from fairvalue_engine.metrics import compute_blended_fair_value

        return {
            "price": self.price,
            "fairEV": self.fair_ev,
            "fairPE": self.fair_pe,
            "fairPS": self.fair_ps,
            "weighted": compute_blended_fair_value(self),
            "bookValue": self.book_value,
            "grossMargin": self.gross_margin,
            "netMargin": self.net_margin,
            "opMargin": self.op_margin,
            "currency": self.currency,
        }


def dataset_key(exchange: str, ticker: str) -> str:
    """``{EXCHANGE}_{TICKER}``, the file stem of a persisted dataset."""
    return f"{exchange.upper()}_{ticker.upper()}"


__all__ = [
    "CompanyDataset",
    "FairValuePoint",
    "FinancialRecord",
    "GrowthPoint",
    "MarketFundamentals",
    "SeriesPoint",
    "ValuationSnapshot",
    "dataset_key",
]
