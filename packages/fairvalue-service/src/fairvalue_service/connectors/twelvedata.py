import logging
from typing import Any, Dict, Optional

import requests

from fairvalue_engine import MarketFundamentals, as_number

from fairvalue_service.config import get_settings
from fairvalue_service.errors import UpstreamUnavailableError

from .base import BaseConnector, ConnectorFactory

logger = logging.getLogger(__name__)

BASE_URL = "https://api.twelvedata.com"


def _dig(payload: Any, *path: str) -> Any:
    """Walk nested dicts, returning None at the first missing step."""
    for key in path:
        if not isinstance(payload, dict):
            return None
        payload = payload.get(key)
    return payload


def _first(payload: Any, key: str) -> Dict[str, Any]:
    # Statement endpoints return a list of periods, newest first.
    periods = payload.get(key) if isinstance(payload, dict) else None
    if isinstance(periods, list) and periods and isinstance(periods[0], dict):
        return periods[0]
    return {}


class TwelveDataConnector(BaseConnector):
    """Connector for live quotes and statistics from Twelve Data."""

    def __init__(self, api_key: Optional[str] = None, timeout: Optional[float] = None):
        settings = get_settings()
        self.api_key = settings.TWELVE_DATA_API_KEY if api_key is None else api_key
        self.timeout = settings.MARKET_DATA_TIMEOUT_SECONDS if timeout is None else timeout

    def _get(self, endpoint: str, ticker: str) -> Dict[str, Any]:
        try:
            resp = requests.get(
                f"{BASE_URL}/{endpoint}",
                params={"symbol": ticker, "apikey": self.api_key},
                timeout=self.timeout,
            )
            resp.raise_for_status()
            data = resp.json()
        except (requests.RequestException, ValueError) as e:
            raise UpstreamUnavailableError(f"Twelve Data /{endpoint} failed: {e}") from e

        if isinstance(data, dict) and data.get("status") == "error":
            raise UpstreamUnavailableError(f"Twelve Data /{endpoint} error: {data.get('message')}")
        return data if isinstance(data, dict) else {}

    def get_fundamentals(self, ticker: str) -> MarketFundamentals:
        if not self.api_key:
            raise UpstreamUnavailableError("TWELVE_DATA_API_KEY is not configured")

        price_json = self._get("price", ticker)
        stats = self._get("statistics", ticker).get("statistics") or {}
        bs0 = _first(self._get("balance_sheet", ticker), "balance_sheet")
        is0 = _first(self._get("income_statement", ticker), "income_statement")

        return MarketFundamentals(
            price=as_number(price_json.get("price")),
            enterprise_value=as_number(_dig(stats, "valuations_metrics", "enterprise_value")),
            shares_outstanding=as_number(_dig(stats, "stock_statistics", "shares_outstanding")),
            cash=as_number(_dig(bs0, "assets", "current_assets", "cash")),
            long_term_debt=as_number(_dig(bs0, "liabilities", "non_current_liabilities", "long_term_debt")),
            forward_pe=as_number(_dig(stats, "valuations_metrics", "forward_pe")),
            net_income=as_number(is0.get("net_income")),
            price_to_sales=as_number(_dig(stats, "valuations_metrics", "price_to_sales_ttm")),
            sales=as_number(is0.get("sales")),
            book_value_per_share=as_number(_dig(stats, "financials", "balance_sheet", "book_value_per_share_mrq")),
            gross_margin=as_number(_dig(stats, "financials", "gross_margin")),
            profit_margin=as_number(_dig(stats, "financials", "profit_margin")),
            operating_margin=as_number(_dig(stats, "financials", "operating_margin")),
        )


# Register the connector
ConnectorFactory.register("twelvedata", TwelveDataConnector)
