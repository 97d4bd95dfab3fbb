"""
Tests for the Twelve Data connector: field extraction, zero defaults, failures.
"""

from unittest.mock import MagicMock, patch

import pytest
import requests

from fairvalue_engine import ValuationSnapshot
from fairvalue_service.connectors import TwelveDataConnector
from fairvalue_service.errors import UpstreamUnavailableError

PAYLOADS = {
    "price": {"price": "190.50"},
    "statistics": {
        "statistics": {
            "valuations_metrics": {
                "enterprise_value": 3_000_000,
                "forward_pe": "28.5",
                "price_to_sales_ttm": 7.5,
            },
            "stock_statistics": {"shares_outstanding": 15_000},
            "financials": {
                "gross_margin": 0.44,
                "profit_margin": 0.25,
                "operating_margin": 0.3,
                "balance_sheet": {"book_value_per_share_mrq": "4.25"},
            },
        }
    },
    "balance_sheet": {
        "balance_sheet": [
            {
                "assets": {"current_assets": {"cash": 30_000}},
                "liabilities": {"non_current_liabilities": {"long_term_debt": 90_000}},
            },
            {"assets": {"current_assets": {"cash": 1}}},
        ]
    },
    "income_statement": {"income_statement": [{"net_income": 97_000, "sales": "383,000"}]},
}


def _response(payload):
    resp = MagicMock()
    resp.json.return_value = payload
    resp.raise_for_status.return_value = None
    return resp


def _fake_get(payloads):
    def fake_get(url, params=None, timeout=None):
        endpoint = url.rsplit("/", 1)[-1]
        return _response(payloads[endpoint])

    return fake_get


@pytest.fixture
def connector():
    return TwelveDataConnector(api_key="test-key", timeout=5)


def test_get_fundamentals(connector):
    with patch("fairvalue_service.connectors.twelvedata.requests.get", side_effect=_fake_get(PAYLOADS)) as mock_get:
        data = connector.get_fundamentals("AAPL")

    assert data.price == 190.5
    assert data.enterprise_value == 3_000_000
    assert data.shares_outstanding == 15_000
    assert data.cash == 30_000
    assert data.long_term_debt == 90_000
    assert data.forward_pe == 28.5
    assert data.net_income == 97_000
    assert data.price_to_sales == 7.5
    assert data.sales == 383_000
    assert data.book_value_per_share == 4.25
    assert data.gross_margin == 0.44

    assert mock_get.call_count == 4
    _, kwargs = mock_get.call_args
    assert kwargs["params"] == {"symbol": "AAPL", "apikey": "test-key"}
    assert kwargs["timeout"] == 5


def test_snapshot_from_payloads(connector):
    with patch("fairvalue_service.connectors.twelvedata.requests.get", side_effect=_fake_get(PAYLOADS)):
        snapshot = connector.get_snapshot("AAPL")

    assert snapshot.fair_ev == pytest.approx((3_000_000 - 90_000 + 30_000) / 15_000)
    assert snapshot.fair_pe == pytest.approx(28.5 * 97_000 / 15_000)
    assert snapshot.fair_ps == pytest.approx(7.5 * 383_000 / 15_000)
    assert snapshot.gross_margin == pytest.approx(44.0)


def test_missing_fields_default_to_zero(connector):
    empty = {"price": {}, "statistics": {}, "balance_sheet": {"balance_sheet": []}, "income_statement": {}}

    with patch("fairvalue_service.connectors.twelvedata.requests.get", side_effect=_fake_get(empty)):
        data = connector.get_fundamentals("AAPL")
        snapshot = connector.get_snapshot("AAPL")

    assert data.price == 0.0
    assert data.shares_outstanding == 0.0
    assert snapshot == ValuationSnapshot()


def test_missing_api_key_degrades_without_network():
    connector = TwelveDataConnector(api_key="")

    with patch("fairvalue_service.connectors.twelvedata.requests.get") as mock_get:
        with pytest.raises(UpstreamUnavailableError):
            connector.get_fundamentals("AAPL")
        snapshot = connector.get_snapshot("AAPL")

    mock_get.assert_not_called()
    assert snapshot == ValuationSnapshot()


def test_network_error_degrades(connector):
    with patch(
        "fairvalue_service.connectors.twelvedata.requests.get",
        side_effect=requests.ConnectionError("unreachable"),
    ):
        with pytest.raises(UpstreamUnavailableError):
            connector.get_fundamentals("AAPL")
        assert connector.get_snapshot("AAPL") == ValuationSnapshot()


def test_api_error_payload_raises(connector):
    payloads = dict(PAYLOADS, price={"status": "error", "code": 401, "message": "Invalid API key"})

    with patch("fairvalue_service.connectors.twelvedata.requests.get", side_effect=_fake_get(payloads)):
        with pytest.raises(UpstreamUnavailableError, match="Invalid API key"):
            connector.get_fundamentals("AAPL")
