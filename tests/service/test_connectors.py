"""
Tests for connectors: factory, singleton, base interface, snapshot degradation.
"""

import pytest

from fairvalue_engine import MarketFundamentals, ValuationSnapshot
from fairvalue_service.connectors import (
    BaseConnector,
    ConnectorFactory,
    TwelveDataConnector,
    YahooFinanceConnector,
)
from fairvalue_service.errors import UpstreamUnavailableError

# ---------------------------------------------------------------------------
# BaseConnector interface
# ---------------------------------------------------------------------------


class MockConnector(BaseConnector):
    def get_fundamentals(self, ticker: str) -> MarketFundamentals:
        return MarketFundamentals(price=10.0, enterprise_value=200.0, shares_outstanding=10.0)


class FailingConnector(BaseConnector):
    def get_fundamentals(self, ticker: str) -> MarketFundamentals:
        raise UpstreamUnavailableError("provider down")


def test_connector_interface():
    """Ensure BaseConnector enforces implementation."""
    with pytest.raises(TypeError):

        class IncompleteConnector(BaseConnector):
            pass

        IncompleteConnector()


def test_get_snapshot_builds_per_share_values():
    snapshot = MockConnector().get_snapshot("AAPL", currency="USD")

    assert snapshot.price == 10.0
    assert snapshot.fair_ev == pytest.approx(20.0)
    assert snapshot.fair_pe == 0.0


def test_get_snapshot_degrades_to_zeroes(caplog):
    snapshot = FailingConnector().get_snapshot("AAPL", currency="EUR")

    assert snapshot == ValuationSnapshot(currency="EUR")
    assert snapshot.to_dict()["weighted"] == 0.0
    assert any("Market data unavailable" in r.message for r in caplog.records)


# ---------------------------------------------------------------------------
# Factory and singleton
# ---------------------------------------------------------------------------


def test_factory_registration():
    ConnectorFactory.register("mock", MockConnector)
    connector = ConnectorFactory.get_connector("mock")
    assert isinstance(connector, MockConnector)


def test_factory_invalid_connector():
    with pytest.raises(ValueError):
        ConnectorFactory.get_connector("non_existent")


def test_connector_singleton_pattern():
    ConnectorFactory.register("singleton_mock", MockConnector)

    conn1 = ConnectorFactory.get_connector("singleton_mock")
    conn2 = ConnectorFactory.get_connector("singleton_mock")
    assert conn1 is conn2

    ConnectorFactory.reset()
    assert ConnectorFactory.get_connector("singleton_mock") is not conn1


def test_builtin_connectors_registered():
    assert isinstance(ConnectorFactory.get_connector("twelvedata"), TwelveDataConnector)
    assert isinstance(ConnectorFactory.get_connector("yahoo"), YahooFinanceConnector)
