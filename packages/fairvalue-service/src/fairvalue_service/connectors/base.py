import logging
from abc import ABC, abstractmethod
from typing import Dict, Type

from fairvalue_engine import MarketFundamentals, ValuationSnapshot, build_valuation_snapshot

from fairvalue_service.errors import UpstreamUnavailableError

logger = logging.getLogger(__name__)


class BaseConnector(ABC):
    """Abstract base class for live market-data connectors."""

    @abstractmethod
    def get_fundamentals(self, ticker: str) -> MarketFundamentals:
        """
        Fetch price, valuation multiples and latest statement figures.
        Every field must be resolved to a float (0.0 when unavailable).
        Raises UpstreamUnavailableError when the provider cannot be reached.
        """
        pass

    def get_snapshot(self, ticker: str, currency: str = "USD") -> ValuationSnapshot:
        """Per-share valuation snapshot. Upstream failures degrade to a zeroed snapshot."""
        try:
            fundamentals = self.get_fundamentals(ticker)
        except UpstreamUnavailableError as e:
            logger.warning(f"Market data unavailable for {ticker}: {e}")
            return ValuationSnapshot(currency=currency)
        return build_valuation_snapshot(fundamentals, currency=currency)


class ConnectorFactory:
    """Simple factory to manage data connectors (Singleton Pattern)."""

    _connector_classes: Dict[str, Type[BaseConnector]] = {}
    _instances: Dict[str, BaseConnector] = {}

    @classmethod
    def register(cls, name: str, connector_cls: Type[BaseConnector]) -> None:
        cls._connector_classes[name] = connector_cls
        cls._instances.pop(name, None)

    @classmethod
    def get_connector(cls, name: str) -> BaseConnector:
        if name in cls._instances:
            return cls._instances[name]

        connector_cls = cls._connector_classes.get(name)
        if not connector_cls:
            raise ValueError(f"Connector '{name}' not found.")

        instance = connector_cls()
        cls._instances[name] = instance
        return instance

    @classmethod
    def reset(cls) -> None:
        """Drop cached instances, e.g. after settings change."""
        cls._instances.clear()
