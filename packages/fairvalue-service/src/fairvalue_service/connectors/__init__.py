from fairvalue_service.connectors.base import BaseConnector, ConnectorFactory
from fairvalue_service.connectors.twelvedata import TwelveDataConnector
from fairvalue_service.connectors.yahoo import YahooFinanceConnector

__all__ = ["BaseConnector", "ConnectorFactory", "TwelveDataConnector", "YahooFinanceConnector"]
