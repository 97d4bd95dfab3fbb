from fairvalue_engine.errors import InputShapeError


class DatasetNotFoundError(LookupError):
    """No persisted dataset matches the requested exchange/ticker."""

    def __init__(self, exchange: str, ticker: str):
        self.exchange = exchange
        self.ticker = ticker
        super().__init__(f"No dataset for {exchange}:{ticker}")


class CorruptDatasetError(RuntimeError):
    """A persisted dataset file exists but cannot be read back."""

    def __init__(self, path, reason: str):
        self.path = path
        super().__init__(f"Unreadable dataset {path}: {reason}")


class UpstreamUnavailableError(RuntimeError):
    """A third-party call (market data, LLM) failed or is not configured.

    Always caught at the collaborator boundary and degraded.
    """


__all__ = ["CorruptDatasetError", "DatasetNotFoundError", "InputShapeError", "UpstreamUnavailableError"]
