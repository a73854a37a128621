from __future__ import annotations


class MarketDataError(Exception):
    pass


class DataNotFoundError(MarketDataError):
    """Raised when the provider returns no usable price for a ticker."""


class FetchError(MarketDataError):
    """Raised when a ticker still fails to price after retries."""
