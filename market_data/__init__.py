from __future__ import annotations

__all__ = [
    "YahooFinanceProvider",
    "MarketDataError",
    "DataNotFoundError",
    "FetchError",
    "normalize_ticker",
    "sanitize_code",
    "build_price_lookup",
]

from market_data.exceptions import DataNotFoundError, FetchError, MarketDataError
from market_data.provider import YahooFinanceProvider
from market_data.symbols import normalize_ticker, sanitize_code
from market_data.utils import build_price_lookup
