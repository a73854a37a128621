from __future__ import annotations

import logging
import math
from typing import Any

from market_data.exceptions import DataNotFoundError

logger = logging.getLogger(__name__)

# (period, interval) pairs tried in order: today's intraday bars, then recent daily closes.
_HISTORY_WINDOWS = (("1d", "1m"), ("5d", "1d"))


def _usable(px: Any) -> float | None:
    try:
        v = float(px)
    except (TypeError, ValueError):
        return None
    if math.isnan(v) or v <= 0:
        return None
    return v


class YahooFinanceProvider:
    name = "yfinance"

    def __init__(self, *, timeout_s: float = 10.0):
        self.timeout_s = float(timeout_s)

    def latest_price(self, ticker: str) -> float:
        """
        Most recent traded price for a Yahoo symbol (e.g. "BBCA.JK").

        Takes the last close of today's intraday bars, then of a short daily history (covers
        weekends and holidays). Every request carries `timeout_s`.
        """
        try:
            import pandas as pd  # type: ignore
        except Exception as e:  # pragma: no cover
            raise RuntimeError("pandas is required for market data fetching.") from e
        try:
            import yfinance as yf  # type: ignore
        except Exception as e:  # pragma: no cover
            raise RuntimeError("yfinance is required for market data fetching.") from e

        tk = yf.Ticker(ticker)
        last_exc: Exception | None = None
        for period, interval in _HISTORY_WINDOWS:
            try:
                df = tk.history(period=period, interval=interval, auto_adjust=False, timeout=self.timeout_s)
            except Exception as e:
                last_exc = e
                logger.debug("history(%s, %s) failed for %s: %s", period, interval, ticker, e)
                continue
            if df is None or getattr(df, "empty", True) or "Close" not in df.columns:
                continue
            closes = pd.to_numeric(df["Close"], errors="coerce").dropna()
            closes = closes[closes > 0]
            if not closes.empty:
                px = _usable(closes.iloc[-1])
                if px is not None:
                    return px

        msg = f"No price returned for {ticker}."
        if last_exc is not None:
            msg = f"{msg} Last error: {type(last_exc).__name__}: {last_exc}"
        raise DataNotFoundError(msg)
