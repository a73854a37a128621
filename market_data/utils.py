from __future__ import annotations

import hashlib
import logging
import time
from typing import Callable

from market_data.exceptions import DataNotFoundError, FetchError
from market_data.provider import YahooFinanceProvider
from market_data.symbols import DEFAULT_EXCHANGE_SUFFIX, normalize_ticker

logger = logging.getLogger(__name__)


def _stable_jitter_seconds(key: str, base: float) -> float:
    h = hashlib.md5(key.encode("utf-8")).hexdigest()
    frac = (int(h[:8], 16) % 100) / 1000.0  # 0..0.099
    return base * frac


def _retry_sleep(attempt: int, *, key: str, initial: float = 0.5, mult: float = 2.0, max_sleep: float = 8.0) -> float:
    s = min(max_sleep, initial * (mult ** max(0, attempt)))
    s += _stable_jitter_seconds(key, s)
    return float(s)


def build_price_lookup(
    *,
    provider: YahooFinanceProvider | None = None,
    exchange_suffix: str = DEFAULT_EXCHANGE_SUFFIX,
    timeout_s: float = 10.0,
    max_retries: int = 1,
    backoff_s: float = 0.5,
    sleep: Callable[[float], None] = time.sleep,
) -> Callable[[str], float]:
    """
    Build a `code -> latest price` callable backed by Yahoo Finance.

    Each code is fetched at most once per lookup instance. Transient failures are retried
    `max_retries` times with backoff; an empty answer is retried once at most. When every
    attempt fails the lookup raises FetchError and callers decide how to degrade.
    """
    prov = provider or YahooFinanceProvider(timeout_s=timeout_s)
    memo: dict[str, float] = {}

    def lookup(code: str) -> float:
        if code in memo:
            return memo[code]
        ns = normalize_ticker(code, exchange_suffix=exchange_suffix)
        if ns.kind == "invalid" or not ns.provider_ticker:
            raise FetchError(ns.note or f"{code} is not priceable.")
        ticker = ns.provider_ticker

        last_err: Exception | None = None
        for attempt in range(int(max_retries) + 1):
            try:
                px = prov.latest_price(ticker)
                memo[code] = px
                return px
            except DataNotFoundError as e:
                last_err = e
                if attempt >= 1:
                    break
            except Exception as e:
                last_err = e
            if attempt < int(max_retries):
                sleep_s = _retry_sleep(attempt, key=ticker, initial=backoff_s)
                logger.warning("Retry %s/%s for %s in %.1fs (%s)", attempt + 1, max_retries, ticker, sleep_s, type(last_err).__name__)
                sleep(sleep_s)
        raise FetchError(f"{ticker}: {type(last_err).__name__ if last_err else 'unknown'}: {last_err}")

    return lookup
