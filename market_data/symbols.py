from __future__ import annotations

import re
from dataclasses import dataclass


_CODE_RE = re.compile(r"^[A-Z0-9]{1,12}$")

_INVALID_TICKERS: set[str] = {
    "TOTAL",
    "UNKNOWN",
    "CASH",
}

DEFAULT_EXCHANGE_SUFFIX = ".JK"


@dataclass(frozen=True)
class NormalizedSymbol:
    original: str
    provider_ticker: str | None
    kind: str  # yahoo | invalid
    note: str | None = None


def sanitize_code(code: str) -> str:
    """
    Canonical holding code.

    Examples:
    - " bbca " -> "BBCA"
    - "BBCA.JK" -> "BBCA"
    """
    t = (code or "").strip().upper()
    if "." in t:
        t = t.split(".", 1)[0]
    return re.sub(r"[^A-Z0-9]+", "", t)


def normalize_ticker(code: str, *, exchange_suffix: str = DEFAULT_EXCHANGE_SUFFIX) -> NormalizedSymbol:
    """
    Map a ledger holding code to a Yahoo Finance symbol on the configured exchange.

    - "BBCA" -> "BBCA.JK"
    - "BBCA.JK" -> "BBCA.JK" (suffix already present)
    - "" / "TOTAL" -> invalid
    """
    raw = (code or "").strip()
    if not raw:
        return NormalizedSymbol(original=code, provider_ticker=None, kind="invalid", note="Empty code.")

    t = sanitize_code(raw)
    if t in _INVALID_TICKERS or not _CODE_RE.match(t):
        return NormalizedSymbol(original=code, provider_ticker=None, kind="invalid", note=f"{raw} is not a priceable code.")

    suffix = (exchange_suffix or "").strip().upper()
    if suffix and not suffix.startswith("."):
        suffix = f".{suffix}"
    return NormalizedSymbol(original=code, provider_ticker=f"{t}{suffix}", kind="yahoo")
