from __future__ import annotations

import csv
from pathlib import Path
from typing import Callable

from portfolio_snapshot.util import parse_amount


def _norm_key(s: str) -> str:
    return "".join(ch.lower() if ch.isalnum() else "_" for ch in (s or "")).strip("_")


def load_price_csv(path: Path) -> tuple[dict[str, float], list[str]]:
    """
    Read a `code,price` file (header names are matched loosely) into a price map.
    Later rows for the same code win.
    """
    warnings: list[str] = []
    text = Path(path).read_text(encoding="utf-8-sig", errors="replace")
    reader = csv.DictReader(text.splitlines())
    out: dict[str, float] = {}
    for row in reader:
        if not row:
            continue
        norm = {_norm_key(k): k for k in row.keys() if k}
        ck = norm.get("code") or norm.get("symbol") or norm.get("ticker")
        pk = norm.get("price") or norm.get("last_price") or norm.get("close")
        if not ck or not pk:
            continue
        code = str(row.get(ck) or "").strip().upper()
        px = parse_amount(row.get(pk))
        if not code or px is None or px < 0:
            continue
        out[code] = float(px)
    if not out:
        warnings.append(f"No usable prices parsed from {Path(path).name}.")
    return out, warnings


def static_price_lookup(prices: dict[str, float]) -> Callable[[str], float]:
    """Lookup over a fixed price map; unknown codes raise KeyError."""
    table = {k.upper(): float(v) for k, v in prices.items()}

    def lookup(code: str) -> float:
        return table[code.upper()]

    return lookup
