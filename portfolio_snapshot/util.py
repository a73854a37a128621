from __future__ import annotations

import datetime as dt
import re
from typing import Any


_NUMBER_RE = re.compile(r"[-+]?\d[\d.]*,?\d*")

SHARES_PER_LOT = 100


def parse_date(value: Any) -> dt.date | None:
    """
    Parse a ledger date. Day-first formats win because the broker exports `dd/mm/yyyy`.
    """
    if value is None:
        return None
    if isinstance(value, dt.datetime):
        return value.date()
    if isinstance(value, dt.date):
        return value
    s = str(value).strip()
    if not s:
        return None
    for fmt in ("%d/%m/%Y", "%d-%m-%Y", "%d/%m/%y"):
        try:
            return dt.datetime.strptime(s.split()[0], fmt).date()
        except ValueError:
            continue
    try:
        return dt.date.fromisoformat(s[:10])
    except ValueError:
        return None


def parse_amount(value: Any) -> float | None:
    """
    Parse a locale-formatted amount: `.` groups thousands, `,` marks decimals,
    and a parenthesized value is negative.

    Examples:
    - "1.500.000" -> 1500000.0
    - "(2.250,50)" -> -2250.5
    - "-75.000" -> -75000.0
    """
    if value is None:
        return None
    if isinstance(value, (int, float)):
        return float(value)
    s = str(value).strip()
    if not s:
        return None
    neg = "(" in s
    s = s.replace("(", "").replace(")", "").replace(" ", "")
    m = _NUMBER_RE.search(s)
    if not m:
        return None
    num = m.group(0).replace(".", "").replace(",", ".")
    try:
        x = float(num)
    except ValueError:
        return None
    return -abs(x) if neg else x


def parse_int(value: Any) -> int:
    if value is None:
        return 0
    s = str(value).strip()
    if not s:
        return 0
    m = re.match(r"[-+]?\d+", s.replace(".", ""))
    return int(m.group(0)) if m else 0


def safe_div(n: float, d: float) -> float | None:
    if d <= 0:
        return None
    return n / d


def format_pct(value: float | None) -> str:
    """Two decimals with `,` thousands grouping; missing values render as 0.00."""
    if value is None:
        return "0.00"
    # round first so tiny negatives print as 0.00, not -0.00
    v = round(float(value), 2) or 0.0
    return f"{v:,.2f}"
