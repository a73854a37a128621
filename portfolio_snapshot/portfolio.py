from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field, replace
from typing import Callable

from portfolio_snapshot.transactions import TransactionRecord, transactions_by_code
from portfolio_snapshot.util import SHARES_PER_LOT, format_pct, safe_div

logger = logging.getLogger(__name__)

PriceLookup = Callable[[str], float]


@dataclass(frozen=True)
class PortfolioItem:
    code: str
    total_lot: int
    avg_price: int
    total_value: int
    latest_price: int
    profit_pct: float
    ratio_pct: float = 0.0

    @property
    def profit(self) -> str:
        return format_pct(self.profit_pct)

    @property
    def ratio(self) -> str:
        return format_pct(self.ratio_pct)

    @property
    def unrealized_pl(self) -> float:
        return float((self.latest_price - self.avg_price) * self.total_lot * SHARES_PER_LOT)


@dataclass(frozen=True)
class Portfolio:
    items: list[PortfolioItem] = field(default_factory=list)
    grand_total: float = 0.0


def fetch_price(price_lookup: PriceLookup, code: str) -> float:
    """One lookup per holding; any failure degrades to 0 so the other holdings still price."""
    try:
        px = price_lookup(code)
    except Exception as e:
        logger.warning("Could not fetch price for %s: %s", code, e)
        return 0.0
    if px is None:
        logger.warning("No price returned for %s; using 0.", code)
        return 0.0
    px = float(px)
    if not math.isfinite(px) or px < 0:
        logger.warning("Unusable price %r for %s; using 0.", px, code)
        return 0.0
    return px


def build_portfolio(transactions: list[TransactionRecord], price_lookup: PriceLookup) -> Portfolio:
    """
    Current holdings valued at their weighted average buy price, with the latest market price
    used only for the per-holding profit percentage.
    """
    folded: dict[str, tuple[int, float]] = {}
    for code, trades in transactions_by_code(transactions).items():
        total_lot = 0
        weighted = 0.0
        for t in trades:
            if t.is_sell:
                total_lot -= t.lot
                weighted -= t.lot * t.price
            elif t.is_buy:
                total_lot += t.lot
                weighted += t.lot * t.price
        folded[code] = (total_lot, weighted)

    grand_total = 0.0
    rows: list[PortfolioItem] = []
    for code, (total_lot, weighted) in folded.items():
        if total_lot <= 0:
            continue
        avg_price = weighted / total_lot
        total_value = total_lot * avg_price * SHARES_PER_LOT
        latest = fetch_price(price_lookup, code)
        profit = ((latest - avg_price) / avg_price) * 100 if avg_price > 0 else 0.0
        grand_total += total_value
        rows.append(
            PortfolioItem(
                code=code,
                total_lot=total_lot,
                avg_price=int(avg_price),
                total_value=int(total_value),
                latest_price=int(latest),
                profit_pct=profit,
            )
        )

    items = []
    for it in rows:
        ratio = safe_div(it.total_value, grand_total)
        items.append(replace(it, ratio_pct=ratio * 100 if ratio is not None else 0.0))
    return Portfolio(items=items, grand_total=grand_total)
