from __future__ import annotations

import datetime as dt
import logging
from dataclasses import dataclass, field

from portfolio_snapshot.transactions import TransactionRecord
from portfolio_snapshot.util import SHARES_PER_LOT

logger = logging.getLogger(__name__)


@dataclass
class HoldingState:
    lots: int = 0
    # Cost basis in price x lot units; multiply by SHARES_PER_LOT for money.
    cost: float = 0.0

    @property
    def avg_price(self) -> float:
        if self.lots <= 0:
            return 0.0
        return self.cost / self.lots


@dataclass(frozen=True)
class HoldingSnapshot:
    date: dt.date | None
    lots: int
    cost: float

    @property
    def avg_price(self) -> float:
        if self.lots <= 0:
            return 0.0
        return self.cost / self.lots

    @property
    def value(self) -> float:
        return self.avg_price * self.lots * SHARES_PER_LOT


@dataclass(frozen=True)
class SellEvent:
    code: str
    date: dt.date | None
    lots: int
    price: int
    avg_buy: float
    realized_pl: float


@dataclass
class AverageCostLedger:
    """
    Weighted-average cost basis per holding code, fed one trade at a time in chronological order.

    Notes:
    - Buys add lots and `lot * price` to cost.
    - Sells realize `(price - avg) * lot * SHARES_PER_LOT` and remove `avg * lot` from cost.
    - A sell with nothing held is ignored; a sell larger than the holding is clamped to it.
    """

    holdings: dict[str, HoldingState] = field(default_factory=dict)
    history: dict[str, list[HoldingSnapshot]] = field(default_factory=dict)
    sells: list[SellEvent] = field(default_factory=list)

    def state(self, code: str) -> HoldingState:
        return self.holdings.setdefault(code, HoldingState())

    @property
    def realized_pl(self) -> float:
        return sum(s.realized_pl for s in self.sells)

    def apply(self, trx: TransactionRecord) -> SellEvent | None:
        if not trx.is_trade:
            return None
        st = self.state(trx.code)
        event: SellEvent | None = None
        if trx.is_buy:
            st.lots += trx.lot
            st.cost += abs(trx.lot * trx.price)
        elif trx.is_sell and trx.lot > 0 and st.lots > 0:
            sell_lots = trx.lot
            if sell_lots > st.lots:
                logger.warning(
                    "%s: sell of %s lot(s) on %s exceeds the %s lot(s) held; clamping to holding.",
                    trx.code,
                    trx.lot,
                    trx.date_text or trx.date,
                    st.lots,
                )
                sell_lots = st.lots
            avg_buy = st.avg_price
            pnl = (trx.price - avg_buy) * sell_lots * SHARES_PER_LOT
            st.lots -= sell_lots
            st.cost = 0.0 if st.lots == 0 else st.cost - avg_buy * sell_lots
            event = SellEvent(code=trx.code, date=trx.date, lots=sell_lots, price=trx.price, avg_buy=avg_buy, realized_pl=pnl)
            self.sells.append(event)

        snap = HoldingSnapshot(date=trx.date, lots=st.lots, cost=st.cost)
        self.history.setdefault(trx.code, []).append(snap)
        logger.debug(
            "%s %s on %s -> lots=%s cost=%s avg=%s",
            "BUY" if trx.is_buy else "SELL",
            trx.code,
            trx.date_text or trx.date,
            snap.lots,
            snap.cost,
            snap.avg_price,
        )
        return event


def replay(transactions: list[TransactionRecord]) -> AverageCostLedger:
    """Run every trade through a fresh ledger in the order given."""
    ledger = AverageCostLedger()
    for trx in transactions:
        ledger.apply(trx)
    return ledger
