from __future__ import annotations

import datetime as dt
import logging
from dataclasses import dataclass

from portfolio_snapshot.ledger import HoldingSnapshot, replay
from portfolio_snapshot.transactions import TransactionKind, TransactionRecord
from portfolio_snapshot.util import format_pct

logger = logging.getLogger(__name__)

# Display strings consumed by the dashboard front end.
TOPUP_TEMPLATE = "melakukan <strong>topup</strong> modal"
BUY_TEMPLATE = "melakukan <strong>pembelian</strong> saham <strong>{code}</strong>"
SELL_TEMPLATE = "melakukan <strong>penjualan</strong> saham <strong>{code}</strong>"
DIVIDEND_TEMPLATE = "mendapatkan <strong>dividen</strong> dari <strong>{code}</strong> sebesar {yield_}"

UNRESOLVED_YIELD = "0%"


@dataclass(frozen=True)
class ActivityEntry:
    time: str
    description: str

    def to_dict(self) -> dict[str, str]:
        return {"time": self.time, "description": self.description}


def snapshot_for_dividend(history: list[HoldingSnapshot], paid_on: dt.date | None) -> HoldingSnapshot | None:
    """
    Holding in effect when a dividend was paid: the last snapshot on or before `paid_on`
    with lots held. Falls back to the snapshot with the largest lot count ever held.
    """
    if paid_on is None:
        return None
    relevant: HoldingSnapshot | None = None
    for snap in history:
        if snap.date is None:
            continue
        if snap.date > paid_on:
            break
        if snap.lots > 0:
            relevant = snap

    if relevant is None:
        held = [s for s in history if s.lots > 0]
        if held:
            relevant = max(held, key=lambda s: s.lots)
    return relevant


def dividend_yield(trx: TransactionRecord, history: dict[str, list[HoldingSnapshot]]) -> str:
    snaps = history.get(trx.code) if trx.code else None
    if not snaps:
        logger.debug("Dividend from %r on %s: no holding history.", trx.code, trx.date_text)
        return UNRESOLVED_YIELD
    snap = snapshot_for_dividend(snaps, trx.date)
    if snap is None or snap.lots <= 0:
        logger.debug("Dividend from %s on %s: no holding found before the payment.", trx.code, trx.date_text)
        return UNRESOLVED_YIELD
    stock_value = snap.value
    if stock_value <= 0:
        return UNRESOLVED_YIELD
    y = (trx.amount / stock_value) * 100
    logger.debug(
        "Dividend yield %s on %s: %s / %s (lots=%s avg=%s, state of %s) = %.4f%%",
        trx.code,
        trx.date_text,
        trx.amount,
        stock_value,
        snap.lots,
        snap.avg_price,
        snap.date,
        y,
    )
    return f"{format_pct(y)}%"


def describe(trx: TransactionRecord, history: dict[str, list[HoldingSnapshot]]) -> str:
    if trx.kind is TransactionKind.TOPUP:
        return TOPUP_TEMPLATE
    if trx.kind is TransactionKind.DIVIDEND:
        return DIVIDEND_TEMPLATE.format(code=trx.code, yield_=dividend_yield(trx, history))
    if trx.amount < 0:
        return BUY_TEMPLATE.format(code=trx.code)
    return SELL_TEMPLATE.format(code=trx.code)


def build_activity(transactions: list[TransactionRecord]) -> list[ActivityEntry]:
    """
    Narrative feed, most recent first. Holding history is replayed in ledger order first
    so each dividend can be measured against the position that earned it.
    """
    history = replay(transactions).history
    return [ActivityEntry(time=t.date_text, description=describe(t, history)) for t in reversed(transactions)]
