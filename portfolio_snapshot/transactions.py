from __future__ import annotations

import csv
import datetime as dt
import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from portfolio_snapshot.util import parse_amount, parse_date, parse_int

logger = logging.getLogger(__name__)


class TransactionKind(str, Enum):
    TRANSACTION = "transaction"
    DIVIDEND = "dividen"
    TOPUP = "topup"


@dataclass(frozen=True)
class TransactionRecord:
    date: dt.date | None
    kind: TransactionKind
    code: str
    amount: float
    lot: int = 0
    price: int = 0

    # Date exactly as it appeared in the ledger; the activity feed echoes it back.
    date_text: str = ""

    @property
    def is_trade(self) -> bool:
        return self.kind is TransactionKind.TRANSACTION and bool(self.code)

    @property
    def is_buy(self) -> bool:
        return self.is_trade and self.amount < 0

    @property
    def is_sell(self) -> bool:
        return self.is_trade and self.amount > 0


def _classify_kind(raw: str | None) -> TransactionKind | None:
    t = (raw or "").strip().lower()
    if t in {"transaction", "trade", "transaksi"}:
        return TransactionKind.TRANSACTION
    if t in {"dividen", "dividend", "div"}:
        return TransactionKind.DIVIDEND
    if t in {"topup", "top-up", "top_up", "deposit"}:
        return TransactionKind.TOPUP
    return None


def parse_row(row: list[str]) -> TransactionRecord:
    """
    Normalize one positional ledger row: date, type, code, amount, lot, price.

    Raises ValueError when the row cannot be interpreted.
    """
    if len(row) < 4:
        raise ValueError(f"expected at least 4 fields, got {len(row)}")
    cells = [c.strip() for c in row] + [""] * max(0, 6 - len(row))
    date_text, kind_raw, code, amount_raw, lot_raw, price_raw = cells[:6]

    d = parse_date(date_text)
    if d is None:
        raise ValueError(f"unparseable date {date_text!r}")
    kind = _classify_kind(kind_raw)
    if kind is None:
        raise ValueError(f"unknown transaction type {kind_raw!r}")
    amount = parse_amount(amount_raw)
    if amount is None:
        raise ValueError(f"unparseable amount {amount_raw!r}")

    is_trade = kind is TransactionKind.TRANSACTION
    return TransactionRecord(
        date=d,
        kind=kind,
        code=code.upper() if kind is not TransactionKind.TOPUP else "",
        amount=amount,
        lot=parse_int(lot_raw) if is_trade else 0,
        price=parse_int(price_raw) if is_trade else 0,
        date_text=date_text,
    )


def load_transactions(path: Path) -> tuple[list[TransactionRecord], list[str]]:
    """
    Parse the broker ledger CSV (header row skipped) into TransactionRecords.

    A missing or unreadable file raises; malformed rows are skipped and reported as warnings.
    Records come back stably sorted by date so same-day rows keep their ledger order.
    """
    warnings: list[str] = []
    text = Path(path).read_text(encoding="utf-8-sig")
    reader = csv.reader(text.splitlines(), delimiter=",")

    out: list[TransactionRecord] = []
    for line_no, row in enumerate(reader, start=1):
        if line_no == 1:
            continue
        if not row or not any(c.strip() for c in row):
            continue
        try:
            out.append(parse_row(row))
        except ValueError as e:
            warnings.append(f"Line {line_no}: skipped ({e}).")

    out.sort(key=lambda t: t.date or dt.date.min)
    if not out:
        warnings.append(f"No transactions parsed from {Path(path).name} (check columns).")
    for w in warnings:
        logger.warning(w)
    return out, warnings


def transactions_by_code(txs: list[TransactionRecord]) -> dict[str, list[TransactionRecord]]:
    out: dict[str, list[TransactionRecord]] = {}
    for t in txs:
        if not t.is_trade:
            continue
        out.setdefault(t.code, []).append(t)
    return out
