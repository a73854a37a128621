from __future__ import annotations

import datetime as dt
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from portfolio_snapshot.transactions import TransactionKind, TransactionRecord


def _record(date_text: str, kind: str, code: str = "", amount: float = 0.0, lot: int = 0, price: int = 0) -> TransactionRecord:
    parts = date_text.split("/")
    d = dt.date(int(parts[2]), int(parts[1]), int(parts[0])) if len(parts) == 3 else None
    return TransactionRecord(
        date=d,
        kind=TransactionKind(kind),
        code=code,
        amount=float(amount),
        lot=lot,
        price=price,
        date_text=date_text,
    )


@pytest.fixture()
def rec():
    """Factory for ledger records: rec("02/01/2024", "transaction", "BBCA", -1_000_000, 10, 1000)."""
    return _record
