from __future__ import annotations

from dataclasses import dataclass

from portfolio_snapshot.ledger import replay
from portfolio_snapshot.portfolio import Portfolio
from portfolio_snapshot.transactions import TransactionKind, TransactionRecord
from portfolio_snapshot.util import format_pct, safe_div


@dataclass(frozen=True)
class ProfitMetrics:
    dividend: float
    topup: float
    realized_pl: float
    unrealized_pl: float
    total_value: float

    @property
    def total_profit(self) -> float:
        return self.unrealized_pl + self.realized_pl + self.dividend

    def to_dict(self) -> dict[str, str]:
        unrealized = safe_div(self.unrealized_pl, self.total_value)
        dividend = safe_div(self.dividend, self.topup)
        realized = safe_div(self.realized_pl, self.topup)
        total = safe_div(self.total_profit, self.topup)
        return {
            "dividend": format_pct(dividend * 100 if dividend is not None else None),
            "unrealized_pl": format_pct(unrealized * 100 if unrealized is not None else None),
            "realized_pl": format_pct(realized * 100 if realized is not None else None),
            "total_profit": format_pct(total * 100 if total is not None else None),
        }


def sum_amounts(transactions: list[TransactionRecord], kind: TransactionKind) -> float:
    return float(sum(t.amount for t in transactions if t.kind is kind))


def build_profit(transactions: list[TransactionRecord], portfolio: Portfolio) -> ProfitMetrics:
    """
    Dividend, realized and unrealized P/L. Percentages are relative to total top-ups,
    except unrealized P/L which is relative to the value of current holdings.
    """
    ledger = replay(transactions)
    return ProfitMetrics(
        dividend=sum_amounts(transactions, TransactionKind.DIVIDEND),
        topup=sum_amounts(transactions, TransactionKind.TOPUP),
        realized_pl=ledger.realized_pl,
        unrealized_pl=sum(it.unrealized_pl for it in portfolio.items),
        total_value=float(sum(it.total_value for it in portfolio.items)),
    )
