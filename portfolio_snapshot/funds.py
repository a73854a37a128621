from __future__ import annotations

from dataclasses import dataclass

from portfolio_snapshot.portfolio import Portfolio
from portfolio_snapshot.profit import sum_amounts
from portfolio_snapshot.transactions import TransactionKind, TransactionRecord
from portfolio_snapshot.util import format_pct, safe_div


@dataclass(frozen=True)
class FundMetrics:
    topup: float
    invested: float

    @property
    def invested_pct(self) -> float | None:
        r = safe_div(self.invested, self.topup)
        return r * 100 if r is not None else None

    @property
    def cash_pct(self) -> float | None:
        r = safe_div(self.topup - self.invested, self.topup)
        return r * 100 if r is not None else None

    def to_dict(self) -> dict[str, str]:
        return {
            "totalInvested": format_pct(self.invested_pct),
            "totalCash": format_pct(self.cash_pct),
        }


def build_funds(transactions: list[TransactionRecord], portfolio: Portfolio) -> FundMetrics:
    """Split of contributed capital between current holdings (at cost) and cash."""
    return FundMetrics(topup=sum_amounts(transactions, TransactionKind.TOPUP), invested=float(portfolio.grand_total))
