from __future__ import annotations

import datetime as dt
import json
import logging
from pathlib import Path
from typing import Any

from portfolio_snapshot.activity import build_activity
from portfolio_snapshot.funds import build_funds
from portfolio_snapshot.portfolio import PriceLookup, build_portfolio
from portfolio_snapshot.profit import build_profit
from portfolio_snapshot.transactions import TransactionRecord, load_transactions

logger = logging.getLogger(__name__)

LAST_UPDATE_FORMAT = "%H:%M %d/%m/%Y"


def build_snapshot(
    transactions: list[TransactionRecord],
    price_lookup: PriceLookup,
    *,
    now: dt.datetime | None = None,
) -> dict[str, Any]:
    """Merge portfolio, profit, fund and activity views into the dashboard document."""
    portfolio = build_portfolio(transactions, price_lookup)
    profit = build_profit(transactions, portfolio)
    funds = build_funds(transactions, portfolio)
    activity = build_activity(transactions)

    profit_out = profit.to_dict()
    logger.debug(
        "Snapshot summary: items=%s grand_total=%s dividend=%s%% total_profit=%s%% activity=%s",
        len(portfolio.items),
        portfolio.grand_total,
        profit_out["dividend"],
        profit_out["total_profit"],
        len(activity),
    )
    return {
        "portfolio": [
            {
                "code": it.code,
                "avg_price": it.avg_price,
                "latest_price": it.latest_price,
                "profit": it.profit,
                "ratio": it.ratio,
            }
            for it in portfolio.items
        ],
        "grand_total": portfolio.grand_total,
        "profit": profit_out,
        "funds": funds.to_dict(),
        "activity": [a.to_dict() for a in activity],
        "last_update": (now or dt.datetime.now()).strftime(LAST_UPDATE_FORMAT),
    }


def write_snapshot(snapshot: dict[str, Any], *, out_path: Path, mirror_paths: list[Path] | None = None) -> list[Path]:
    """
    Write the document to `out_path` (parent created) and to each mirror whose
    directory already exists. Returns the paths written.
    """
    payload = json.dumps(snapshot, indent=4)
    written: list[Path] = []
    out_path.parent.mkdir(parents=True, exist_ok=True)
    out_path.write_text(payload, encoding="utf-8")
    logger.info("Portfolio data saved to %s", out_path)
    written.append(out_path)
    for p in mirror_paths or []:
        if p.resolve() == out_path.resolve():
            continue
        if not p.parent.is_dir():
            logger.debug("Skipping mirror %s (no %s directory).", p, p.parent)
            continue
        p.write_text(payload, encoding="utf-8")
        logger.info("Portfolio data also saved to %s", p)
        written.append(p)
    return written


def run_pipeline(
    *,
    transactions_csv: Path,
    out_path: Path,
    price_lookup: PriceLookup,
    mirror_paths: list[Path] | None = None,
    now: dt.datetime | None = None,
) -> tuple[dict[str, Any], list[Path], list[str]]:
    txs, warnings = load_transactions(transactions_csv)
    logger.debug("Loaded %s transaction(s) from %s", len(txs), transactions_csv)
    snapshot = build_snapshot(txs, price_lookup, now=now)
    written = write_snapshot(snapshot, out_path=out_path, mirror_paths=mirror_paths)
    return snapshot, written, warnings
