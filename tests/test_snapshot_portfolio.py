from __future__ import annotations

import logging

import pytest

from market_data.exceptions import FetchError
from portfolio_snapshot.portfolio import build_portfolio
from portfolio_snapshot.prices import static_price_lookup


def _ledger(rec):
    return [
        rec("01/01/2024", "topup", amount=10_000_000),
        rec("02/01/2024", "transaction", "BBCA", -1_000_000, 10, 1000),
        rec("03/01/2024", "transaction", "TLKM", -2_000_000, 5, 4000),
        rec("04/01/2024", "transaction", "BBRI", -100_000, 2, 500),
        rec("05/01/2024", "transaction", "BBRI", 120_000, 2, 600),
    ]


def test_build_portfolio_values_open_holdings(rec):
    calls: list[str] = []
    table = static_price_lookup({"BBCA": 1100, "TLKM": 3600, "BBRI": 650})

    def lookup(code: str) -> float:
        calls.append(code)
        return table(code)

    p = build_portfolio(_ledger(rec), lookup)
    assert [it.code for it in p.items] == ["BBCA", "TLKM"]
    assert calls == ["BBCA", "TLKM"]
    bbca, tlkm = p.items
    assert (bbca.total_lot, bbca.avg_price, bbca.total_value, bbca.latest_price) == (10, 1000, 1_000_000, 1100)
    assert bbca.profit == "10.00"
    assert tlkm.avg_price == 4000
    assert tlkm.total_value == 2_000_000
    assert tlkm.profit == "-10.00"
    assert p.grand_total == pytest.approx(3_000_000)
    assert bbca.ratio == "33.33"
    assert tlkm.ratio == "66.67"
    assert sum(it.ratio_pct for it in p.items) == pytest.approx(100.0)


def test_price_failure_degrades_one_holding_only(rec, caplog: pytest.LogCaptureFixture):
    def lookup(code: str) -> float:
        if code == "TLKM":
            raise FetchError("TLKM.JK: timeout")
        return 1100.0

    with caplog.at_level(logging.WARNING, logger="portfolio_snapshot.portfolio"):
        p = build_portfolio(_ledger(rec), lookup)
    bbca, tlkm = p.items
    assert bbca.latest_price == 1100
    assert tlkm.latest_price == 0
    assert tlkm.profit == "-100.00"
    assert any("Could not fetch price for TLKM" in r.getMessage() for r in caplog.records)


def test_unknown_code_in_static_lookup_degrades_to_zero(rec):
    p = build_portfolio(_ledger(rec), static_price_lookup({"BBCA": 1000}))
    assert [it.latest_price for it in p.items] == [1000, 0]


def test_average_and_value_are_truncated(rec):
    txs = [
        rec("02/01/2024", "transaction", "ADRO", -300_300, 3, 1001),
        rec("03/01/2024", "transaction", "ADRO", -300_000, 3, 1000),
    ]
    (it,) = build_portfolio(txs, lambda code: 1200.9).items
    assert it.avg_price == 1000
    assert it.total_value == 600_300
    assert it.latest_price == 1200


def test_no_open_holdings_gives_empty_portfolio(rec):
    txs = [
        rec("02/01/2024", "transaction", "BBCA", -1_000_000, 10, 1000),
        rec("09/01/2024", "transaction", "BBCA", 1_200_000, 10, 1200),
    ]
    p = build_portfolio(txs, lambda code: 1.0)
    assert p.items == []
    assert p.grand_total == 0


def test_negative_grand_total_zeroes_ratios_and_profit(rec):
    txs = [
        rec("02/01/2024", "transaction", "BBCA", -1_000_000, 10, 1000),
        rec("09/01/2024", "transaction", "BBCA", 1_500_000, 5, 3000),
    ]
    p = build_portfolio(txs, lambda code: 1100.0)
    (it,) = p.items
    assert (it.total_lot, it.avg_price, it.total_value) == (5, -1000, -500_000)
    assert p.grand_total < 0
    assert it.ratio == "0.00"
    assert it.profit == "0.00"


@pytest.mark.parametrize("bad", [float("nan"), float("inf"), -5.0])
def test_non_finite_or_negative_price_degrades_to_zero(rec, bad, caplog: pytest.LogCaptureFixture):
    with caplog.at_level(logging.WARNING, logger="portfolio_snapshot.portfolio"):
        p = build_portfolio(_ledger(rec), lambda code: bad)
    assert [it.latest_price for it in p.items] == [0, 0]
    assert [it.profit for it in p.items] == ["-100.00", "-100.00"]
    assert any("Unusable price" in r.getMessage() for r in caplog.records)


def test_price_just_below_average_shows_zero_not_negative_zero(rec):
    txs = [rec("02/01/2024", "transaction", "BBCA", -1_000_000, 10, 1000)]
    (it,) = build_portfolio(txs, lambda code: 999.99).items
    assert it.profit == "0.00"
