from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest
from typer.testing import CliRunner

from portfolio_snapshot.cli import app

runner = CliRunner()


@pytest.fixture(autouse=True)
def _isolated(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("HOME", str(tmp_path))
    for k in ("SNAPSHOT_TRANSACTIONS", "SNAPSHOT_OUTPUT", "SNAPSHOT_DEBUG_LOG"):
        monkeypatch.delenv(k, raising=False)
    yield
    root = logging.getLogger()
    for h in [h for h in root.handlers if getattr(h, "_portfolio_snapshot", False)]:
        root.removeHandler(h)
        h.close()


def _inputs(tmp_path: Path) -> tuple[Path, Path]:
    tx = tmp_path / "transaction.csv"
    tx.write_text(
        "date,type,code,amount,lot,price\n"
        '01/01/2024,topup,,"5.000.000",,\n'
        '02/01/2024,transaction,BBCA,"(1.000.000)",10,1000\n',
        encoding="utf-8",
    )
    prices = tmp_path / "prices.csv"
    prices.write_text("code,price\nBBCA,1250\n", encoding="utf-8")
    return tx, prices


def test_cli_writes_snapshot_with_offline_prices(tmp_path: Path):
    tx, prices = _inputs(tmp_path)
    out = tmp_path / "public" / "data.json"
    result = runner.invoke(app, ["--transactions", str(tx), "--out", str(out), "--prices-csv", str(prices)])
    assert result.exit_code == 0, result.output
    assert f"Portfolio data saved to {out}" in result.stdout
    data = json.loads(out.read_text(encoding="utf-8"))
    assert data["portfolio"][0]["latest_price"] == 1250
    assert data["portfolio"][0]["profit"] == "25.00"
    assert data["funds"] == {"totalInvested": "20.00", "totalCash": "80.00"}
    assert not (tmp_path / "debug.log").exists()


def test_cli_debug_log_captures_engine_detail(tmp_path: Path):
    tx, prices = _inputs(tmp_path)
    out = tmp_path / "data.json"
    result = runner.invoke(app, ["--transactions", str(tx), "--out", str(out), "--prices-csv", str(prices), "--debug-log"])
    assert result.exit_code == 0, result.output
    text = (tmp_path / "debug.log").read_text(encoding="utf-8")
    assert "BUY BBCA" in text
    assert "Snapshot summary" in text


def test_cli_rejects_missing_transactions(tmp_path: Path):
    result = runner.invoke(app, ["--transactions", str(tmp_path / "nope.csv"), "--out", str(tmp_path / "o.json")])
    assert result.exit_code != 0
    assert not (tmp_path / "o.json").exists()
