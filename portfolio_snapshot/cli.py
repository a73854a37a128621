from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Optional

import typer
from dotenv import load_dotenv

from portfolio_snapshot.config import load_config
from portfolio_snapshot.pipeline import run_pipeline
from portfolio_snapshot.prices import load_price_csv, static_price_lookup

app = typer.Typer(add_completion=False, help="Build the portfolio dashboard snapshot from a transaction ledger.")


def configure_logging(level: str = "INFO", debug_log: Path | None = None) -> None:
    """
    Console logging at `level`; when `debug_log` is given, full DEBUG detail also goes to that
    file, truncated at the start of the run.
    """
    root = logging.getLogger()
    for h in [h for h in root.handlers if getattr(h, "_portfolio_snapshot", False)]:
        root.removeHandler(h)
        h.close()
    fmt = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s", datefmt="%Y-%m-%d %H:%M:%S")

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(getattr(logging, level.upper(), logging.INFO))
    console.setFormatter(fmt)
    console._portfolio_snapshot = True  # type: ignore[attr-defined]
    root.addHandler(console)
    root.setLevel(console.level)

    if debug_log is not None:
        debug_log.parent.mkdir(parents=True, exist_ok=True)
        fh = logging.FileHandler(debug_log, mode="w", encoding="utf-8")
        fh.setLevel(logging.DEBUG)
        fh.setFormatter(fmt)
        fh._portfolio_snapshot = True  # type: ignore[attr-defined]
        root.addHandler(fh)
        root.setLevel(logging.DEBUG)

    # Third-party clients are chatty at DEBUG.
    for noisy in ("yfinance", "urllib3", "peewee"):
        logging.getLogger(noisy).setLevel(logging.WARNING)


@app.command()
def main(
    transactions: Optional[Path] = typer.Option(None, help="Path to the transaction ledger CSV."),
    out: Optional[Path] = typer.Option(None, help="Primary JSON output path."),
    mirror: Optional[list[Path]] = typer.Option(None, help="Extra output path, written only if its folder exists. Repeatable."),
    prices_csv: Optional[Path] = typer.Option(None, help="Offline code,price CSV instead of Yahoo Finance."),
    config: Optional[Path] = typer.Option(None, help="YAML config file (default: ./snapshot.yaml if present)."),
    debug_log: Optional[bool] = typer.Option(None, "--debug-log/--no-debug-log", help="Write engine DEBUG detail to the debug log file."),
    log_level: str = typer.Option("INFO", help="Console log level."),
):
    """
    Generate the dashboard data file: holdings, profit, fund allocation and activity feed.
    """
    load_dotenv()
    try:
        cfg, cfg_path = load_config(config)
    except FileNotFoundError as e:
        raise typer.BadParameter(str(e))

    dbg_enabled = cfg.debug_log.enabled if debug_log is None else debug_log
    configure_logging(log_level, Path(cfg.debug_log.path) if dbg_enabled else None)
    log = logging.getLogger(__name__)
    if cfg_path:
        log.info("Using config %s", cfg_path)

    tx_path = transactions or Path(cfg.transactions_path)
    if not tx_path.exists():
        raise typer.BadParameter(f"Transactions file not found: {tx_path}")
    out_path = out or Path(cfg.output_path)
    mirrors = list(mirror) if mirror else [Path(p) for p in cfg.mirror_paths]

    if prices_csv is not None:
        if not prices_csv.exists():
            raise typer.BadParameter(f"Prices file not found: {prices_csv}")
        prices, price_warn = load_price_csv(prices_csv)
        for w in price_warn:
            log.warning(w)
        lookup = static_price_lookup(prices)
    else:
        from market_data import build_price_lookup

        lookup = build_price_lookup(
            exchange_suffix=cfg.market.exchange_suffix,
            timeout_s=cfg.market.timeout_s,
            max_retries=cfg.market.max_retries,
            backoff_s=cfg.market.backoff_s,
        )

    try:
        _snapshot, written, warnings = run_pipeline(
            transactions_csv=tx_path,
            out_path=out_path,
            mirror_paths=mirrors,
            price_lookup=lookup,
        )
    except OSError as e:
        typer.echo(f"Failed to build snapshot: {type(e).__name__}: {e}", err=True)
        raise typer.Exit(code=1)

    if warnings:
        typer.echo(f"{len(warnings)} ledger warning(s); see log for details.", err=True)
    for p in written:
        typer.echo(f"Portfolio data saved to {p}")
