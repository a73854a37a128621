from __future__ import annotations

import os
from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, Field


class MarketConfig(BaseModel):
    exchange_suffix: str = Field(default=".JK", description="Yahoo Finance exchange suffix appended to holding codes")
    timeout_s: float = 10.0
    max_retries: int = Field(default=1, ge=0)
    backoff_s: float = 0.5


class DebugLogConfig(BaseModel):
    # Off by default; when on, DEBUG detail from the engine goes to this file.
    enabled: bool = False
    path: str = "debug.log"


class SnapshotConfig(BaseModel):
    transactions_path: str = "resources/transaction.csv"
    output_path: str = "public/data.json"
    # Written only when the parent directory already exists.
    mirror_paths: list[str] = Field(default_factory=lambda: ["dist/data.json"])
    market: MarketConfig = Field(default_factory=MarketConfig)
    debug_log: DebugLogConfig = Field(default_factory=DebugLogConfig)


def _candidate_paths() -> list[Path]:
    paths = [Path("snapshot.yaml")]
    home = Path(os.path.expanduser("~"))
    paths.append(home / ".portfolio_snapshot" / "snapshot.yaml")
    return paths


def _apply_env(cfg: SnapshotConfig) -> SnapshotConfig:
    tx = (os.environ.get("SNAPSHOT_TRANSACTIONS") or "").strip()
    if tx:
        cfg.transactions_path = tx
    out = (os.environ.get("SNAPSHOT_OUTPUT") or "").strip()
    if out:
        cfg.output_path = out
    dbg = (os.environ.get("SNAPSHOT_DEBUG_LOG") or "").strip().lower()
    if dbg:
        cfg.debug_log.enabled = dbg in {"1", "true", "yes", "y", "on"}
    return cfg


def load_config(path: Path | None = None) -> tuple[SnapshotConfig, Optional[str]]:
    """
    Load snapshot config from YAML (if present), then apply environment overrides.

    Search paths when `path` is not given (first match wins):
      - ./snapshot.yaml
      - ~/.portfolio_snapshot/snapshot.yaml
    """
    candidates = [Path(path)] if path is not None else _candidate_paths()
    for p in candidates:
        if p.exists():
            data = yaml.safe_load(p.read_text()) or {}
            return _apply_env(SnapshotConfig.model_validate(data)), str(p)
    if path is not None:
        raise FileNotFoundError(f"Config file not found: {path}")
    return _apply_env(SnapshotConfig()), None
