from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from portfolio_snapshot.config import SnapshotConfig, load_config


@pytest.fixture(autouse=True)
def _clean_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("HOME", str(tmp_path))
    for k in ("SNAPSHOT_TRANSACTIONS", "SNAPSHOT_OUTPUT", "SNAPSHOT_DEBUG_LOG"):
        monkeypatch.delenv(k, raising=False)


def test_defaults_when_no_config_file():
    cfg, path = load_config()
    assert path is None
    assert cfg.transactions_path == "resources/transaction.csv"
    assert cfg.output_path == "public/data.json"
    assert cfg.mirror_paths == ["dist/data.json"]
    assert cfg.market.exchange_suffix == ".JK"
    assert cfg.debug_log.enabled is False


def test_yaml_in_working_directory_is_picked_up(tmp_path: Path):
    (tmp_path / "snapshot.yaml").write_text(
        "output_path: out/snap.json\n"
        "mirror_paths: []\n"
        "market:\n"
        "  exchange_suffix: .SI\n"
        "  max_retries: 3\n",
        encoding="utf-8",
    )
    cfg, path = load_config()
    assert path == "snapshot.yaml"
    assert cfg.output_path == "out/snap.json"
    assert cfg.mirror_paths == []
    assert cfg.market.exchange_suffix == ".SI"
    assert cfg.market.max_retries == 3
    assert cfg.market.timeout_s == 10.0


def test_environment_overrides_file(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    p = tmp_path / "custom.yaml"
    p.write_text("transactions_path: a.csv\n", encoding="utf-8")
    monkeypatch.setenv("SNAPSHOT_TRANSACTIONS", "b.csv")
    monkeypatch.setenv("SNAPSHOT_DEBUG_LOG", "yes")
    cfg, path = load_config(p)
    assert path == str(p)
    assert cfg.transactions_path == "b.csv"
    assert cfg.debug_log.enabled is True


def test_explicit_missing_config_raises(tmp_path: Path):
    with pytest.raises(FileNotFoundError):
        load_config(tmp_path / "missing.yaml")


def test_invalid_values_are_rejected():
    with pytest.raises(ValidationError):
        SnapshotConfig.model_validate({"market": {"max_retries": -1}})
