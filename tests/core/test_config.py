from __future__ import annotations

from pathlib import Path

import pytest

from finledger.core.config import LedgerConfig, load_ledger_config_from_env
from finledger.models.ledger import StoreMode


def test_load_ledger_config_from_env_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    # input
    for name in (
        "FINLEDGER_DATA_DIR",
        "FINLEDGER_CREDENTIALS_PATH",
        "FINLEDGER_LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)

    # act
    config = load_ledger_config_from_env()

    # assert
    assert config.data_dir == Path("data")
    assert config.credentials_path == Path("banking.config.json")
    assert config.log_level == "INFO"


def test_load_ledger_config_from_env_overrides(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    # input
    monkeypatch.setenv("FINLEDGER_DATA_DIR", str(tmp_path / "ledger"))
    monkeypatch.setenv("FINLEDGER_CREDENTIALS_PATH", str(tmp_path / "creds.json"))
    monkeypatch.setenv("FINLEDGER_LOG_LEVEL", "debug")

    # act
    config = load_ledger_config_from_env()

    # assert
    assert config.data_dir == tmp_path / "ledger"
    assert config.credentials_path == tmp_path / "creds.json"
    assert config.log_level == "DEBUG"


def test_load_ledger_config_from_env_rejects_unknown_level(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.setenv("FINLEDGER_LOG_LEVEL", "LOUD")

    with pytest.raises(ValueError, match="FINLEDGER_LOG_LEVEL"):
        load_ledger_config_from_env()


def test_ledger_config_file_layout(tmp_path: Path) -> None:
    # input
    config = LedgerConfig(data_dir=tmp_path, credentials_path=tmp_path / "c.json")

    # act / assert
    assert config.snapshot_path(StoreMode.REAL) == tmp_path / "db.json"
    assert config.snapshot_path(StoreMode.DEMO) == tmp_path / "db-demo.json"
    assert config.backup_path == tmp_path / "db-backup.json"
    assert config.mode_marker_path == tmp_path / "mode.json"
