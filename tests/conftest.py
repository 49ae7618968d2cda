"""Shared test fixtures."""

from __future__ import annotations

from pathlib import Path

import pytest

from finledger.adapters.store import LedgerModes, LedgerStore
from finledger.core.config import LedgerConfig
from finledger.models.ledger import StoreMode


@pytest.fixture
def ledger_config(tmp_path: Path) -> LedgerConfig:
    return LedgerConfig(
        data_dir=tmp_path / "data",
        credentials_path=tmp_path / "banking.config.json",
    )


@pytest.fixture
def modes(ledger_config: LedgerConfig) -> LedgerModes:
    return LedgerModes(ledger_config)


@pytest.fixture
def store(modes: LedgerModes) -> LedgerStore:
    return modes.store(StoreMode.REAL)
