from __future__ import annotations

from dataclasses import dataclass
import os
from pathlib import Path

from finledger.models.ledger import StoreMode

_LOG_LEVELS = {"TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"}


@dataclass(frozen=True, slots=True)
class LedgerConfig:
    """Filesystem layout and process settings loaded at startup."""

    data_dir: Path
    credentials_path: Path
    log_level: str = "INFO"

    def snapshot_path(self, mode: StoreMode) -> Path:
        if mode is StoreMode.DEMO:
            return self.data_dir / "db-demo.json"
        return self.data_dir / "db.json"

    @property
    def backup_path(self) -> Path:
        return self.data_dir / "db-backup.json"

    @property
    def mode_marker_path(self) -> Path:
        return self.data_dir / "mode.json"


def load_ledger_config_from_env() -> LedgerConfig:
    """Load ledger config from env and validate it."""
    data_dir = os.environ.get("FINLEDGER_DATA_DIR", "data").strip() or "data"
    credentials_path = (
        os.environ.get("FINLEDGER_CREDENTIALS_PATH", "banking.config.json").strip()
        or "banking.config.json"
    )

    log_level = os.environ.get("FINLEDGER_LOG_LEVEL", "INFO").strip().upper()
    if log_level not in _LOG_LEVELS:
        raise ValueError(
            "FINLEDGER_LOG_LEVEL must be one of: " + ", ".join(sorted(_LOG_LEVELS))
        )

    return LedgerConfig(
        data_dir=Path(data_dir).expanduser(),
        credentials_path=Path(credentials_path).expanduser(),
        log_level=log_level,
    )
