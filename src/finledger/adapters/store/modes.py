"""Real/demo store selection."""

from __future__ import annotations

import json
import threading

from finledger.adapters.store.ledger_store import LedgerStore
from finledger.adapters.store.snapshot_file import atomic_write_text, read_json_file
from finledger.core.config import LedgerConfig
from finledger.errors import StoreCorruptionError
from finledger.models.ledger import StoreMode


class LedgerModes:
    """
    Owns one LedgerStore per mode plus the active-mode selection.

    Stores never share a file, so nothing written in one mode is visible in
    the other. The active mode is read and switched under a lock and persisted
    next to the snapshots so separate processes agree on it.
    """

    def __init__(self, config: LedgerConfig) -> None:
        self._config = config
        self._stores = {
            mode: LedgerStore(config.snapshot_path(mode), mode) for mode in StoreMode
        }
        self._lock = threading.Lock()
        self._active = self._read_marker()

    @property
    def config(self) -> LedgerConfig:
        return self._config

    @property
    def active_mode(self) -> StoreMode:
        with self._lock:
            return self._active

    def store(self, mode: StoreMode) -> LedgerStore:
        return self._stores[mode]

    def active_store(self) -> LedgerStore:
        """Return the store of the active mode as one consistent read."""
        with self._lock:
            return self._stores[self._active]

    def switch(self, mode: StoreMode) -> LedgerStore:
        with self._lock:
            if mode is not self._active:
                atomic_write_text(
                    self._config.mode_marker_path, json.dumps({"mode": mode.value})
                )
                self._active = mode
            return self._stores[mode]

    def _read_marker(self) -> StoreMode:
        path = self._config.mode_marker_path
        try:
            data = read_json_file(path)
        except FileNotFoundError:
            return StoreMode.REAL
        try:
            return StoreMode(data["mode"])
        except (KeyError, TypeError, ValueError) as exc:
            raise StoreCorruptionError(path, "unrecognised mode marker") from exc
