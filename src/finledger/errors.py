"""Error types shared across the ledger."""

from __future__ import annotations

from pathlib import Path


class LedgerError(Exception):
    """Base error for ledger operations."""


class ValidationError(LedgerError):
    """Raw input could not be turned into canonical transactions."""


class AdapterError(LedgerError):
    """A bank adapter failed to fetch data from its institution."""

    def __init__(
        self,
        institution_id: str,
        message: str,
        *,
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(f"[{institution_id}] {message}")
        self.institution_id = institution_id
        self.message = message
        self.cause = cause


class StoreCorruptionError(LedgerError):
    """A backing snapshot file exists but cannot be parsed."""

    def __init__(self, path: Path, message: str) -> None:
        super().__init__(f"Corrupt ledger file {path}: {message}")
        self.path = path


class ConfigMissing(LedgerError):
    """No usable credentials for the requested institution."""

    def __init__(self, institution_id: str, message: str | None = None) -> None:
        super().__init__(
            message or f"No credentials configured for institution {institution_id!r}"
        )
        self.institution_id = institution_id
