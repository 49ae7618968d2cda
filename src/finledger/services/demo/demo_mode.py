from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, date, datetime

import loguru
from loguru import logger

from finledger.adapters.store import LedgerModes
from finledger.core.calendar import to_canonical_date
from finledger.models.ledger import StoreMode
from finledger.services.demo.seed import generate_demo_snapshot


def _today() -> date:
    return to_canonical_date(datetime.now(UTC))


class DemoModeLogger:
    """Handles all logging for DemoMode with business logic separated."""

    def __init__(self, logger_instance: loguru.Logger = logger) -> None:
        self._logger = logger_instance

    def enabled(self, seeded: bool, transaction_count: int) -> None:
        self._logger.bind(seeded=seeded, transactions=transaction_count).info(
            "Demo mode enabled ({} transactions{})",
            transaction_count,
            ", freshly seeded" if seeded else "",
        )

    def disabled(self) -> None:
        self._logger.info("Demo mode disabled, back to real data")


class DemoMode:
    """
    Switches the active store between real and demo data.

    Real data is never touched by demo operations: enabling demo mode backs
    up the real store, seeds the separate demo store on first use and then
    flips the active mode.
    """

    def __init__(
        self,
        modes: LedgerModes,
        *,
        today: Callable[[], date] = _today,
        demo_logger: DemoModeLogger | None = None,
    ) -> None:
        self._modes = modes
        self._today = today
        self._logger = demo_logger or DemoModeLogger()

    def enable(self) -> int:
        """Activate demo mode and return the demo transaction count."""
        real = self._modes.store(StoreMode.REAL)
        real.backup(self._modes.config.backup_path)

        demo = self._modes.store(StoreMode.DEMO)
        seeded = demo.seed_if_empty(lambda: generate_demo_snapshot(self._today()))
        self._modes.switch(StoreMode.DEMO)

        count = demo.transactions.count()
        self._logger.enabled(seeded, count)
        return count

    def disable(self) -> None:
        self._modes.switch(StoreMode.REAL)
        self._logger.disabled()

    def is_demo(self) -> bool:
        return self._modes.active_mode is StoreMode.DEMO
