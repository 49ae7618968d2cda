"""Bank sync."""

from finledger.services.sync.sync_service import (
    SyncError,
    SyncLogger,
    SyncMetadata,
    SyncService,
)

__all__ = ["SyncError", "SyncLogger", "SyncMetadata", "SyncService"]
