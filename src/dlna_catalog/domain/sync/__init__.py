"""Sync domain - one catalog sync pass.

Composes the catalog (browse, diff, store) and media (probe, album art)
domains: fetch, diff, enrich the changed items in bounded batches, merge,
persist.
"""

from .orchestrator import (
    DEFAULT_BATCH_SIZE,
    CatalogSyncOrchestrator,
    ItemEnricher,
    SyncResult,
    SyncState,
)

__all__ = [
    "DEFAULT_BATCH_SIZE",
    "CatalogSyncOrchestrator",
    "ItemEnricher",
    "SyncResult",
    "SyncState",
]
