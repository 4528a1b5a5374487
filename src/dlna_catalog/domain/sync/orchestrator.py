"""
Catalog synchronization.

One sync pass moves through FETCHING -> DIFFING -> ENRICHING -> MERGING ->
PERSISTED. Nothing is written until the end, so a failure at any point
leaves the previous snapshot on disk untouched.
"""

import asyncio
from enum import Enum
from typing import NamedTuple, Optional

from loguru import logger

from dlna_catalog.domain.catalog.browse import RemoteDirectoryFetcher
from dlna_catalog.domain.catalog.diff import containers_changed, diff_items, merge_snapshot
from dlna_catalog.domain.catalog.models import CatalogSnapshot, Item
from dlna_catalog.domain.catalog.store import CacheStore, stamp
from dlna_catalog.domain.media.artwork import AlbumArtCache
from dlna_catalog.domain.media.probe import MediaProbe
from dlna_catalog.domain.media.quality import build_quality

DEFAULT_BATCH_SIZE = 10


class SyncState(str, Enum):
    IDLE = "idle"
    FETCHING = "fetching"
    DIFFING = "diffing"
    ENRICHING = "enriching"
    MERGING = "merging"
    PERSISTED = "persisted"


class SyncResult(NamedTuple):
    snapshot: CatalogSnapshot
    changed: bool
    scanned: int = 0
    removed: int = 0


class ItemEnricher:
    """Adds quality, tags and album art to a single item."""

    def __init__(self, probe: MediaProbe, art: AlbumArtCache):
        self.probe = probe
        self.art = art

    async def enrich(self, item: Item) -> Item:
        metadata = await self.probe.probe(item.url)
        # Art file names include the release date, so art waits for the probe
        art_url = await self.art.resolve(item, metadata.date if metadata else None)

        enriched = item._replace(
            album_art_url=art_url,
            quality=build_quality(metadata, item.bitrate),
        )
        if metadata:
            enriched = enriched._replace(
                date=metadata.date, composer=metadata.composer, lyrics=metadata.lyrics
            )
        return enriched

    def fallback(self, item: Item) -> Item:
        """Complete record for an item whose enrichment crashed."""
        return item._replace(
            album_art_url=self.art.placeholder_url,
            quality=build_quality(None, item.bitrate),
        )


class CatalogSyncOrchestrator:
    """Fetch, diff, enrich only what changed, merge and persist."""

    def __init__(
        self,
        fetcher: RemoteDirectoryFetcher,
        store: CacheStore,
        enricher: ItemEnricher,
        batch_size: int = DEFAULT_BATCH_SIZE,
    ):
        if batch_size < 1:
            raise ValueError(f"batch_size must be at least 1, got {batch_size}")
        self.fetcher = fetcher
        self.store = store
        self.enricher = enricher
        self.batch_size = batch_size
        self.state = SyncState.IDLE

    def _enter(self, state: SyncState) -> None:
        self.state = state
        logger.debug(f"Sync state: {state.value}")

    async def _enrich_one(self, item: Item, prior: Optional[Item]) -> Item:
        try:
            return await self.enricher.enrich(item)
        except Exception as e:
            logger.warning(f"Enrichment failed for item {item.id} ({item.url}): {e}")
            return prior if prior is not None else self.enricher.fallback(item)

    async def enrich_in_batches(
        self, items: list[Item], prior: dict[str, Item]
    ) -> list[Item]:
        """Enrich items batch by batch; output order matches input order."""
        results: list[Item] = []
        for start in range(0, len(items), self.batch_size):
            batch = items[start:start + self.batch_size]
            results.extend(
                await asyncio.gather(
                    *(self._enrich_one(item, prior.get(item.id)) for item in batch)
                )
            )
            logger.debug(f"Enriched {min(start + self.batch_size, len(items))}/{len(items)} items")
        return results

    async def sync(self, object_id: str, include_metadata: bool = True) -> SyncResult:
        """Run one sync pass for the children of object_id.

        Raises:
            BrowseError: If the directory listing cannot be fetched
            StoreError: If the cache cannot be read or written
        """
        self._enter(SyncState.FETCHING)
        cached = await asyncio.to_thread(self.store.load)
        listing = await self.fetcher.browse(object_id)

        self._enter(SyncState.DIFFING)
        diff = diff_items(listing.items, cached.items, require_enriched=include_metadata)
        if diff.is_empty and not containers_changed(listing.containers, cached.containers):
            self._enter(SyncState.IDLE)
            logger.info(f"Catalog {object_id} unchanged ({len(cached.items)} items)")
            return SyncResult(snapshot=cached, changed=False)

        self._enter(SyncState.ENRICHING)
        if include_metadata:
            prior = {item.id: item for item in cached.items}
            enriched = await self.enrich_in_batches(diff.to_scan, prior)
        else:
            enriched = list(diff.to_scan)

        self._enter(SyncState.MERGING)
        merged = stamp(
            merge_snapshot(cached, listing.containers, listing.items, diff, enriched)
        )

        await asyncio.to_thread(self.store.save, merged)
        self._enter(SyncState.PERSISTED)
        logger.info(
            f"Catalog {object_id} synced: {len(diff.to_scan)} scanned, "
            f"{len(diff.to_remove)} removed, {len(merged.items)} total"
        )
        return SyncResult(
            snapshot=merged,
            changed=True,
            scanned=len(diff.to_scan),
            removed=len(diff.to_remove),
        )
