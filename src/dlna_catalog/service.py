"""
Application wiring: builds the sync orchestrator and its collaborators
from a Config and owns the shared HTTP client.
"""

from typing import Optional

import httpx

from dlna_catalog.core.config import Config
from dlna_catalog.domain.catalog.browse import RemoteDirectoryFetcher
from dlna_catalog.domain.catalog.store import CacheStore, JsonFileStore
from dlna_catalog.domain.media.artwork import AlbumArtCache, CoverArtExtractor
from dlna_catalog.domain.media.probe import MediaProbe
from dlna_catalog.domain.sync.orchestrator import CatalogSyncOrchestrator, ItemEnricher


class CatalogService:
    """Long-lived service object shared by the CLI and the web backend."""

    def __init__(
        self,
        config: Config,
        client: Optional[httpx.AsyncClient] = None,
        store: Optional[CacheStore] = None,
    ):
        self.config = config
        self._owns_client = client is None
        # Connection pool sized so one batch never queues on the pool
        self.client = client or httpx.AsyncClient(
            limits=httpx.Limits(max_connections=config.enrichment.batch_size * 2)
        )
        self.store = store or JsonFileStore(config.cache.resolved_database_path())

        self.art_cache = AlbumArtCache(
            CoverArtExtractor(self.client, config.enrichment), config
        )
        self.orchestrator = CatalogSyncOrchestrator(
            fetcher=RemoteDirectoryFetcher(self.client, config.upstream),
            store=self.store,
            enricher=ItemEnricher(MediaProbe(self.client, config.enrichment), self.art_cache),
            batch_size=config.enrichment.batch_size,
        )

    async def aclose(self) -> None:
        if self._owns_client:
            await self.client.aclose()
