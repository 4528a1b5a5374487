"""Catalog domain - mirrored DLNA directory listings.

This domain handles:
- Browsing the media server (SOAP + DIDL-Lite decoding)
- Diffing a fresh listing against the cache
- Persisting snapshots
"""

from .browse import RemoteDirectoryFetcher, build_browse_envelope
from .didl import parse_browse_response, parse_didl
from .diff import CatalogDiff, containers_changed, diff_items, merge_items, merge_snapshot
from .errors import AlbumArtNotFound, BrowseError, CatalogError, StoreError
from .models import (
    CatalogSnapshot,
    Container,
    DirectoryListing,
    Item,
    Picture,
    Quality,
    SnapshotMetadata,
    TechnicalMetadata,
)
from .store import CacheStore, JsonFileStore, MemoryStore, stamp

__all__ = [
    "RemoteDirectoryFetcher",
    "build_browse_envelope",
    "parse_browse_response",
    "parse_didl",
    "CatalogDiff",
    "containers_changed",
    "diff_items",
    "merge_items",
    "merge_snapshot",
    "AlbumArtNotFound",
    "BrowseError",
    "CatalogError",
    "StoreError",
    "CatalogSnapshot",
    "Container",
    "DirectoryListing",
    "Item",
    "Picture",
    "Quality",
    "SnapshotMetadata",
    "TechnicalMetadata",
    "CacheStore",
    "JsonFileStore",
    "MemoryStore",
    "stamp",
]
