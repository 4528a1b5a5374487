"""
Catalog cache persistence.

The snapshot is read once at the start of a sync and replaced wholesale at
the end. JsonFileStore writes to a temp file and renames it over the old
document, so a crash mid-write leaves the previous snapshot intact.
"""

import json
import os
import tempfile
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Protocol

from loguru import logger

from .errors import StoreError
from .models import CatalogSnapshot, SnapshotMetadata


class CacheStore(Protocol):
    def load(self) -> CatalogSnapshot: ...

    def save(self, snapshot: CatalogSnapshot) -> None: ...


def stamp(snapshot: CatalogSnapshot, now: Optional[datetime] = None) -> CatalogSnapshot:
    """Pure function - recompute counters and set lastUpdated."""
    moment = now or datetime.now(timezone.utc)
    return snapshot._replace(
        metadata=SnapshotMetadata(
            last_updated=moment.isoformat(),
            total_containers=len(snapshot.containers),
            total_items=len(snapshot.items),
        )
    )


class JsonFileStore:
    """Snapshot stored as a single JSON document on disk."""

    def __init__(self, path: Path):
        self.path = Path(path)

    def load(self) -> CatalogSnapshot:
        """Read the snapshot; a missing or empty file yields an empty one.

        Raises:
            StoreError: If the file exists but cannot be read or decoded
        """
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            raw = ""
        except OSError as e:
            raise StoreError(f"Cannot read catalog cache {self.path}: {e}") from e

        if not raw.strip():
            snapshot = CatalogSnapshot.empty()
            self.save(snapshot)
            logger.info(f"Initialized empty catalog cache at {self.path}")
            return snapshot

        try:
            data = json.loads(raw)
            return CatalogSnapshot.from_dict(data)
        except (json.JSONDecodeError, KeyError, TypeError, AttributeError) as e:
            raise StoreError(f"Corrupt catalog cache {self.path}: {e}") from e

    def save(self, snapshot: CatalogSnapshot) -> None:
        """Atomically replace the cache file with snapshot.

        Raises:
            StoreError: If the document cannot be written
        """
        payload = json.dumps(snapshot.to_dict(), indent=2, ensure_ascii=False)
        temp_path = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, temp_path = tempfile.mkstemp(
                dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp"
            )
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(payload)
            os.replace(temp_path, self.path)
        except OSError as e:
            if temp_path and os.path.exists(temp_path):
                os.remove(temp_path)
            raise StoreError(f"Cannot write catalog cache {self.path}: {e}") from e


class MemoryStore:
    """In-memory store for tests and dry runs."""

    def __init__(self, snapshot: Optional[CatalogSnapshot] = None):
        self.snapshot = snapshot or CatalogSnapshot.empty()
        self.saves = 0

    def load(self) -> CatalogSnapshot:
        return self.snapshot

    def save(self, snapshot: CatalogSnapshot) -> None:
        self.snapshot = snapshot
        self.saves += 1
