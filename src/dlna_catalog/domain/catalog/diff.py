"""
Catalog diffing: decide which remote items need enrichment.

Items are matched by id. A matched item is reused from cache unless its
fingerprint (title, resolved url) changed; other field changes such as
genre or bitrate never trigger a re-scan.
"""

from typing import NamedTuple

from .models import CatalogSnapshot, Container, Item


class CatalogDiff(NamedTuple):
    to_scan: list[Item]  # Remote records, in remote order
    to_remove: list[Item]  # Cached records, in cache order

    @property
    def is_empty(self) -> bool:
        return not self.to_scan and not self.to_remove


def needs_scan(remote: Item, cached: Item) -> bool:
    """Pure function - True if remote's fingerprint differs from cached."""
    return remote.fingerprint != cached.fingerprint


def diff_items(
    remote: list[Item], cached: list[Item], require_enriched: bool = False
) -> CatalogDiff:
    """Compare a fresh remote listing with the cached items.

    Args:
        remote: Items from the latest browse (urls already resolved)
        cached: Items from the previous snapshot
        require_enriched: Also scan cached items that were stored without
            enrichment (e.g. by a metadata=false browse)

    Returns:
        CatalogDiff with new/changed remote items and vanished cached items
    """
    cached_by_id = {item.id: item for item in cached}
    remote_ids = {item.id for item in remote}

    def scan(item: Item) -> bool:
        prior = cached_by_id.get(item.id)
        if prior is None or needs_scan(item, prior):
            return True
        return require_enriched and prior.quality is None

    to_scan = [item for item in remote if scan(item)]
    to_remove = [item for item in cached if item.id not in remote_ids]
    return CatalogDiff(to_scan=to_scan, to_remove=to_remove)


def merge_items(
    remote: list[Item], cached: list[Item], to_remove: list[Item], enriched: list[Item]
) -> list[Item]:
    """Overlay enriched items on the surviving cached items.

    The result follows remote order. Remote items that are neither cached
    nor enriched are kept as listed.
    """
    removed_ids = {item.id for item in to_remove}
    merged = {item.id: item for item in cached if item.id not in removed_ids}
    for item in enriched:
        merged[item.id] = item  # Later write wins

    return [merged.get(item.id, item) for item in remote]


def merge_snapshot(
    snapshot: CatalogSnapshot,
    remote_containers: list[Container],
    remote_items: list[Item],
    diff: CatalogDiff,
    enriched: list[Item],
) -> CatalogSnapshot:
    """Build the next snapshot; containers are retained if the remote had none."""
    containers = remote_containers if remote_containers else snapshot.containers
    items = merge_items(remote_items, snapshot.items, diff.to_remove, enriched)
    return snapshot._replace(containers=list(containers), items=items)


def containers_changed(remote: list[Container], cached: list[Container]) -> bool:
    """True if a non-empty remote container listing differs from the cache.

    An empty remote listing never counts as a change, since merging keeps
    the cached containers in that case.
    """
    return bool(remote) and list(remote) != list(cached)
