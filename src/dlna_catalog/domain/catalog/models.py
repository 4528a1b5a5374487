"""
Catalog domain models.

Contains the records mirrored from the DLNA server and the persisted
snapshot. Records are immutable; use ``_replace`` to derive updated copies.
JSON keys follow the camelCase names used on disk and over HTTP.
"""

from typing import Any, NamedTuple, Optional


def to_int(value: Any) -> Optional[int]:
    """Coerce a loosely typed XML/JSON value to int, or None."""
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        return None


class Container(NamedTuple):
    """A browsable folder node on the media server."""
    id: str
    parent_id: Optional[str] = None
    title: str = "Unknown"
    upnp_class: Optional[str] = None
    child_count: Optional[int] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "parentID": self.parent_id,
            "title": self.title,
            "class": self.upnp_class,
            "childCount": self.child_count,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Container":
        return cls(
            id=str(data["id"]),
            parent_id=None if data.get("parentID") is None else str(data["parentID"]),
            title=data.get("title") or "Unknown",
            upnp_class=data.get("class"),
            child_count=to_int(data.get("childCount")),
        )


class Quality(NamedTuple):
    """Human-facing audio quality block derived from technical metadata."""
    encoding: str
    label: str
    tier: str
    bit_depth: str
    sample_rate: str
    bitrate: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "encoding": self.encoding,
            "label": self.label,
            "tier": self.tier,
            "bitDepth": self.bit_depth,
            "sampleRate": self.sample_rate,
            "bitrate": self.bitrate,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Quality":
        return cls(
            encoding=data.get("encoding") or "Unknown",
            label=data.get("label") or "Unknown",
            tier=data.get("tier") or "unknown",
            bit_depth=data.get("bitDepth") or "16-bit",
            sample_rate=data.get("sampleRate") or "44.1kHz",
            bitrate=data.get("bitrate"),
        )


class Item(NamedTuple):
    """A playable track.

    Identity is ``id``; ``fingerprint`` (title, url) changes when the
    underlying file moved or changed and forces re-enrichment.
    """
    id: str
    title: str = "Unknown"
    artist: str = "Unknown"
    album: str = "Unknown"
    duration: Optional[str] = None
    url: Optional[str] = None
    genre: Optional[str] = None
    bitrate: Optional[int] = None  # As reported by the server's res element
    nr_audio_channels: Optional[int] = None

    # Enrichment (absent until the item has been scanned)
    album_art_url: Optional[str] = None
    quality: Optional[Quality] = None
    date: Optional[str] = None
    composer: Optional[str] = None
    lyrics: Optional[str] = None

    @property
    def fingerprint(self) -> tuple[str, Optional[str]]:
        return (self.title, self.url)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": self.id,
            "title": self.title,
            "artist": self.artist,
            "album": self.album,
            "duration": self.duration,
            "url": self.url,
            "genre": self.genre,
            "bitrate": self.bitrate,
            "nrAudioChannels": self.nr_audio_channels,
        }
        # Optional enrichment fields are omitted rather than written as null
        if self.album_art_url is not None:
            data["albumArtUrl"] = self.album_art_url
        if self.quality is not None:
            data["quality"] = self.quality.to_dict()
        if self.date is not None:
            data["date"] = self.date
        if self.composer is not None:
            data["composer"] = self.composer
        if self.lyrics is not None:
            data["lyrics"] = self.lyrics
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Item":
        quality = data.get("quality")
        return cls(
            id=str(data["id"]),
            title=data.get("title") or "Unknown",
            artist=data.get("artist") or "Unknown",
            album=data.get("album") or "Unknown",
            duration=data.get("duration"),
            url=data.get("url"),
            genre=data.get("genre"),
            bitrate=to_int(data.get("bitrate")),
            nr_audio_channels=to_int(data.get("nrAudioChannels")),
            album_art_url=data.get("albumArtUrl"),
            quality=Quality.from_dict(quality) if isinstance(quality, dict) else None,
            date=data.get("date"),
            composer=data.get("composer"),
            lyrics=data.get("lyrics"),
        )


class TechnicalMetadata(NamedTuple):
    """Format characteristics and tags read from a media prefix. Not persisted."""
    bit_depth: Optional[int] = None
    sample_rate: Optional[int] = None
    bit_depth_label: Optional[str] = None
    sample_rate_label: Optional[str] = None
    date: Optional[str] = None
    composer: Optional[str] = None
    lyrics: Optional[str] = None


class Picture(NamedTuple):
    """An embedded picture extracted from a media file. Not persisted as-is."""
    format: str  # MIME type
    data: bytes
    description: str = "Album Art"


class DirectoryListing(NamedTuple):
    """Decoded result of one Browse request."""
    containers: list[Container]
    items: list[Item]


class SnapshotMetadata(NamedTuple):
    last_updated: Optional[str] = None
    total_containers: int = 0
    total_items: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "lastUpdated": self.last_updated,
            "totalContainers": self.total_containers,
            "totalItems": self.total_items,
        }


class CatalogSnapshot(NamedTuple):
    """The persisted cache: the unit of atomic replacement."""
    containers: list[Container]
    items: list[Item]
    metadata: SnapshotMetadata = SnapshotMetadata()

    @classmethod
    def empty(cls) -> "CatalogSnapshot":
        return cls(containers=[], items=[], metadata=SnapshotMetadata())

    def to_dict(self) -> dict[str, Any]:
        return {
            "containers": [c.to_dict() for c in self.containers],
            "items": [i.to_dict() for i in self.items],
            "metadata": self.metadata.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CatalogSnapshot":
        containers = [Container.from_dict(c) for c in data.get("containers") or []]
        items = [Item.from_dict(i) for i in data.get("items") or []]
        meta = data.get("metadata") or {}
        return cls(
            containers=containers,
            items=items,
            metadata=SnapshotMetadata(
                last_updated=meta.get("lastUpdated", data.get("lastUpdated")),
                total_containers=len(containers),
                total_items=len(items),
            ),
        )
