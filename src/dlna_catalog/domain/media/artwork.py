"""
Album art extraction and caching.

Two strategies are tried in order:

1. Prefix: HEAD for the size, fetch up to the first ~9.5 MB and let
   mutagen find an embedded picture.
2. Trailing scan: fetch the last ~150 KB and walk an ID3 APIC frame by
   hand (DSD files keep their ID3 tag at the end).

Extracted pictures are written once to the art directory under a name
derived from (title, date, artist). An existing file with that name is
reused without touching the network.
"""

import asyncio
import re
from pathlib import Path
from typing import Optional
from urllib.parse import quote

import httpx
from loguru import logger

from dlna_catalog.core.config import Config, EnrichmentConfig
from dlna_catalog.domain.catalog.errors import AlbumArtNotFound
from dlna_catalog.domain.catalog.models import Item, Picture

from .http import MediaFetchError, fetch_range, head_content_length
from .id3_scan import scan_apic_frame
from .tags import first_picture, parse_buffer

ACCEPTED_EXTENSIONS = (".jpg", ".jpeg", ".png", ".gif", ".webp", ".bmp")
MIME_EXTENSIONS: dict[str, str] = {
    "image/jpeg": ".jpg",
    "image/jpg": ".jpg",
    "image/png": ".png",
    "image/gif": ".gif",
    "image/webp": ".webp",
    "image/bmp": ".bmp",
}
MAX_FILENAME_LENGTH = 100
# Filesystems cap names at 255 bytes; leave room for the extension
MAX_FILENAME_BYTES = 200

_UNSAFE_CHARS = re.compile(r'[\\/*?:"<>|\x00-\x1f]')
_WHITESPACE = re.compile(r"\s+")


def art_filename(title: Optional[str], date: Optional[str], artist: Optional[str]) -> str:
    """Pure function - deterministic, filesystem-safe stem for an item's art."""
    parts = [artist or "Unknown", title or "Unknown"]
    stem = " - ".join(parts)
    if date:
        stem = f"{stem} ({date})"
    stem = _UNSAFE_CHARS.sub("", stem)
    stem = _WHITESPACE.sub(" ", stem).strip(" .")
    stem = stem[:MAX_FILENAME_LENGTH]
    stem = stem.encode("utf-8")[:MAX_FILENAME_BYTES].decode("utf-8", "ignore")
    return stem.rstrip(" .") or "unknown"


def extension_for(mime: Optional[str]) -> str:
    """File extension for a picture MIME type (defaults to .jpg)."""
    return MIME_EXTENSIONS.get((mime or "").lower().split(";")[0].strip(), ".jpg")


def find_cached_art(art_dir: Path, stem: str) -> Optional[Path]:
    """Existing art file for stem with any accepted extension."""
    for ext in ACCEPTED_EXTENSIONS:
        candidate = art_dir / f"{stem}{ext}"
        if candidate.is_file():
            return candidate
    return None


class CoverArtExtractor:
    """Finds an embedded picture in a remote media file."""

    def __init__(self, client: httpx.AsyncClient, config: EnrichmentConfig):
        self.client = client
        self.config = config

    async def from_prefix(self, url: str) -> Optional[Picture]:
        try:
            size = await head_content_length(self.client, url, self.config.head_timeout)
            end = min(size - 1, self.config.art_prefix_cap)
            data, content_type = await fetch_range(self.client, url, 0, end, self.config.art_timeout)
        except MediaFetchError as e:
            logger.warning(f"Failed to get album art for {url}: {e}")
            return None

        audio_file = parse_buffer(data, url, content_type)
        if audio_file is None:
            return None
        return first_picture(audio_file)

    async def from_trailing_scan(self, url: str) -> Optional[Picture]:
        try:
            size = await head_content_length(self.client, url, self.config.head_timeout)
            start = max(0, size - self.config.trailing_chunk_size)
            data, _ = await fetch_range(
                self.client, url, start, size - 1, self.config.art_timeout
            )
        except MediaFetchError as e:
            logger.warning(f"Failed to scan album art for {url}: {e}")
            return None

        result = scan_apic_frame(data)
        return result.picture if result.found else None

    async def extract(self, url: Optional[str]) -> Optional[Picture]:
        """Embedded picture for url, or None if neither strategy finds one."""
        if not url:
            return None
        picture = await self.from_prefix(url)
        if picture is not None:
            return picture
        logger.debug(f"No embedded picture in prefix of {url}, trying trailing scan")
        return await self.from_trailing_scan(url)


class AlbumArtCache:
    """Resolves an item's albumArtUrl, extracting and saving art on a miss."""

    def __init__(self, extractor: CoverArtExtractor, config: Config):
        self.extractor = extractor
        self.art_dir = config.cache.resolved_album_art_dir()
        self.placeholder_url = config.cache.placeholder_art_url
        self.base_url = f"http://{config.server.host_ip}:{config.server.port}/api/album-art"

    def art_url(self, filename: str) -> str:
        return f"{self.base_url}/{quote(filename)}"

    def _write(self, stem: str, picture: Picture) -> Path:
        self.art_dir.mkdir(parents=True, exist_ok=True)
        path = self.art_dir / f"{stem}{extension_for(picture.format)}"
        path.write_bytes(picture.data)
        return path

    async def resolve(self, item: Item, date: Optional[str] = None) -> str:
        """Public URL for item's art, or the placeholder if none can be found."""
        stem = art_filename(item.title, date, item.artist)

        cached = await asyncio.to_thread(find_cached_art, self.art_dir, stem)
        if cached is not None:
            return self.art_url(cached.name)

        picture = await self.extractor.extract(item.url)
        if picture is None:
            return self.placeholder_url

        try:
            path = await asyncio.to_thread(self._write, stem, picture)
        except OSError as e:
            logger.warning(f"Could not save album art for {item.id}: {e}")
            return self.placeholder_url
        logger.debug(f"Saved album art {path.name} ({len(picture.data)} bytes)")
        return self.art_url(path.name)

    def open(self, filename: str) -> Path:
        """Path of a cached art file.

        Raises:
            AlbumArtNotFound: If the name is unknown or escapes the art directory
        """
        candidate = (self.art_dir / filename).resolve()
        try:
            candidate.relative_to(self.art_dir.resolve())
        except ValueError:
            raise AlbumArtNotFound(filename) from None
        if candidate.suffix.lower() not in ACCEPTED_EXTENSIONS or not candidate.is_file():
            raise AlbumArtNotFound(filename)
        return candidate
