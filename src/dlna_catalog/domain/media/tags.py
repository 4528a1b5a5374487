"""
Mutagen helpers shared by the probe and the album art extractor.

Both work on partial files held in memory, so every parse here is
best-effort: callers treat None as "nothing usable".
"""

import base64
import io
import posixpath
from typing import Any, Optional
from urllib.parse import unquote, urlsplit

from mutagen import File as MutagenFile
from mutagen import MutagenError
from mutagen.flac import Picture as FlacPicture
from mutagen.mp4 import MP4Cover

from dlna_catalog.domain.catalog.models import Picture

FLAC_MARKER = b"fLaC"

# Extensions mutagen scores on, keyed by the Content-Type a server reports
AUDIO_MIME_EXTENSIONS: dict[str, str] = {
    "audio/flac": ".flac",
    "audio/x-flac": ".flac",
    "audio/mpeg": ".mp3",
    "audio/mp4": ".m4a",
    "audio/x-m4a": ".m4a",
    "audio/aac": ".m4a",
    "audio/ogg": ".ogg",
    "audio/opus": ".opus",
    "audio/wav": ".wav",
    "audio/x-wav": ".wav",
    "audio/aiff": ".aiff",
    "audio/x-aiff": ".aiff",
    "audio/dsf": ".dsf",
    "audio/x-dsf": ".dsf",
    "audio/x-dff": ".dff",
    "audio/x-ms-wma": ".wma",
}


class NamedBuffer(io.BytesIO):
    """In-memory file carrying a name so mutagen can score by extension."""

    def __init__(self, data: bytes, name: str = ""):
        super().__init__(data)
        self.name = name


def name_hint(url: Optional[str], content_type: Optional[str] = None) -> str:
    """File name used as a format hint.

    The basename of the URL path; when it has no extension (DLNA servers
    often serve /MediaItems/<id>), one is taken from the Content-Type.
    """
    name = posixpath.basename(unquote(urlsplit(url).path)) if url else ""
    if posixpath.splitext(name)[1]:
        return name
    mime = (content_type or "").lower().split(";")[0].strip()
    return name + AUDIO_MIME_EXTENSIONS.get(mime, "")


def complete_flac_blocks(data: bytes) -> bytes:
    """Pure function - drop a truncated trailing FLAC metadata block.

    mutagen reads FLAC metadata strictly, so a prefix that cuts a block
    (usually the picture) in half fails to parse. Keeps every complete
    block and flags the last one as final.
    """
    if not data.startswith(FLAC_MARKER):
        return data

    offset = len(FLAC_MARKER)
    last_complete = None
    while offset + 4 <= len(data):
        header = data[offset]
        size = int.from_bytes(data[offset + 1:offset + 4], "big")
        end = offset + 4 + size
        if end > len(data):
            break
        if header & 0x80:
            return data[:end]
        last_complete = offset
        offset = end

    if last_complete is None:
        return data
    trimmed = bytearray(data[:offset])
    trimmed[last_complete] |= 0x80
    return bytes(trimmed)


def parse_buffer(
    data: bytes, url: Optional[str] = None, content_type: Optional[str] = None
) -> Optional[Any]:
    """Parse a (possibly truncated) media prefix with mutagen.

    Returns:
        The mutagen FileType, or None if the buffer is not recognised or
        cannot be parsed
    """
    if not data:
        return None
    name = name_hint(url, content_type)
    try:
        return MutagenFile(NamedBuffer(complete_flac_blocks(data), name))
    except (MutagenError, EOFError, ValueError, IndexError, KeyError, OverflowError):
        # Truncated blocks surface as assorted low-level errors
        return None


def get_tag_value(audio_file: Any, tag_names: list[str]) -> Optional[str]:
    """Get tag value, trying multiple possible tag names."""
    tags = getattr(audio_file, "tags", None)
    if tags is None:
        return None
    for tag_name in tag_names:
        try:
            value = tags.get(tag_name)
        except (KeyError, ValueError):
            # Some formats (like Vorbis) raise ValueError for non-existent keys
            continue
        if value:
            if isinstance(value, list):
                return str(value[0])
            return str(value)
    return None


def get_lyrics(audio_file: Any) -> Optional[str]:
    """Unsynchronised lyrics from ID3 USLT, Vorbis or MP4 tags."""
    tags = getattr(audio_file, "tags", None)
    if tags is None:
        return None
    if hasattr(tags, "getall"):
        for frame in tags.getall("USLT"):
            if frame.text:
                return str(frame.text)
        return None
    return get_tag_value(audio_file, ["lyrics", "unsyncedlyrics", "LYRICS", "\xa9lyr"])


def _mp4_mime(cover: MP4Cover) -> str:
    if cover.imageformat == MP4Cover.FORMAT_PNG:
        return "image/png"
    return "image/jpeg"


def first_picture(audio_file: Any) -> Optional[Picture]:
    """First embedded picture from FLAC, ID3, MP4 or Vorbis comment tags."""
    for pic in getattr(audio_file, "pictures", None) or []:
        if pic.data:
            return Picture(format=pic.mime or "image/jpeg", data=pic.data,
                           description=pic.desc or "Album Art")

    tags = getattr(audio_file, "tags", None)
    if tags is None:
        return None

    if hasattr(tags, "getall"):
        for frame in tags.getall("APIC"):
            if frame.data:
                return Picture(format=frame.mime or "image/jpeg", data=frame.data,
                               description=frame.desc or "Album Art")
        return None

    try:
        covers = tags.get("covr")
    except (KeyError, ValueError):
        covers = None
    if covers:
        cover = covers[0]
        return Picture(format=_mp4_mime(cover), data=bytes(cover))

    try:
        blocks = tags.get("metadata_block_picture") or []
    except (KeyError, ValueError):
        blocks = []
    for encoded in blocks:
        try:
            pic = FlacPicture(base64.b64decode(encoded))
        except (ValueError, MutagenError):
            continue
        if pic.data:
            return Picture(format=pic.mime or "image/jpeg", data=pic.data,
                           description=pic.desc or "Album Art")
    return None
