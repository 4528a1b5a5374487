"""
Manual ID3v2 APIC frame scan.

Used when mutagen cannot parse a file, typically the trailing bytes of a
DSD stream whose ID3 tag sits at the end. The scan walks a single frame
by hand and checks bounds before every read; it never raises.

Frame layout after the "APIC" id:
    size (4 bytes, big-endian) | flags (2) | text encoding (1) |
    MIME type, NUL-terminated | picture type (1) |
    description, NUL-terminated | picture data
The payload runs up to apic_offset + size.
"""

from typing import NamedTuple, Optional

from dlna_catalog.domain.catalog.models import Picture

ID3_MARKER = b"ID3"
APIC_MARKER = b"APIC"
DEFAULT_MIME = "image/jpeg"


class ApicScanResult(NamedTuple):
    found: bool
    picture: Optional[Picture] = None
    payload_offset: Optional[int] = None


NOT_FOUND = ApicScanResult(found=False)


def _decode_text(raw: bytes, encoding: int) -> str:
    if encoding == 3:
        return raw.decode("utf-8", errors="replace")
    return raw.decode("latin-1")


def scan_apic_frame(buffer: bytes, start: int = 0) -> ApicScanResult:
    """Pure function - locate and decode the first APIC frame after an ID3 marker.

    Args:
        buffer: Bytes to scan (treated as immutable)
        start: Offset at which to begin looking for the ID3 marker

    Returns:
        ApicScanResult(found=True, picture=..., payload_offset=...) or NOT_FOUND
    """
    length = len(buffer)
    if start < 0 or start >= length:
        return NOT_FOUND

    id3_index = buffer.find(ID3_MARKER, start)
    if id3_index == -1:
        return NOT_FOUND

    apic_index = buffer.find(APIC_MARKER, id3_index + len(ID3_MARKER))
    if apic_index == -1:
        return NOT_FOUND

    offset = apic_index + len(APIC_MARKER)
    if offset + 6 > length:
        return NOT_FOUND
    frame_size = int.from_bytes(buffer[offset:offset + 4], "big")
    offset += 6  # size + flags

    if offset >= length:
        return NOT_FOUND
    encoding = buffer[offset]
    offset += 1

    mime_end = buffer.find(b"\x00", offset)
    if mime_end == -1:
        return NOT_FOUND
    mime = buffer[offset:mime_end].decode("latin-1").strip()
    offset = mime_end + 1

    if offset >= length:
        return NOT_FOUND
    offset += 1  # picture type

    desc_end = buffer.find(b"\x00", offset)
    if desc_end == -1:
        return NOT_FOUND
    description = _decode_text(buffer[offset:desc_end], encoding)
    offset = desc_end + 1

    frame_end = apic_index + frame_size
    if frame_end > length or frame_end <= offset:
        return NOT_FOUND

    return ApicScanResult(
        found=True,
        picture=Picture(
            format=mime or DEFAULT_MIME,
            data=bytes(buffer[offset:frame_end]),
            description=description or "Scanned Album Art",
        ),
        payload_offset=offset,
    )
