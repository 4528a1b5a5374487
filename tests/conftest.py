"""Shared fixtures for catalog and media tests."""

import struct
from xml.sax.saxutils import escape

import httpx
import pytest

from dlna_catalog.core.config import CacheConfig, Config, ServerConfig, UpstreamConfig
from dlna_catalog.domain.catalog.models import Item, Quality


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def config(tmp_path):
    """Config pointing the cache and art directory at tmp_path."""
    return Config(
        server=ServerConfig(port=3000, host_ip="10.0.0.5"),
        upstream=UpstreamConfig(dlna_url="http://dlna.local:8200"),
        cache=CacheConfig(
            database_path=str(tmp_path / "database.json"),
            album_art_dir=str(tmp_path / "album-art"),
        ),
    )


@pytest.fixture
def make_item():
    """Factory for Item records with sensible defaults."""
    def _make(item_id="1", title="A", url="http://x/a.flac", **fields):
        return Item(id=item_id, title=title, url=url, **fields)
    return _make


@pytest.fixture
def enriched_item(make_item):
    """Factory for items carrying a complete enrichment block."""
    def _make(item_id="1", title="A", url="http://x/a.flac", **fields):
        fields.setdefault("album_art_url", "http://10.0.0.5:3000/api/album-art/a.jpg")
        fields.setdefault(
            "quality",
            Quality(
                encoding="Lossless",
                label="CD Quality",
                tier="lossless",
                bit_depth="16-bit",
                sample_rate="44.1kHz",
            ),
        )
        return make_item(item_id, title, url, **fields)
    return _make


def _didl_item(item_id, title, url, parent_id="64", **extra):
    res_attrs = " ".join(f'{k}="{v}"' for k, v in extra.items())
    return (
        f'<item id="{item_id}" parentID="{parent_id}" restricted="1">'
        f"<dc:title>{escape(title)}</dc:title>"
        "<upnp:artist>Artist</upnp:artist>"
        "<upnp:album>Album</upnp:album>"
        "<upnp:genre>Jazz</upnp:genre>"
        "<upnp:class>object.item.audioItem.musicTrack</upnp:class>"
        f"<res {res_attrs}>{escape(url)}</res>"
        "</item>"
    )


@pytest.fixture
def browse_response():
    """Factory for a SOAP Browse response wrapping a DIDL-Lite document.

    Items are (id, title, url) tuples; containers are (id, title) tuples.
    """
    def _build(items=(), containers=()):
        body = "".join(
            f'<container id="{cid}" parentID="0" childCount="3" restricted="1">'
            f"<dc:title>{escape(title)}</dc:title>"
            "<upnp:class>object.container.storageFolder</upnp:class>"
            "</container>"
            for cid, title in containers
        )
        body += "".join(
            _didl_item(item_id, title, url, duration="0:03:12.000", bitrate="176400")
            for item_id, title, url in items
        )
        didl = (
            '<DIDL-Lite xmlns="urn:schemas-upnp-org:metadata-1-0/DIDL-Lite/" '
            'xmlns:dc="http://purl.org/dc/elements/1.1/" '
            'xmlns:upnp="urn:schemas-upnp-org:metadata-1-0/upnp/">'
            f"{body}</DIDL-Lite>"
        )
        return (
            '<?xml version="1.0" encoding="utf-8"?>'
            '<s:Envelope xmlns:s="http://schemas.xmlsoap.org/soap/envelope/">'
            "<s:Body>"
            '<u:BrowseResponse xmlns:u="urn:schemas-upnp-org:service:ContentDirectory:1">'
            f"<Result>{escape(didl)}</Result>"
            f"<NumberReturned>{len(items) + len(containers)}</NumberReturned>"
            "</u:BrowseResponse>"
            "</s:Body>"
            "</s:Envelope>"
        )
    return _build


def _flac_block(block_type, payload, last=False):
    header = (0x80 if last else 0) | block_type
    return bytes([header]) + len(payload).to_bytes(3, "big") + payload


def _streaminfo(sample_rate, channels, bits_per_sample, total_samples=0):
    packed = (
        (sample_rate << 44)
        | ((channels - 1) << 41)
        | ((bits_per_sample - 1) << 36)
        | total_samples
    )
    return (
        struct.pack(">HH", 4096, 4096)
        + (0).to_bytes(3, "big")
        + (0).to_bytes(3, "big")
        + packed.to_bytes(8, "big")
        + bytes(16)
    )


def _vorbis_comment(tags):
    vendor = b"test"
    out = struct.pack("<I", len(vendor)) + vendor + struct.pack("<I", len(tags))
    for key, value in tags.items():
        entry = f"{key}={value}".encode("utf-8")
        out += struct.pack("<I", len(entry)) + entry
    return out


def _picture_block(data, mime="image/png", description="Front"):
    mime_bytes = mime.encode("ascii")
    desc_bytes = description.encode("utf-8")
    return (
        struct.pack(">I", 3)
        + struct.pack(">I", len(mime_bytes)) + mime_bytes
        + struct.pack(">I", len(desc_bytes)) + desc_bytes
        + struct.pack(">IIII", 1, 1, 24, 0)
        + struct.pack(">I", len(data)) + data
    )


@pytest.fixture
def flac_bytes():
    """Factory for a minimal FLAC header: STREAMINFO, tags, optional picture."""
    def _build(sample_rate=44100, bits_per_sample=16, channels=2, tags=None,
               picture=None, audio=b""):
        blocks = [(0, _streaminfo(sample_rate, channels, bits_per_sample))]
        if tags:
            blocks.append((4, _vorbis_comment(tags)))
        if picture is not None:
            blocks.append((6, _picture_block(picture)))
        out = b"fLaC"
        for index, (block_type, payload) in enumerate(blocks):
            out += _flac_block(block_type, payload, last=index == len(blocks) - 1)
        return out + audio
    return _build


@pytest.fixture
def apic_buffer():
    """Factory for a buffer holding an ID3 tag with a single APIC frame.

    The frame size is measured from the APIC marker, so the payload ends
    exactly at apic_offset + size.
    """
    def _build(image, mime=b"image/jpeg", description=b"Cover", leading=b"",
               trailing=b""):
        body = b"\x00" + mime + b"\x00" + b"\x03" + description + b"\x00" + image
        frame_size = 4 + 4 + 2 + len(body)
        frame = b"APIC" + frame_size.to_bytes(4, "big") + b"\x00\x00" + body
        tag = b"ID3\x03\x00\x00" + bytes(4) + frame
        return leading + tag + trailing
    return _build


class MediaServer:
    """Serves byte ranges of in-memory files through httpx.MockTransport."""

    def __init__(self, files=None, honour_range=True):
        self.files = dict(files or {})
        self.honour_range = honour_range
        self.requests: list[httpx.Request] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        data = self.files.get(str(request.url))
        if data is None:
            return httpx.Response(404)

        if request.method == "HEAD":
            return httpx.Response(200, headers={"content-length": str(len(data))})

        range_header = request.headers.get("range")
        if range_header and self.honour_range:
            start_text, end_text = range_header.removeprefix("bytes=").split("-")
            start, end = int(start_text), int(end_text)
            return httpx.Response(
                206,
                content=data[start:end + 1],
                headers={"content-type": "audio/flac"},
            )
        return httpx.Response(200, content=data, headers={"content-type": "audio/flac"})

    def media_requests(self):
        return [r for r in self.requests if r.method in ("HEAD", "GET")]


@pytest.fixture
def media_server():
    return MediaServer()
