"""Pytest configuration for backend tests.

Routes are exercised through TestClient without running the lifespan;
the catalog service is injected through a dependency override.
"""

import httpx
import pytest
from fastapi.testclient import TestClient

from dlna_catalog.core.config import CacheConfig, Config, ServerConfig, UpstreamConfig
from dlna_catalog.domain.catalog.store import MemoryStore
from dlna_catalog.service import CatalogService
from web.backend.deps import get_service
from web.backend.main import app

BROWSE_RESPONSE = (
    '<s:Envelope xmlns:s="http://schemas.xmlsoap.org/soap/envelope/"><s:Body>'
    '<u:BrowseResponse xmlns:u="urn:schemas-upnp-org:service:ContentDirectory:1">'
    "<Result>"
    '&lt;DIDL-Lite xmlns="urn:schemas-upnp-org:metadata-1-0/DIDL-Lite/" '
    'xmlns:dc="http://purl.org/dc/elements/1.1/" '
    'xmlns:upnp="urn:schemas-upnp-org:metadata-1-0/upnp/"&gt;'
    '&lt;container id="64" parentID="0" childCount="1"&gt;'
    "&lt;dc:title&gt;Music&lt;/dc:title&gt;"
    "&lt;upnp:class&gt;object.container&lt;/upnp:class&gt;&lt;/container&gt;"
    '&lt;item id="1" parentID="64"&gt;&lt;dc:title&gt;A&lt;/dc:title&gt;'
    "&lt;upnp:artist&gt;Artist&lt;/upnp:artist&gt;"
    '&lt;res bitrate="320000" duration="0:03:00"&gt;/MediaItems/1.mp3&lt;/res&gt;'
    "&lt;/item&gt;&lt;/DIDL-Lite&gt;"
    "</Result></u:BrowseResponse></s:Body></s:Envelope>"
)


class UpstreamStub:
    """Mock DLNA server: answers Browse and 404s every media request."""

    def __init__(self):
        self.status = 200
        self.requests: list[httpx.Request] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.method == "POST":
            return httpx.Response(self.status, text=BROWSE_RESPONSE)
        return httpx.Response(404)


@pytest.fixture
def upstream():
    return UpstreamStub()


@pytest.fixture
def service(tmp_path, upstream):
    config = Config(
        server=ServerConfig(port=3000, host_ip="127.0.0.1"),
        upstream=UpstreamConfig(dlna_url="http://nas:8200"),
        cache=CacheConfig(
            database_path=str(tmp_path / "database.json"),
            album_art_dir=str(tmp_path / "album-art"),
        ),
    )
    client = httpx.AsyncClient(transport=httpx.MockTransport(upstream.handler))
    return CatalogService(config, client=client, store=MemoryStore())


@pytest.fixture
def client(service):
    app.dependency_overrides[get_service] = lambda: service
    yield TestClient(app)
    app.dependency_overrides.clear()
