"""
ContentDirectory Browse client.

Issues BrowseDirectChildren against the media server's control URL and
decodes the response into a DirectoryListing.
"""

from urllib.parse import urljoin
from xml.sax.saxutils import escape

import httpx
from loguru import logger

from dlna_catalog.core.config import UpstreamConfig

from .didl import parse_browse_response
from .errors import BrowseError
from .models import DirectoryListing

SERVICE_TYPE = "urn:schemas-upnp-org:service:ContentDirectory:1"


def build_browse_envelope(object_id: str) -> str:
    """Pure function - SOAP envelope for BrowseDirectChildren of object_id."""
    return (
        '<?xml version="1.0" encoding="utf-8"?>'
        '<s:Envelope xmlns:s="http://schemas.xmlsoap.org/soap/envelope/" '
        's:encodingStyle="http://schemas.xmlsoap.org/soap/encoding/">'
        "<s:Body>"
        f'<u:Browse xmlns:u="{SERVICE_TYPE}">'
        f"<ObjectID>{escape(object_id)}</ObjectID>"
        "<BrowseFlag>BrowseDirectChildren</BrowseFlag>"
        "<Filter>*</Filter>"
        "<StartingIndex>0</StartingIndex>"
        "<RequestedCount>0</RequestedCount>"
        "<SortCriteria></SortCriteria>"
        "</u:Browse>"
        "</s:Body>"
        "</s:Envelope>"
    )


def resolve_item_urls(listing: DirectoryListing, base_url: str) -> DirectoryListing:
    """Make relative res URLs absolute against the media server base URL."""
    items = [
        item._replace(url=urljoin(base_url.rstrip("/") + "/", item.url))
        if item.url
        else item
        for item in listing.items
    ]
    return listing._replace(items=items)


class RemoteDirectoryFetcher:
    """Fetches one directory level from the media server."""

    def __init__(self, client: httpx.AsyncClient, config: UpstreamConfig):
        self.client = client
        self.config = config

    async def browse(self, object_id: str) -> DirectoryListing:
        """Browse the direct children of object_id.

        Raises:
            BrowseError: On transport failure, non-success status, or a
                malformed response
        """
        headers = {
            "Content-Type": 'text/xml; charset="utf-8"',
            "SOAPACTION": f'"{SERVICE_TYPE}#Browse"',
        }
        try:
            response = await self.client.post(
                self.config.control_url,
                content=build_browse_envelope(object_id).encode("utf-8"),
                headers=headers,
                timeout=self.config.browse_timeout,
            )
        except httpx.HTTPError as e:
            raise BrowseError(f"Browse request to {self.config.control_url} failed: {e}") from e

        if not response.is_success:
            raise BrowseError(
                f"Browse request to {self.config.control_url} returned {response.status_code}"
            )

        listing = parse_browse_response(response.text)
        listing = resolve_item_urls(listing, self.config.dlna_url)
        logger.debug(
            f"Browsed {object_id}: {len(listing.containers)} containers, "
            f"{len(listing.items)} items"
        )
        return listing
