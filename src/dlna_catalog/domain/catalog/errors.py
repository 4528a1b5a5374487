"""Exceptions raised by the catalog domain.

Probe and album art failures never surface as exceptions; they degrade to
missing fields at the item boundary. Only the failures below propagate.
"""


class CatalogError(Exception):
    """Base class for catalog failures."""


class BrowseError(CatalogError):
    """The directory browse request failed or returned an unreadable payload."""


class StoreError(CatalogError):
    """The catalog cache could not be read or written."""


class AlbumArtNotFound(CatalogError):
    """No cached album art exists for the requested name."""
