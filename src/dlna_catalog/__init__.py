"""DLNA catalog mirror: enriched local cache of a media server's browse tree."""

__version__ = "0.1.0"
