"""
Technical metadata probe.

Reads a few kilobytes from the start of a media URL and derives sample
rate, bit depth and a handful of tags. Never fetches the whole file and
never raises: a failed probe is simply "no metadata".
"""

from typing import Any, Optional

import httpx
from loguru import logger

from dlna_catalog.core.config import EnrichmentConfig
from dlna_catalog.domain.catalog.models import TechnicalMetadata

from .http import MediaFetchError, fetch_range
from .tags import get_lyrics, get_tag_value, parse_buffer

DEFAULT_BIT_DEPTH_LABEL = "16-bit"
DEFAULT_SAMPLE_RATE_LABEL = "44.1kHz"


def bit_depth_label(bit_depth: Optional[int]) -> Optional[str]:
    return f"{bit_depth}-bit" if bit_depth else None


def sample_rate_label(sample_rate: Optional[int]) -> Optional[str]:
    return f"{sample_rate / 1000:.1f}kHz" if sample_rate else None


def metadata_from_audio(audio_file: Any) -> TechnicalMetadata:
    """Pure function - TechnicalMetadata from a parsed mutagen file."""
    info = getattr(audio_file, "info", None)
    bit_depth = getattr(info, "bits_per_sample", None) or None
    sample_rate = getattr(info, "sample_rate", None) or None

    return TechnicalMetadata(
        bit_depth=bit_depth,
        sample_rate=sample_rate,
        bit_depth_label=bit_depth_label(bit_depth),
        sample_rate_label=sample_rate_label(sample_rate),
        date=get_tag_value(audio_file, ["TDRC", "TYER", "date", "year", "\xa9day"]),
        composer=get_tag_value(audio_file, ["TCOM", "composer", "\xa9wrt"]),
        lyrics=get_lyrics(audio_file),
    )


class MediaProbe:
    """Derives TechnicalMetadata from a bounded prefix of a media URL."""

    def __init__(self, client: httpx.AsyncClient, config: EnrichmentConfig):
        self.client = client
        self.config = config

    async def probe(self, url: Optional[str]) -> Optional[TechnicalMetadata]:
        if not url:
            return None
        try:
            data, content_type = await fetch_range(
                self.client, url, 0, self.config.probe_bytes - 1, self.config.probe_timeout
            )
        except MediaFetchError as e:
            logger.warning(f"Failed to get metadata for {url}: {e}")
            return None

        audio_file = parse_buffer(data, url, content_type)
        if audio_file is None:
            logger.warning(f"Failed to get metadata for {url}: unrecognised media prefix")
            return None
        return metadata_from_audio(audio_file)
