"""Media domain - bounded inspection of remote audio files.

This domain handles:
- Probing format characteristics from a small byte prefix
- Extracting embedded album art (mutagen, then a manual APIC scan)
- Classifying audio quality
"""

from .artwork import AlbumArtCache, CoverArtExtractor, art_filename
from .id3_scan import ApicScanResult, scan_apic_frame
from .probe import MediaProbe
from .quality import QualityInfo, build_quality, classify_quality, format_bitrate

__all__ = [
    "AlbumArtCache",
    "CoverArtExtractor",
    "art_filename",
    "ApicScanResult",
    "scan_apic_frame",
    "MediaProbe",
    "QualityInfo",
    "build_quality",
    "classify_quality",
    "format_bitrate",
]
