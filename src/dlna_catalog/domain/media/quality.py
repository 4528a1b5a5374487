"""
Audio quality classification.

Maps probed technical metadata and the server-reported bitrate to the
label/tier shown next to each track.
"""

from typing import Any, NamedTuple, Optional

from dlna_catalog.domain.catalog.models import Quality, TechnicalMetadata

from .probe import DEFAULT_BIT_DEPTH_LABEL, DEFAULT_SAMPLE_RATE_LABEL

DSD64_RATE = 2_822_400
CD_RATES = (44_100, 48_000)


class QualityInfo(NamedTuple):
    encoding: str
    label: str
    tier: str


def format_bitrate(bitrate: Any) -> Optional[str]:
    """Format a raw server bitrate as '<n>kbps'.

    Values above 1000 are taken as bits (or bytes) per second and divided
    by 1000; smaller values are already kbps.
    """
    if bitrate is None or isinstance(bitrate, bool):
        return None
    try:
        value = int(float(str(bitrate).strip()))
    except (TypeError, ValueError):
        return None
    if value > 1000:
        return f"{round(value / 1000)}kbps"
    return f"{value}kbps"


def _kbps(bitrate: Any) -> Optional[int]:
    formatted = format_bitrate(bitrate)
    return int(formatted[:-4]) if formatted else None


def _dsd_label(sample_rate: int) -> str:
    multiple = round(sample_rate / (DSD64_RATE / 64))
    return f"DSD{multiple}" if multiple in (64, 128, 256, 512) else "DSD"


def classify_quality(metadata: Optional[TechnicalMetadata], bitrate: Any = None) -> QualityInfo:
    """Pure function - quality tier for one track.

    Args:
        metadata: Probe result, or None when probing failed
        bitrate: Raw bitrate reported by the media server

    Returns:
        QualityInfo(encoding, label, tier)
    """
    bit_depth = metadata.bit_depth if metadata else None
    sample_rate = metadata.sample_rate if metadata else None

    if (sample_rate and sample_rate >= DSD64_RATE) or bit_depth == 1:
        label = _dsd_label(sample_rate) if sample_rate else "DSD"
        return QualityInfo(encoding="DSD", label=label, tier="master")

    if bit_depth:
        if bit_depth >= 24 or (sample_rate and sample_rate > CD_RATES[-1]):
            return QualityInfo(encoding="Hi-Res", label="Hi-Res Lossless", tier="hi-res")
        if bit_depth == 16 and (sample_rate is None or sample_rate in CD_RATES):
            return QualityInfo(encoding="Lossless", label="CD Quality", tier="lossless")
        return QualityInfo(encoding="Lossless", label="Lossless", tier="lossless")

    kbps = _kbps(bitrate)
    if kbps is None:
        return QualityInfo(encoding="Unknown", label="Standard", tier="lossy")
    if kbps >= 256:
        return QualityInfo(encoding="Lossy", label="High", tier="lossy")
    if kbps >= 128:
        return QualityInfo(encoding="Lossy", label="Standard", tier="lossy")
    return QualityInfo(encoding="Lossy", label="Low", tier="lossy")


def build_quality(metadata: Optional[TechnicalMetadata], bitrate: Any = None) -> Quality:
    """Quality block for an item, with default labels when probing failed."""
    info = classify_quality(metadata, bitrate)
    return Quality(
        encoding=info.encoding,
        label=info.label,
        tier=info.tier,
        bit_depth=(metadata.bit_depth_label if metadata else None) or DEFAULT_BIT_DEPTH_LABEL,
        sample_rate=(metadata.sample_rate_label if metadata else None) or DEFAULT_SAMPLE_RATE_LABEL,
        bitrate=format_bitrate(bitrate),
    )
