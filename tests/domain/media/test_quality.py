"""Tests for audio quality classification."""

import pytest

from dlna_catalog.domain.catalog.models import TechnicalMetadata
from dlna_catalog.domain.media.quality import build_quality, classify_quality, format_bitrate


def meta(bit_depth=None, sample_rate=None):
    return TechnicalMetadata(
        bit_depth=bit_depth,
        sample_rate=sample_rate,
        bit_depth_label=f"{bit_depth}-bit" if bit_depth else None,
        sample_rate_label=f"{sample_rate / 1000:.1f}kHz" if sample_rate else None,
    )


@pytest.mark.parametrize("raw, expected", [
    (None, None),
    ("", None),
    ("abc", None),
    (320, "320kbps"),
    ("1000", "1000kbps"),
    (320000, "320kbps"),
    ("176400", "176kbps"),
    (True, None),
])
def test_format_bitrate(raw, expected):
    assert format_bitrate(raw) == expected


class TestClassifyQuality:
    """Tests for classify_quality."""

    def test_cd_quality(self):
        info = classify_quality(meta(16, 44100))
        assert (info.encoding, info.label, info.tier) == ("Lossless", "CD Quality", "lossless")

    def test_hi_res_by_bit_depth(self):
        assert classify_quality(meta(24, 44100)).tier == "hi-res"

    def test_hi_res_by_sample_rate(self):
        info = classify_quality(meta(16, 96000))
        assert info.label == "Hi-Res Lossless"

    def test_dsd_by_sample_rate(self):
        info = classify_quality(meta(1, 5_644_800))
        assert (info.encoding, info.label, info.tier) == ("DSD", "DSD128", "master")

    def test_dsd_without_rate(self):
        assert classify_quality(meta(1, None)).label == "DSD"

    def test_other_lossless(self):
        assert classify_quality(meta(20, 44100)).label == "Lossless"

    @pytest.mark.parametrize("bitrate, label", [
        (320000, "High"),
        (192, "Standard"),
        (96000, "Low"),
    ])
    def test_lossy_by_bitrate(self, bitrate, label):
        info = classify_quality(None, bitrate)
        assert info.tier == "lossy"
        assert info.label == label

    def test_nothing_known(self):
        info = classify_quality(None, None)
        assert info.encoding == "Unknown"
        assert info.label


class TestBuildQuality:
    """Tests for build_quality."""

    def test_uses_probe_labels(self):
        quality = build_quality(meta(24, 96000), 4608000)

        assert quality.bit_depth == "24-bit"
        assert quality.sample_rate == "96.0kHz"
        assert quality.bitrate == "4608kbps"

    def test_defaults_when_probe_failed(self):
        quality = build_quality(None, None)

        assert quality.bit_depth == "16-bit"
        assert quality.sample_rate == "44.1kHz"
        assert quality.bitrate is None
        assert quality.label

    def test_json_shape(self):
        data = build_quality(meta(16, 44100), 1411200).to_dict()

        assert set(data) == {"encoding", "label", "tier", "bitDepth", "sampleRate", "bitrate"}
