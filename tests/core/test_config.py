"""Tests for configuration loading."""

import pytest

from dlna_catalog.core.config import (
    CacheConfig,
    Config,
    EnrichmentConfig,
    apply_env_overrides,
    config_from_toml,
    get_data_dir,
)


class TestConfigFromToml:
    """Tests for config_from_toml."""

    def test_empty_toml_gives_defaults(self):
        config = config_from_toml({})

        assert config.server.port == 3000
        assert config.upstream.control_url == "http://localhost:8200/ctl/ContentDir"
        assert config.enrichment.batch_size == 10
        assert config.enrichment.art_prefix_cap == 9_500_000
        assert config.logging.level == "INFO"

    def test_sections_override_defaults(self):
        config = config_from_toml({
            "server": {"port": 8080, "host_ip": "192.168.1.20"},
            "upstream": {"dlna_url": "http://nas:8200/", "browse_path": "/ctl/CD"},
            "enrichment": {"batch_size": 4, "trailing_chunk_size": 100_000},
            "logging": {"level": "debug", "console_output": False},
        })

        assert config.server.port == 8080
        assert config.server.host_ip == "192.168.1.20"
        assert config.upstream.control_url == "http://nas:8200/ctl/CD"
        assert config.enrichment.batch_size == 4
        assert config.enrichment.trailing_chunk_size == 100_000
        assert config.logging.level == "DEBUG"
        assert config.logging.console_output is False

    def test_invalid_batch_size_rejected(self):
        with pytest.raises(ValueError):
            config_from_toml({"enrichment": {"batch_size": 0}})


def test_env_overrides():
    config = apply_env_overrides(
        Config(), {"PORT": "4000", "IP": "10.1.1.1", "DLNA_URL": "http://nas:9000"}
    )

    assert config.server.port == 4000
    assert config.server.host_ip == "10.1.1.1"
    assert config.upstream.dlna_url == "http://nas:9000"


def test_host_ip_preferred_over_ip():
    config = apply_env_overrides(Config(), {"HOST_IP": "a", "IP": "b"})

    assert config.server.host_ip == "a"


def test_env_without_values_keeps_config():
    assert apply_env_overrides(Config(), {}) == Config()


def test_cache_paths_default_under_data_dir(monkeypatch, tmp_path):
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path))

    cache = CacheConfig()
    assert get_data_dir() == tmp_path / "dlna-catalog"
    assert cache.resolved_database_path() == tmp_path / "dlna-catalog" / "database.json"
    assert cache.resolved_album_art_dir() == tmp_path / "dlna-catalog" / "album-art"


def test_enrichment_validate_rejects_non_positive_timeouts():
    with pytest.raises(ValueError):
        EnrichmentConfig(art_timeout=0).validate()
