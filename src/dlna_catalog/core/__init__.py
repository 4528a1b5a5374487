"""Core infrastructure layer - no business logic dependencies.

This module provides foundation-level services:
- Configuration management (TOML + environment)
- Logging setup (Loguru)
"""

from .config import (
    Config,
    ServerConfig,
    UpstreamConfig,
    CacheConfig,
    EnrichmentConfig,
    LoggingConfig,
    load_config,
    get_config_dir,
    get_config_path,
    get_data_dir,
    ensure_directories,
)
from .output import setup_loguru, setup_from_config

__all__ = [
    "Config",
    "ServerConfig",
    "UpstreamConfig",
    "CacheConfig",
    "EnrichmentConfig",
    "LoggingConfig",
    "load_config",
    "get_config_dir",
    "get_config_path",
    "get_data_dir",
    "ensure_directories",
    "setup_loguru",
    "setup_from_config",
]
