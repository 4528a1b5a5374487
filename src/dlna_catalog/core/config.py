"""
Configuration management for the DLNA catalog mirror
"""

import os
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional


@dataclass
class ServerConfig:
    """Configuration for the local HTTP surface."""

    port: int = 3000
    host_ip: str = "localhost"  # Used to build absolute album art URLs


@dataclass
class UpstreamConfig:
    """Configuration for the remote DLNA media server."""

    dlna_url: str = "http://localhost:8200"
    browse_path: str = "/ctl/ContentDir"
    browse_timeout: float = 15.0

    @property
    def control_url(self) -> str:
        return self.dlna_url.rstrip("/") + self.browse_path


@dataclass
class CacheConfig:
    """Configuration for the on-disk catalog cache."""

    database_path: Optional[str] = None  # default: <data dir>/database.json
    album_art_dir: Optional[str] = None  # default: <data dir>/album-art
    placeholder_art_url: str = "/static/default-album-art.png"

    def resolved_database_path(self) -> Path:
        if self.database_path:
            return Path(self.database_path).expanduser()
        return get_data_dir() / "database.json"

    def resolved_album_art_dir(self) -> Path:
        if self.album_art_dir:
            return Path(self.album_art_dir).expanduser()
        return get_data_dir() / "album-art"


@dataclass
class EnrichmentConfig:
    """Tuning for per-item media inspection."""

    batch_size: int = 10
    probe_bytes: int = 4096
    probe_timeout: float = 5.0
    head_timeout: float = 5.0
    art_timeout: float = 10.0
    art_prefix_cap: int = 9_500_000  # Last byte offset fetched by the prefix strategy
    trailing_chunk_size: int = 150_000

    def validate(self) -> None:
        """Validate enrichment configuration values.

        Raises:
            ValueError: If configuration values are invalid
        """
        if self.batch_size < 1:
            raise ValueError(f"batch_size must be at least 1, got {self.batch_size}")
        if self.probe_bytes < 1 or self.trailing_chunk_size < 1:
            raise ValueError("probe_bytes and trailing_chunk_size must be positive")
        if min(self.probe_timeout, self.head_timeout, self.art_timeout) <= 0:
            raise ValueError("timeouts must be positive")


@dataclass
class LoggingConfig:
    """Configuration for logging."""

    level: str = "INFO"  # DEBUG, INFO, WARNING, ERROR, CRITICAL
    log_file: Optional[str] = None  # default: <data dir>/dlna-catalog.log
    console_output: bool = True


@dataclass
class Config:
    """Main configuration object."""

    server: ServerConfig = field(default_factory=ServerConfig)
    upstream: UpstreamConfig = field(default_factory=UpstreamConfig)
    cache: CacheConfig = field(default_factory=CacheConfig)
    enrichment: EnrichmentConfig = field(default_factory=EnrichmentConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def get_config_dir() -> Path:
    """Get the configuration directory path."""
    config_home = os.environ.get("XDG_CONFIG_HOME")
    if config_home:
        return Path(config_home) / "dlna-catalog"
    return Path.home() / ".config" / "dlna-catalog"


def get_data_dir() -> Path:
    """Get the data directory path."""
    data_home = os.environ.get("XDG_DATA_HOME")
    if data_home:
        return Path(data_home) / "dlna-catalog"
    return Path.home() / ".local" / "share" / "dlna-catalog"


def _find_project_config() -> Optional[Path]:
    """Find config.toml next to pyproject.toml when running from a checkout."""
    current = Path(__file__).resolve().parent
    for parent in [current] + list(current.parents):
        if (parent / "pyproject.toml").exists():
            config_path = parent / "config.toml"
            return config_path if config_path.exists() else None
    return None


def get_config_path() -> Path:
    """Get the main configuration file path.

    Checks for config.toml in the following order:
    1. Project root (detected via pyproject.toml) - for development
    2. Current working directory
    3. XDG_CONFIG_HOME/dlna-catalog (or ~/.config/dlna-catalog)
    """
    project_config = _find_project_config()
    if project_config:
        return project_config

    local_config = Path.cwd() / "config.toml"
    if local_config.exists():
        return local_config

    return get_config_dir() / "config.toml"


def _section(data: dict, name: str) -> dict:
    value = data.get(name, {})
    return value if isinstance(value, dict) else {}


def config_from_toml(toml_data: dict) -> Config:
    """Build a Config from parsed TOML, keeping defaults for absent keys."""
    config = Config()

    server = _section(toml_data, "server")
    config.server = ServerConfig(
        port=int(server.get("port", config.server.port)),
        host_ip=server.get("host_ip", config.server.host_ip),
    )

    upstream = _section(toml_data, "upstream")
    config.upstream = UpstreamConfig(
        dlna_url=upstream.get("dlna_url", config.upstream.dlna_url),
        browse_path=upstream.get("browse_path", config.upstream.browse_path),
        browse_timeout=float(
            upstream.get("browse_timeout", config.upstream.browse_timeout)
        ),
    )

    cache = _section(toml_data, "cache")
    config.cache = CacheConfig(
        database_path=cache.get("database_path"),
        album_art_dir=cache.get("album_art_dir"),
        placeholder_art_url=cache.get(
            "placeholder_art_url", config.cache.placeholder_art_url
        ),
    )

    enrichment = _section(toml_data, "enrichment")
    defaults = config.enrichment
    config.enrichment = EnrichmentConfig(
        batch_size=int(enrichment.get("batch_size", defaults.batch_size)),
        probe_bytes=int(enrichment.get("probe_bytes", defaults.probe_bytes)),
        probe_timeout=float(enrichment.get("probe_timeout", defaults.probe_timeout)),
        head_timeout=float(enrichment.get("head_timeout", defaults.head_timeout)),
        art_timeout=float(enrichment.get("art_timeout", defaults.art_timeout)),
        art_prefix_cap=int(enrichment.get("art_prefix_cap", defaults.art_prefix_cap)),
        trailing_chunk_size=int(
            enrichment.get("trailing_chunk_size", defaults.trailing_chunk_size)
        ),
    )
    config.enrichment.validate()

    logging_data = _section(toml_data, "logging")
    log_file = logging_data.get("log_file")
    if log_file:
        log_file = str(Path(log_file).expanduser())
    config.logging = LoggingConfig(
        level=logging_data.get("level", config.logging.level).upper(),
        log_file=log_file,
        console_output=logging_data.get(
            "console_output", config.logging.console_output
        ),
    )

    return config


def apply_env_overrides(config: Config, environ: Optional[dict] = None) -> Config:
    """Override config values with PORT, HOST_IP and DLNA_URL when set."""
    env = os.environ if environ is None else environ

    port = env.get("PORT")
    if port:
        config.server.port = int(port)
    host_ip = env.get("HOST_IP") or env.get("IP")
    if host_ip:
        config.server.host_ip = host_ip
    dlna_url = env.get("DLNA_URL")
    if dlna_url:
        config.upstream.dlna_url = dlna_url
    return config


def load_config() -> Config:
    """Load configuration from file, then apply environment overrides.

    Environment variables override TOML values:
    - PORT
    - HOST_IP (or IP)
    - DLNA_URL
    """
    from dotenv import load_dotenv

    env_path = get_config_dir() / ".env"
    if env_path.exists():
        load_dotenv(env_path)
    load_dotenv()

    config_path = get_config_path()
    if not config_path.exists():
        return apply_env_overrides(Config())

    try:
        with open(config_path, "rb") as f:
            toml_data = tomllib.load(f)
        config = config_from_toml(toml_data)
    except (OSError, tomllib.TOMLDecodeError, ValueError, TypeError) as e:
        print(f"Error loading configuration from {config_path}: {e}")
        print("Using default configuration.")
        config = Config()

    return apply_env_overrides(config)


def ensure_directories(config: Config) -> None:
    """Ensure the cache file's directory and the album art directory exist."""
    config.cache.resolved_database_path().parent.mkdir(parents=True, exist_ok=True)
    config.cache.resolved_album_art_dir().mkdir(parents=True, exist_ok=True)
