"""Configuration manager for loading and caching config."""

import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from linkfetch.core.config.constants import DEFAULT_PARSE_TIMEOUT_SECONDS


class ConfigFileNotFoundError(FileNotFoundError):
    """Raised when a configuration file cannot be found."""

    def __init__(self, filename: str) -> None:
        """Initialize the error with the missing filename."""
        self.filename = filename
        super().__init__(filename)

    def __str__(self) -> str:
        """Return a readable error message."""
        return (
            f"Config file '{self.filename}' not found in current directory or "
            "/etc/secrets/"
        )


class ConfigFileEmptyError(ValueError):
    """Raised when a configuration file is empty or corrupted."""

    def __init__(self, path: Path) -> None:
        """Initialize the error with the invalid config path."""
        self.path = path
        super().__init__(path)

    def __str__(self) -> str:
        """Return a readable error message."""
        return f"Config file is empty or corrupted: {self.path}"


class ConfigValueError(ValueError):
    """Raised when a required configuration value is missing or invalid."""


# Config caching - reload only when the file changes
class _ConfigCacheState:
    def __init__(self) -> None:
        self.cache: dict[str, Any] = {}
        self.mtime: float = 0
        self.check_time: float = 0


_CONFIG_STATE = _ConfigCacheState()
CONFIG_CACHE_TTL = 5  # Check file modification time every 5 seconds


def _resolve_config_path(filename: str) -> Path:
    candidates = [Path(filename), Path("/etc/secrets") / filename]
    for candidate in candidates:
        if candidate.exists():
            return candidate
    raise ConfigFileNotFoundError(filename)


def get_config(filename: str = "config.yaml") -> dict[str, Any]:
    """Load configuration from YAML file with caching.

    Only reloads if file has been modified (checked every `CONFIG_CACHE_TTL` seconds).
    """
    current_time = time.time()

    # Only check file mtime periodically to avoid stat() on every call
    if (
        current_time - _CONFIG_STATE.check_time > CONFIG_CACHE_TTL
        or not _CONFIG_STATE.cache
    ):
        _CONFIG_STATE.check_time = current_time

        filepath = _resolve_config_path(filename)
        file_mtime = filepath.stat().st_mtime

        if file_mtime != _CONFIG_STATE.mtime or not _CONFIG_STATE.cache:
            _CONFIG_STATE.mtime = file_mtime
            with filepath.open(encoding="utf-8") as file:
                loaded_config = yaml.safe_load(file)
                # Handle empty/corrupted YAML that returns None
                if not isinstance(loaded_config, dict):
                    raise ConfigFileEmptyError(filepath)
                _CONFIG_STATE.cache = loaded_config

    return _CONFIG_STATE.cache


def clear_config_cache() -> None:
    """Clear the config cache to force a reload on next `get_config()` call."""
    _CONFIG_STATE.cache = {}
    _CONFIG_STATE.mtime = 0
    _CONFIG_STATE.check_time = 0


@dataclass(frozen=True, slots=True)
class Settings:
    """Typed view over the raw YAML configuration."""

    bot_token: str
    data_dir: Path = Path("data")
    log_level: str = "INFO"
    ytdlp_path: str = "yt-dlp"
    ytdlp_cookies: str | None = None
    parse_timeout_seconds: float = DEFAULT_PARSE_TIMEOUT_SECONDS
    proxy_url: str | None = None

    @property
    def users_file(self) -> Path:
        """Location of the JSON user configuration store."""
        return self.data_dir / "users.json"


def _optional_str(value: object) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _parse_timeout_seconds(raw_value: object) -> float:
    """Return configured parse timeout seconds with safe fallback."""
    if isinstance(raw_value, bool):
        return DEFAULT_PARSE_TIMEOUT_SECONDS

    try:
        timeout_seconds = float(raw_value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return DEFAULT_PARSE_TIMEOUT_SECONDS

    if timeout_seconds <= 0:
        return DEFAULT_PARSE_TIMEOUT_SECONDS
    return timeout_seconds


def settings_from_mapping(config: dict[str, Any]) -> Settings:
    """Build `Settings` from an already-loaded configuration mapping."""
    bot_token = _optional_str(config.get("bot_token"))
    if not bot_token:
        message = "Config 'bot_token' is required."
        raise ConfigValueError(message)

    return Settings(
        bot_token=bot_token,
        data_dir=Path(_optional_str(config.get("data_dir")) or "data"),
        log_level=(_optional_str(config.get("log_level")) or "INFO").upper(),
        ytdlp_path=_optional_str(config.get("ytdlp_path")) or "yt-dlp",
        ytdlp_cookies=_optional_str(config.get("ytdlp_cookies")),
        parse_timeout_seconds=_parse_timeout_seconds(
            config.get("parse_timeout_seconds", DEFAULT_PARSE_TIMEOUT_SECONDS),
        ),
        proxy_url=_optional_str(config.get("proxy_url")),
    )


def load_settings(filename: str = "config.yaml") -> Settings:
    """Load and validate settings from the YAML configuration file."""
    return settings_from_mapping(get_config(filename))
