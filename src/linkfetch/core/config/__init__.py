"""Configuration loading and constants for linkfetch.

This package exposes the split configuration modules as a single interface.
"""

from linkfetch.core.config.constants import (
    ARIA2_MAX_CONNECTIONS_PER_SERVER,
    ARIA2_MIN_SPLIT_SIZE,
    ARIA2_SPLIT,
    BATCH_FILENAME_LIMIT,
    DEFAULT_PARSE_TIMEOUT_SECONDS,
    MAX_ALTERNATE_FORMATS,
    MAX_PENDING_MEDIA,
    MAX_TELEGRAM_FILE_SIZE,
    MEDIA_GROUP_DELAY_SECONDS,
    MEDIA_GROUP_SEND_LIMIT,
    NONE_ANSWERS,
    SINGLE_FILENAME_LIMIT,
    TITLE_PREVIEW_LENGTH,
)
from linkfetch.core.config.http import (
    API_USER_AGENT,
    BROWSER_HEADERS,
    DEFAULT_USER_AGENT,
    HttpxClientOptions,
    get_or_create_httpx_client,
)
from linkfetch.core.config.manager import (
    CONFIG_CACHE_TTL,
    ConfigFileEmptyError,
    ConfigFileNotFoundError,
    ConfigValueError,
    Settings,
    clear_config_cache,
    get_config,
    load_settings,
    settings_from_mapping,
)

__all__ = [
    "API_USER_AGENT",
    "ARIA2_MAX_CONNECTIONS_PER_SERVER",
    "ARIA2_MIN_SPLIT_SIZE",
    "ARIA2_SPLIT",
    "BATCH_FILENAME_LIMIT",
    "BROWSER_HEADERS",
    "CONFIG_CACHE_TTL",
    "DEFAULT_PARSE_TIMEOUT_SECONDS",
    "DEFAULT_USER_AGENT",
    "MAX_ALTERNATE_FORMATS",
    "MAX_PENDING_MEDIA",
    "MAX_TELEGRAM_FILE_SIZE",
    "MEDIA_GROUP_DELAY_SECONDS",
    "MEDIA_GROUP_SEND_LIMIT",
    "NONE_ANSWERS",
    "SINGLE_FILENAME_LIMIT",
    "TITLE_PREVIEW_LENGTH",
    "ConfigFileEmptyError",
    "ConfigFileNotFoundError",
    "ConfigValueError",
    "HttpxClientOptions",
    "Settings",
    "clear_config_cache",
    "get_config",
    "get_or_create_httpx_client",
    "load_settings",
    "settings_from_mapping",
]
