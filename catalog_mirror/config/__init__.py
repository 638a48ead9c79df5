"""Configuration module."""

from catalog_mirror.config.configuration import (
    AppConfig,
    ConfigurationError,
    LoggingConfig,
    MirrorConfig,
    ScannerConfig,
    SyncConfig,
    get_config,
    load_config,
)
from catalog_mirror.config.connection import (
    ConfigResult,
    ConnectionConfig,
    ConnectionConfigInvalid,
    params_from_env,
    params_from_url,
    resolve_connection_config,
)

__all__ = [
    "AppConfig",
    "ConfigResult",
    "ConfigurationError",
    "ConnectionConfig",
    "ConnectionConfigInvalid",
    "LoggingConfig",
    "MirrorConfig",
    "ScannerConfig",
    "SyncConfig",
    "get_config",
    "load_config",
    "params_from_env",
    "params_from_url",
    "resolve_connection_config",
]
