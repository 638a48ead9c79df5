"""Configuration module for the catalog mirror.

Loads settings from config.yaml at the project root. Connection parameters
for the remote database are not part of this file; they come from the
pairing link or from the .env file (see connection.py).
Fails fast with clear error messages if the configuration file is missing.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import yaml
from dotenv import load_dotenv

CONFIG_FILENAME = "config.yaml"


class ConfigurationError(Exception):
    """Raised when required configuration is missing or invalid."""
    pass


def _get_project_root() -> Path:
    """Get the project root directory (where config.yaml lives)."""
    # Navigate from catalog_mirror/config/ up to project root
    return Path(__file__).parent.parent.parent


def _load_yaml_config() -> dict:
    """Load configuration from config.yaml."""
    config_path = _get_project_root() / CONFIG_FILENAME

    if not config_path.exists():
        raise ConfigurationError(f"Configuration file not found: {config_path}")

    with open(config_path, "r") as f:
        return yaml.safe_load(f) or {}


@dataclass(frozen=True)
class MirrorConfig:
    """Local mirror persistence configuration."""
    db_path: str
    slot: str


@dataclass(frozen=True)
class SyncConfig:
    """Remote collection subscription configuration."""
    collection_path: str
    request_timeout_seconds: float


@dataclass(frozen=True)
class ScannerConfig:
    """Scanning session configuration."""
    cooldown_seconds: float
    readiness_max_attempts: int
    readiness_delay_seconds: float


@dataclass(frozen=True)
class LoggingConfig:
    """Logging configuration."""
    level: str


@dataclass(frozen=True)
class AppConfig:
    """Main application configuration container."""
    mirror: MirrorConfig
    sync: SyncConfig
    scanner: ScannerConfig
    logging: LoggingConfig


def load_config() -> AppConfig:
    """
    Load and validate all application configuration.

    Loads config.yaml and the .env file so that
    connection parameters are available to params_from_env().

    Returns:
        AppConfig: Validated application configuration.

    Raises:
        ConfigurationError: If the configuration file is missing or a value
            has the wrong type.
    """
    # Load environment variables from .env file
    load_dotenv()

    yaml_config = _load_yaml_config()

    mirror_section = yaml_config.get("mirror", {})
    sync_section = yaml_config.get("sync", {})
    scanner_section = yaml_config.get("scanner", {})
    logging_section = yaml_config.get("logging", {})

    try:
        mirror_config = MirrorConfig(
            db_path=str(mirror_section.get("db_path", "scanner_mirror.db")),
            slot=str(mirror_section.get("slot", "scanner-products")),
        )

        sync_config = SyncConfig(
            collection_path=str(sync_section.get("collection_path", "syncedData/products")),
            request_timeout_seconds=float(sync_section.get("request_timeout_seconds", 30)),
        )

        scanner_config = ScannerConfig(
            cooldown_seconds=float(scanner_section.get("cooldown_seconds", 1.0)),
            readiness_max_attempts=int(scanner_section.get("readiness_max_attempts", 100)),
            readiness_delay_seconds=float(scanner_section.get("readiness_delay_seconds", 0.05)),
        )
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"Invalid value in configuration file: {e}") from e

    if scanner_config.cooldown_seconds <= 0:
        raise ConfigurationError("scanner.cooldown_seconds must be greater than zero")

    logging_config = LoggingConfig(
        level=str(logging_section.get("level", "INFO")).upper(),
    )

    return AppConfig(
        mirror=mirror_config,
        sync=sync_config,
        scanner=scanner_config,
        logging=logging_config,
    )


# Module-level singleton for convenience
_config: Optional[AppConfig] = None


def get_config() -> AppConfig:
    """
    Get the application configuration singleton.

    Lazy-loads configuration on first access.

    Returns:
        AppConfig: Application configuration.

    Raises:
        ConfigurationError: If required configuration is missing.
    """
    global _config
    if _config is None:
        _config = load_config()
    return _config
