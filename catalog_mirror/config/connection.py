"""Connection parameters for the remote product database.

The handheld client is paired with the back-office system by opening a link
(usually shown as a QR code) whose query string carries the seven parameters
needed to address the remote database. The same parameters can be supplied
through the environment for unattended devices.
"""

import os
from dataclasses import dataclass
from typing import Mapping, Optional, Tuple
from urllib.parse import parse_qs, urlsplit

from catalog_mirror.config.configuration import ConfigurationError

# Invocation parameter name → ConnectionConfig field
REQUIRED_PARAMETERS = {
    "apiKey": "api_key",
    "authDomain": "auth_domain",
    "databaseURL": "database_url",
    "projectId": "project_id",
    "storageBucket": "storage_bucket",
    "messagingSenderId": "messaging_sender_id",
    "appId": "app_id",
}

# Invocation parameter name → environment variable
ENVIRONMENT_VARIABLES = {
    "apiKey": "FIREBASE_API_KEY",
    "authDomain": "FIREBASE_AUTH_DOMAIN",
    "databaseURL": "FIREBASE_DATABASE_URL",
    "projectId": "FIREBASE_PROJECT_ID",
    "storageBucket": "FIREBASE_STORAGE_BUCKET",
    "messagingSenderId": "FIREBASE_MESSAGING_SENDER_ID",
    "appId": "FIREBASE_APP_ID",
}


class ConnectionConfigInvalid(ConfigurationError):
    """Raised when one or more required connection parameters are missing."""

    def __init__(self, missing: Tuple[str, ...]):
        self.missing = missing
        super().__init__(
            f"Connection data is incomplete (missing: {', '.join(missing)}). "
            f"Scan the pairing code from the main system again."
        )


@dataclass(frozen=True)
class ConnectionConfig:
    """Parameters addressing the remote database. All fields are non-empty."""

    api_key: str
    auth_domain: str
    database_url: str
    project_id: str
    storage_bucket: str
    messaging_sender_id: str
    app_id: str


@dataclass(frozen=True)
class ConfigResult:
    """Outcome of resolving connection parameters.

    Exactly one of ``config`` (when valid) or ``missing`` (when invalid) is
    meaningful.
    """

    valid: bool
    config: Optional[ConnectionConfig] = None
    missing: Tuple[str, ...] = ()

    def unwrap(self) -> ConnectionConfig:
        """Return the config or raise ConnectionConfigInvalid."""
        if not self.valid or self.config is None:
            raise ConnectionConfigInvalid(self.missing)
        return self.config


def resolve_connection_config(params: Mapping[str, Optional[str]]) -> ConfigResult:
    """
    Validate the seven required connection parameters.

    Args:
        params: Invocation parameters keyed by their public names
            (``apiKey``, ``databaseURL``, ...). Extra keys are ignored.

    Returns:
        A valid ConfigResult only if every required parameter is present and
        non-empty, otherwise an invalid result listing the missing names.
    """
    values = {}
    missing = []
    for name, field_name in REQUIRED_PARAMETERS.items():
        value = params.get(name)
        if value is None or not str(value).strip():
            missing.append(name)
            continue
        values[field_name] = str(value).strip()

    if missing:
        return ConfigResult(valid=False, missing=tuple(missing))

    return ConfigResult(valid=True, config=ConnectionConfig(**values))


def params_from_url(url: str) -> dict[str, str]:
    """Extract invocation parameters from a pairing link's query string.

    The first value wins when a parameter is repeated.
    """
    query = parse_qs(urlsplit(url).query, keep_blank_values=True)
    return {name: values[0] for name, values in query.items() if values}


def params_from_env(environ: Optional[Mapping[str, str]] = None) -> dict[str, str]:
    """Read invocation parameters from FIREBASE_* environment variables."""
    environ = os.environ if environ is None else environ
    params = {}
    for name, variable in ENVIRONMENT_VARIABLES.items():
        value = environ.get(variable)
        if value is not None:
            params[name] = value
    return params
