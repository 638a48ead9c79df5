"""Client modules for external services."""

from catalog_mirror.clients.sqlite_client import SqliteClient
from catalog_mirror.clients.realtime_db_client import (
    RealtimeDatabaseClient,
    RealtimeDatabaseError,
    Subscription,
    apps,
    delete_app,
    get_app,
    initialize_app,
)

__all__ = [
    "SqliteClient",
    "RealtimeDatabaseClient",
    "RealtimeDatabaseError",
    "Subscription",
    "apps",
    "delete_app",
    "get_app",
    "initialize_app",
]
