"""Data models module."""

from catalog_mirror.models.product import Product
from catalog_mirror.models.connection_state import ConnectionState
from catalog_mirror.models.snapshot import (
    EMPTY_SNAPSHOT,
    Snapshot,
    SnapshotCheck,
    snapshot_to_records,
    validate_snapshot,
)

__all__ = [
    "Product",
    "ConnectionState",
    "EMPTY_SNAPSHOT",
    "Snapshot",
    "SnapshotCheck",
    "snapshot_to_records",
    "validate_snapshot",
]
