"""Durable local copy of the last received product snapshot.

The snapshot lives in a single named slot of a small SQLite key/value table
so that it survives process restarts and is available before the first
remote update arrives. Storage problems are logged and absorbed; callers
always get a usable snapshot back.
"""

import json
import logging
import sqlite3
from datetime import datetime, timezone

from catalog_mirror.clients import SqliteClient
from catalog_mirror.models import (
    EMPTY_SNAPSHOT,
    Snapshot,
    snapshot_to_records,
    validate_snapshot,
)

logger = logging.getLogger(__name__)

DEFAULT_SLOT = "scanner-products"

# SQL statements
CREATE_TABLE_SQL = """
CREATE TABLE IF NOT EXISTS mirror_slots (
    slot TEXT PRIMARY KEY,
    payload TEXT NOT NULL,
    saved_at TEXT NOT NULL
)
"""

SELECT_SLOT_SQL = "SELECT payload FROM mirror_slots WHERE slot = ?"

UPSERT_SLOT_SQL = """
INSERT OR REPLACE INTO mirror_slots (slot, payload, saved_at) VALUES (?, ?, ?)
"""


class MirrorStore:
    """Persists the mirror snapshot in one named slot."""

    def __init__(self, db_path: str = "scanner_mirror.db", slot: str = DEFAULT_SLOT):
        """Initialize the store.

        Args:
            db_path: Path to the SQLite database file.
            slot: Name of the slot holding the serialized snapshot.
        """
        self._db_path = db_path
        self._slot = slot
        self._sqlite_client = SqliteClient(db_path)
        self._ensure_table_exists()

    @property
    def slot(self) -> str:
        return self._slot

    def _ensure_table_exists(self) -> None:
        """Create the slot table if it doesn't exist."""
        self._sqlite_client.execute_write(CREATE_TABLE_SQL)
        logger.debug(f"Mirror slot table ready in {self._db_path}")

    def load(self) -> Snapshot:
        """Return the last persisted snapshot.

        Returns:
            The stored snapshot, or an empty snapshot when nothing is stored,
            the stored value cannot be read, or it is not an array of
            product records.
        """
        try:
            rows = self._sqlite_client.execute_query(SELECT_SLOT_SQL, (self._slot,))
        except sqlite3.Error as e:
            logger.warning(f"Could not read slot '{self._slot}': {e}")
            return EMPTY_SNAPSHOT

        if not rows:
            return EMPTY_SNAPSHOT

        try:
            payload = json.loads(rows[0][0])
        except (TypeError, ValueError) as e:
            logger.warning(f"Discarding corrupt payload in slot '{self._slot}': {e}")
            return EMPTY_SNAPSHOT

        check = validate_snapshot(payload)
        if not check.accepted:
            logger.warning(f"Discarding stored snapshot in slot '{self._slot}': {check.reason}")
            return EMPTY_SNAPSHOT

        logger.info(f"Loaded {len(check.products)} products from slot '{self._slot}'")
        return check.products

    def save(self, snapshot: Snapshot) -> bool:
        """Replace the persisted snapshot.

        Args:
            snapshot: Products to store, in order.

        Returns:
            True if the snapshot was written, False if storage failed (the
            previous stored value is left as it was).
        """
        payload = json.dumps(snapshot_to_records(snapshot), ensure_ascii=False)
        saved_at = datetime.now(timezone.utc).isoformat()

        try:
            self._sqlite_client.execute_write(UPSERT_SLOT_SQL, (self._slot, payload, saved_at))
        except sqlite3.Error as e:
            logger.error(f"Failed to persist {len(snapshot)} products to slot '{self._slot}': {e}")
            return False

        logger.debug(f"Persisted {len(snapshot)} products to slot '{self._slot}'")
        return True

    def close(self) -> None:
        """Close the database connection."""
        self._sqlite_client.close()

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit with cleanup."""
        self.close()
        return False
