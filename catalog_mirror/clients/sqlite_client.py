import sqlite3
from pathlib import Path
from sqlite3 import Connection


class SqliteClient:
    """SQLite database client backing the on-device mirror."""

    def __init__(self, db_path: str):
        self.db_path = db_path
        if db_path != ":memory:":
            Path(db_path).parent.mkdir(parents=True, exist_ok=True)
        self._connection = sqlite3.connect(self.db_path)

    @property
    def connection(self) -> Connection:
        """Get the database connection."""
        return self._connection

    def execute_query(self, query: str, params=None):
        """Execute a read query and return all rows."""
        cursor = self._connection.cursor()
        try:
            cursor.execute(query, params or ())
            return cursor.fetchall()
        finally:
            cursor.close()

    def execute_write(self, statement: str, params=None) -> None:
        """Execute a write statement in its own transaction.

        Rolls back and re-raises if the statement or the commit fails.
        """
        try:
            self._connection.execute(statement, params or ())
            self._connection.commit()
        except sqlite3.Error:
            self._connection.rollback()
            raise

    def close(self):
        """Close the database connection."""
        self._connection.close()

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit with cleanup."""
        self.close()
        return False
