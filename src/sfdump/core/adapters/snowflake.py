from __future__ import annotations

import threading
from contextlib import nullcontext
from typing import Any

from snowflake.connector.errors import Error as SnowflakeError

from sfdump.core.errors import QueryError


class SnowflakeAdapter:
    """Adapter around a Snowflake connector connection (read-only queries)."""

    def __init__(self, connection: Any, *, serialize: bool = False) -> None:
        """
        Wrap an open connection.

        Args:
            connection: An open `snowflake.connector` connection.
            serialize: Run one query at a time. Needed when the driver does
                not allow threads to share a connection.
        """
        self.connection = connection
        self.serialized = serialize
        self._lock = threading.Lock() if serialize else nullcontext()

    def query(self, text: str) -> list[tuple]:
        """Run a query on a fresh cursor and return all rows."""
        with self._lock:
            try:
                cursor = self.connection.cursor()
                try:
                    cursor.execute(text)
                    return list(cursor.fetchall())
                finally:
                    cursor.close()
            except SnowflakeError as exc:
                raise QueryError(f"{exc} (query: {_shorten(text)})") from exc

    def close(self) -> None:
        """Close the underlying connection."""
        self.connection.close()


def _shorten(text: str, max_len: int = 120) -> str:
    """Collapse whitespace and cap a query for error messages."""
    flat = " ".join(text.split())
    if len(flat) <= max_len:
        return flat
    return f"{flat[: max_len - 3]}..."
