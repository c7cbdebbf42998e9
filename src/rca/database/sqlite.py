# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Repository cache SQLite implementation."""

import json
import logging
import sqlite3
import time
from pathlib import Path
from typing import Callable

from rca.cache import CACHE_TTL_SECONDS, CacheError

logger = logging.getLogger(__name__)


class SQLiteRepoCache:
    """Persist repository payloads to a SQLite database."""

    def __init__(
        self,
        db_path: Path,
        ttl_seconds: float = CACHE_TTL_SECONDS,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """Initialize the cache backend.

        Args:
            db_path: SQLite database file path.
            ttl_seconds: Entry lifetime.
            clock: Wall-clock time source in seconds.
        """
        self._db_path = db_path
        self._ttl_seconds = ttl_seconds
        self._clock = clock

    def get(self, repo_key: str) -> dict[str, object] | None:
        """Return the cached payload, or ``None`` when missing or expired.

        Raises:
            CacheError: If the database cannot be read or holds invalid JSON.
        """
        rows = self._execute(
            "SELECT stored_at, payload FROM repo_cache WHERE repo_key = ?",
            (repo_key,),
        )
        if not rows:
            return None
        stored_at, raw_payload = rows[0]
        if self._clock() - float(stored_at) >= self._ttl_seconds:
            self._execute("DELETE FROM repo_cache WHERE repo_key = ?", (repo_key,))
            return None
        try:
            payload = json.loads(raw_payload)
        except json.JSONDecodeError as exc:
            logger.warning(
                f"Cached repository payload is not valid JSON (db_path={self._db_path} "
                f"repo={repo_key} error={exc})"
            )
            raise CacheError(str(exc)) from exc
        return payload

    def set(self, repo_key: str, payload: dict[str, object]) -> None:
        """Store a payload, replacing any previous entry.

        Raises:
            CacheError: If the payload cannot be serialized or written.
        """
        try:
            raw_payload = json.dumps(payload, sort_keys=True)
        except (TypeError, ValueError) as exc:
            raise CacheError(f"Payload is not JSON serializable: {exc}") from exc
        self._execute(
            "INSERT OR REPLACE INTO repo_cache (repo_key, stored_at, payload) "
            "VALUES (?, ?, ?)",
            (repo_key, self._clock(), raw_payload),
        )

    def clear(self) -> None:
        self._execute("DELETE FROM repo_cache", ())

    def size(self) -> int:
        rows = self._execute("SELECT COUNT(*) FROM repo_cache", ())
        return int(rows[0][0])

    def _execute(self, sql: str, params: tuple[object, ...]) -> list[tuple]:
        """Run one statement in its own transaction.

        Raises:
            CacheError: If schema setup or the statement fails.
        """
        connection = sqlite3.connect(self._db_path)
        try:
            self._ensure_schema(connection=connection)
            rows = connection.execute(sql, params).fetchall()
            connection.commit()
            return rows
        except sqlite3.DatabaseError as exc:
            connection.rollback()
            logger.warning(f"SQLite cache operation failed (db_path={self._db_path} error={exc})")
            raise CacheError(str(exc)) from exc
        finally:
            connection.close()

    def _ensure_schema(self, connection: sqlite3.Connection) -> None:
        connection.execute(
            "CREATE TABLE IF NOT EXISTS repo_cache ("
            "repo_key TEXT PRIMARY KEY, "
            "stored_at REAL NOT NULL, "
            "payload TEXT NOT NULL"
            ")"
        )
