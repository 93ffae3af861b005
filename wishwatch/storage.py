# wishwatch/storage.py
import asyncio
import datetime
import json
import os
import sqlite3
from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Any, Dict, Iterable, List, Optional

import pytz
from tenacity import (
    RetryError,
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential_jitter,
)

from .errors import StoreUnavailable
from .logger import get_logger

logger = get_logger(__name__)

DB_PATH = os.getenv("DB_PATH", "data/wishwatch.sqlite3")
WISHLIST_KEY = "wishlist"
STORE_RETRY_ATTEMPTS = max(1, int(os.getenv("STORE_RETRY_ATTEMPTS", "3")))

# Errors worth another attempt (locked database, flaky filesystem)
_TRANSIENT = (sqlite3.OperationalError, OSError)


def now_utc() -> datetime.datetime:
    return datetime.datetime.now(tz=pytz.UTC)


class KeyValueBackend(ABC):
    """Durable key -> ordered list of strings."""

    @abstractmethod
    def get_string_list(self, key: str) -> Optional[List[str]]:
        """Return the stored list, or None if the key was never written."""

    @abstractmethod
    def set_string_list(self, key: str, values: List[str]) -> None:
        """Replace the whole list stored under key."""


class MemoryBackend(KeyValueBackend):
    def __init__(self, data: Optional[Dict[str, List[str]]] = None):
        self.data: Dict[str, List[str]] = {k: list(v) for k, v in (data or {}).items()}

    def get_string_list(self, key: str) -> Optional[List[str]]:
        values = self.data.get(key)
        return None if values is None else list(values)

    def set_string_list(self, key: str, values: List[str]) -> None:
        self.data[key] = list(values)


class SqliteBackend(KeyValueBackend):
    """
    One row per key in a `kv` table; the value column is a JSON array of
    strings, so a write replaces the whole list in a single statement.
    """

    def __init__(self, path: Optional[str] = None):
        self.path = path or DB_PATH
        self._ensured = False

    @contextmanager
    def _connection(self):
        parent = os.path.dirname(os.path.abspath(self.path))
        os.makedirs(parent, exist_ok=True)
        con = sqlite3.connect(self.path)
        try:
            if not self._ensured:
                con.execute(
                    """
                    CREATE TABLE IF NOT EXISTS kv (
                        key TEXT PRIMARY KEY,
                        value TEXT NOT NULL
                    )
                """
                )
                self._ensured = True
            yield con
            con.commit()
        finally:
            con.close()

    def get_string_list(self, key: str) -> Optional[List[str]]:
        with self._connection() as con:
            row = con.execute("SELECT value FROM kv WHERE key=?", (key,)).fetchone()
        if row is None:
            return None
        try:
            values = json.loads(row[0])
        except json.JSONDecodeError as e:
            raise StoreUnavailable(f"value under {key!r} is not valid JSON: {e}")
        if not isinstance(values, list):
            raise StoreUnavailable(f"value under {key!r} is not a list")
        return values

    def set_string_list(self, key: str, values: List[str]) -> None:
        payload = json.dumps(list(values), ensure_ascii=False)
        with self._connection() as con:
            con.execute(
                """
                INSERT INTO kv (key, value) VALUES (?, ?)
                ON CONFLICT(key) DO UPDATE SET value=excluded.value
            """,
                (key, payload),
            )


class WishlistStore:
    """
    Persists the wishlist as an ordered list of self-contained JSON strings,
    one per record, under a single key. Loading skips entries that are not
    JSON objects instead of discarding the whole list.
    """

    def __init__(self, backend: Optional[KeyValueBackend] = None, key: str = WISHLIST_KEY):
        self.backend = backend if backend is not None else SqliteBackend()
        self.key = key

    @retry(
        retry=retry_if_exception_type(_TRANSIENT),
        wait=wait_exponential_jitter(initial=0.05, max=1, jitter=0.05),
        stop=stop_after_attempt(STORE_RETRY_ATTEMPTS),
    )
    def _read(self) -> Optional[List[str]]:
        return self.backend.get_string_list(self.key)

    @retry(
        retry=retry_if_exception_type(_TRANSIENT),
        wait=wait_exponential_jitter(initial=0.05, max=1, jitter=0.05),
        stop=stop_after_attempt(STORE_RETRY_ATTEMPTS),
    )
    def _write(self, values: List[str]) -> None:
        self.backend.set_string_list(self.key, values)

    async def load(self) -> List[Dict[str, Any]]:
        try:
            raw = await asyncio.to_thread(self._read)
        except RetryError as e:
            raise StoreUnavailable(str(e.last_attempt.exception()))
        except sqlite3.Error as e:
            raise StoreUnavailable(str(e))

        if raw is None:
            logger.debug("No saved wishlist under %r; starting empty.", self.key)
            return []

        records: List[Dict[str, Any]] = []
        for idx, entry in enumerate(raw):
            try:
                record = json.loads(entry)
            except (TypeError, ValueError) as e:
                logger.warning("Skipping unreadable wishlist entry #%d: %s", idx, e)
                continue
            if not isinstance(record, dict):
                logger.warning(
                    "Skipping wishlist entry #%d: expected an object, got %s",
                    idx, type(record).__name__,
                )
                continue
            records.append(record)
        return records

    async def save(self, records: Iterable[Dict[str, Any]]) -> None:
        values = [
            json.dumps(r, ensure_ascii=False, separators=(",", ":")) for r in records
        ]
        try:
            await asyncio.to_thread(self._write, values)
        except RetryError as e:
            raise StoreUnavailable(str(e.last_attempt.exception()))
        except sqlite3.Error as e:
            raise StoreUnavailable(str(e))
        logger.debug("Saved %d wishlist entries under %r.", len(values), self.key)
