"""Key-value persistence for the storefront stores.

Values are stored as JSON text under string keys. Two interchangeable
variants exist: a durable DuckDB-backed store and an in-process memory store.
``open_key_value_store`` picks one at startup; after that callers only see the
``KeyValueStore`` interface.
"""

from __future__ import annotations

import copy
import json
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, Optional

import duckdb

from delora.shared.core.configuration import StorageConfig
from delora.shared.core.errors import PersistenceDegraded
from delora.shared.core.service_registry import register_cleanup_handler, unregister_cleanup_handler

logger = logging.getLogger(__name__)

PROBE_KEY = "__delora_probe__"

# Failures that mean "the durable backend is gone", as opposed to caller bugs
BACKEND_ERRORS = (duckdb.Error, OSError, PersistenceDegraded)


class KeyValueStore(ABC):
    """JSON-valued key-value store.

    ``get`` never fails on a missing or unreadable record: it returns a deep
    copy of ``fallback`` so the caller can mutate the result freely.
    """

    durable: bool = False

    @abstractmethod
    def _read_raw(self, key: str) -> Optional[str]:
        """Return the stored JSON text for ``key`` or None."""

    @abstractmethod
    def _write_raw(self, key: str, text: str) -> None:
        """Store JSON text under ``key``, replacing any previous value."""

    @abstractmethod
    def _delete_raw(self, key: str) -> None:
        """Delete ``key``; deleting a missing key is not an error."""

    def get(self, key: str, fallback: Any = None) -> Any:
        raw = self._read_raw(key)
        if not raw:
            return copy.deepcopy(fallback)
        try:
            return json.loads(raw)
        except ValueError:
            logger.warning(f"Discarding unreadable record '{key}'")
            return copy.deepcopy(fallback)

    def set(self, key: str, value: Any) -> None:
        self._write_raw(key, json.dumps(value))

    def remove(self, key: str) -> None:
        self._delete_raw(key)

    def close(self) -> None:
        """Release backend resources. The base store holds none."""


class MemoryKeyValueStore(KeyValueStore):
    """Non-durable store, kept for the lifetime of the process."""

    def __init__(self, records: Optional[Dict[str, str]] = None) -> None:
        self._records: Dict[str, str] = dict(records or {})

    def _read_raw(self, key: str) -> Optional[str]:
        return self._records.get(key)

    def _write_raw(self, key: str, text: str) -> None:
        self._records[key] = text

    def _delete_raw(self, key: str) -> None:
        self._records.pop(key, None)

    def __contains__(self, key: str) -> bool:
        return key in self._records


class DuckDBKeyValueStore(KeyValueStore):
    """Durable store keeping one row per key in a DuckDB table.

    Every write runs in DuckDB's autocommit mode, so it is on disk when the
    call returns.
    """

    durable = True

    def __init__(self, db_path: str, table: str = "kv_records") -> None:
        if not table.isidentifier():
            raise ValueError(f"Invalid table name: {table!r}")
        self.db_path = db_path
        self.table = table
        self.conn: Optional[duckdb.DuckDBPyConnection] = None

    def open(self) -> "DuckDBKeyValueStore":
        """Connect and create the table. Raises PersistenceDegraded on failure."""
        try:
            if self.db_path != ":memory:":
                Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
            self.conn = duckdb.connect(self.db_path)
            self.conn.execute(f"""
                CREATE TABLE IF NOT EXISTS {self.table} (
                    key VARCHAR PRIMARY KEY,
                    value TEXT NOT NULL,
                    updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                )
            """)
        except (duckdb.Error, OSError) as e:
            self.close()
            raise PersistenceDegraded(f"Cannot open {self.db_path}: {e}") from e
        logger.info(f"Key-value store opened: {self.db_path}")
        return self

    def probe(self) -> None:
        """Round-trip a throwaway record to prove the backend is writable."""
        try:
            self._write_raw(PROBE_KEY, json.dumps(PROBE_KEY))
            self._delete_raw(PROBE_KEY)
        except (duckdb.Error, OSError) as e:
            raise PersistenceDegraded(f"Probe write to {self.db_path} failed: {e}") from e

    def _connection(self) -> duckdb.DuckDBPyConnection:
        if self.conn is None:
            raise PersistenceDegraded(f"Key-value store {self.db_path} is not open")
        return self.conn

    def _read_raw(self, key: str) -> Optional[str]:
        row = self._connection().execute(
            f"SELECT value FROM {self.table} WHERE key = ?", [key]
        ).fetchone()
        return row[0] if row else None

    def _write_raw(self, key: str, text: str) -> None:
        self._connection().execute(
            f"""
            INSERT INTO {self.table} (key, value, updated_at)
            VALUES (?, ?, CURRENT_TIMESTAMP)
            ON CONFLICT (key) DO UPDATE SET value = excluded.value, updated_at = excluded.updated_at
            """,
            [key, text],
        )

    def _delete_raw(self, key: str) -> None:
        self._connection().execute(f"DELETE FROM {self.table} WHERE key = ?", [key])

    def close(self) -> None:
        if self.conn is not None:
            try:
                self.conn.close()
            except duckdb.Error as e:
                logger.debug(f"Ignoring error while closing {self.db_path}: {e}")
            self.conn = None


class FallbackKeyValueStore(KeyValueStore):
    """Durable store that degrades to memory on the first backend failure.

    After degrading, every operation goes to the memory store for the rest of
    the process; the failed operation is replayed there.
    """

    def __init__(self, primary: KeyValueStore) -> None:
        self._primary = primary
        self._fallback: Optional[MemoryKeyValueStore] = None

    @property
    def durable(self) -> bool:  # type: ignore[override]
        return self._fallback is None

    @property
    def degraded(self) -> bool:
        return self._fallback is not None

    def _degrade(self, error: Exception) -> MemoryKeyValueStore:
        logger.warning(f"PersistenceDegraded: {error}; continuing with in-memory storage")
        self._fallback = MemoryKeyValueStore()
        self._primary.close()
        return self._fallback

    def _read_raw(self, key: str) -> Optional[str]:
        if self._fallback is None:
            try:
                return self._primary._read_raw(key)
            except BACKEND_ERRORS as e:
                self._degrade(e)
        return self._fallback._read_raw(key)

    def _write_raw(self, key: str, text: str) -> None:
        if self._fallback is None:
            try:
                self._primary._write_raw(key, text)
                return
            except BACKEND_ERRORS as e:
                self._degrade(e)
        self._fallback._write_raw(key, text)

    def _delete_raw(self, key: str) -> None:
        if self._fallback is None:
            try:
                self._primary._delete_raw(key)
                return
            except BACKEND_ERRORS as e:
                self._degrade(e)
        self._fallback._delete_raw(key)

    def close(self) -> None:
        self._primary.close()


def open_key_value_store(config: StorageConfig) -> KeyValueStore:
    """Select the persistence backend once, at startup."""
    if config.backend == "memory":
        logger.info("Storage backend set to memory; state will not survive restarts")
        return MemoryKeyValueStore()

    durable = DuckDBKeyValueStore(config.db_path, config.table)
    try:
        durable.open()
        durable.probe()
    except PersistenceDegraded as e:
        durable.close()
        logger.warning(f"PersistenceDegraded: {e}; using in-memory storage")
        return MemoryKeyValueStore()

    store = FallbackKeyValueStore(durable)
    register_cleanup_handler(store.close)
    return store


def close_key_value_store(store: KeyValueStore) -> None:
    """Close a store opened by ``open_key_value_store`` before process exit."""
    store.close()
    unregister_cleanup_handler(store.close)
