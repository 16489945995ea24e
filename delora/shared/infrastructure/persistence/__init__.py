"""Persistence adapters (DuckDB, memory)."""

from delora.shared.infrastructure.persistence.kv_store import (
    DuckDBKeyValueStore,
    FallbackKeyValueStore,
    KeyValueStore,
    MemoryKeyValueStore,
    close_key_value_store,
    open_key_value_store,
)

__all__ = [
    "KeyValueStore",
    "DuckDBKeyValueStore",
    "MemoryKeyValueStore",
    "FallbackKeyValueStore",
    "open_key_value_store",
    "close_key_value_store",
]
