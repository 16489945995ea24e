"""
Shared Infrastructure Module
=============================

Technical adapters for external systems (durable key-value storage).
"""

from delora.shared.infrastructure.persistence import (
    DuckDBKeyValueStore,
    FallbackKeyValueStore,
    KeyValueStore,
    MemoryKeyValueStore,
    open_key_value_store,
)

__all__ = [
    "KeyValueStore",
    "DuckDBKeyValueStore",
    "MemoryKeyValueStore",
    "FallbackKeyValueStore",
    "open_key_value_store",
]
