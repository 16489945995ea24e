"""Pytest configuration and fixtures"""
import pytest

from delora.shared.core.configuration import ENV_MAP, StorefrontConfig
from delora.shared.core.event_bus import EventBus
from delora.shared.domain.catalog import candidates_from_records
from delora.shared.infrastructure.persistence import DuckDBKeyValueStore, MemoryKeyValueStore
from delora.storefront.state import AppState, StorefrontController


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep DELORA_* variables from the developer's shell out of the tests."""
    for key in ENV_MAP:
        monkeypatch.delenv(key, raising=False)


@pytest.fixture
def memory_store():
    """Fresh in-memory key-value store"""
    return MemoryKeyValueStore()


@pytest.fixture
def db_path(tmp_path):
    """Path for a throwaway DuckDB file"""
    return str(tmp_path / "db" / "state.duckdb")


@pytest.fixture
def duckdb_store(db_path):
    """Open DuckDB-backed store, closed after the test"""
    store = DuckDBKeyValueStore(db_path).open()
    yield store
    store.close()


@pytest.fixture
def config():
    return StorefrontConfig()


@pytest.fixture
def sample_catalog():
    """Catalog as authored in the page"""
    return candidates_from_records([
        {"key": "vase", "display_name": "Aurora Vase", "price": 25, "category": "decor"},
        {"key": "throw", "display_name": "Linen Throw", "price": 89, "category": "textiles"},
        {"key": "mug", "display_name": "Stoneware Mug", "price": 18, "category": "kitchen"},
        {"key": "candle", "display_name": "Cedar Candle", "price": 25, "category": "decor"},
    ])


@pytest.fixture
def state(memory_store, config, sample_catalog):
    """AppState restored from an empty memory store"""
    return AppState.load(memory_store, config, sample_catalog)


@pytest.fixture
def controller(state):
    return StorefrontController(state, EventBus())
