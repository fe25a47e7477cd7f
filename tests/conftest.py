"""
Content Store - Pytest Configuration & Shared Fixtures

Provides reusable fixtures for:
- Store configs pointing at a per-test SQLite file
- Opened stores over the SQLite and in-memory backends
- Sample container content (the HomePage / ProductPage scenarios)
- Signed bearer tokens for the admin API
"""

from pathlib import Path
from typing import List, Tuple

import pytest

from content_store.config import StoreConfig
from content_store.database import MemoryBackend, SQLiteBackend
from content_store.store import ContentStore

TEST_SECRET = "test-secret-key"

# ---------------------------------------------------------------------------
# Sample content
# ---------------------------------------------------------------------------

HOMEPAGE_ITEMS: List[Tuple[str, str]] = [
    ("rows", "<div>A</div>"),
    ("carousel", "<div>B</div>"),
]

PRODUCTPAGE_ITEMS: List[Tuple[str, str]] = [
    ("Normal", "<p>n</p>"),
    ("GameDay", "<p>g</p>"),
    ("BigSale", "<p>b</p>"),
]


# ---------------------------------------------------------------------------
# Config / backend fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def db_path(tmp_path: Path) -> Path:
    """Path for a fresh SQLite database file (not yet created)."""
    return tmp_path / "data" / "content.db"


@pytest.fixture
def store_config(db_path: Path) -> StoreConfig:
    return StoreConfig(
        db_path=db_path,
        secret_key=TEST_SECRET,
        admin_principals=frozenset({"admin"}),
        token_max_age=3600,
        log_level="DEBUG",
    )


@pytest.fixture
def sqlite_backend(db_path: Path) -> SQLiteBackend:
    """An opened SQLite backend on a temp file."""
    backend = SQLiteBackend(db_path)
    backend.open()
    return backend


@pytest.fixture(params=["sqlite", "memory"])
def store(request, store_config: StoreConfig):
    """
    An opened ContentStore, run once per backend so the ordering and
    batch semantics are checked against both implementations.
    """
    backend = MemoryBackend() if request.param == "memory" else None
    content_store = ContentStore(store_config, backend=backend)
    content_store.open()
    yield content_store
    content_store.close()


@pytest.fixture
def sqlite_store(store_config: StoreConfig):
    """An opened ContentStore on the SQLite backend only."""
    with ContentStore(store_config) as content_store:
        yield content_store


@pytest.fixture
def homepage(store: ContentStore) -> str:
    """Container "HomePage" holding rows (order 0) and carousel (order 1)."""
    store.save_all("HomePage", HOMEPAGE_ITEMS)
    return "HomePage"
