"""
Content Store - Storage backends

A storage backend persists one JSON document per container, keyed by the
container name.  The core only relies on the narrow :class:`StorageBackend`
contract below; every write replaces the whole document in a single
operation, which is what gives ``save_all`` its all-or-nothing behaviour.

Two implementations ship:

- :class:`SQLiteBackend`: embedded SQLite file, one row per container.
  A fresh ``sqlite3`` connection is opened per call, so nothing mutable is
  shared between requests.
- :class:`MemoryBackend`: dict-backed, for embedding and tests.
"""

import copy
import json
import sqlite3
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Protocol, Tuple

from loguru import logger

from content_store.errors import StorageFailure

Document = Dict[str, Any]


class StorageBackend(Protocol):
    """Durable key → document persistence used by the store."""

    def open(self) -> None: ...

    def close(self) -> None: ...

    def load_container_document(self, name: str) -> Optional[Document]: ...

    def save_container_document(self, name: str, document: Document) -> None: ...

    def delete_container_document(self, name: str) -> bool: ...

    def list_container_documents(self) -> List[Tuple[str, Document]]: ...


@contextmanager
def storage_errors(action: str) -> Iterator[None]:
    """Re-raise backend I/O and decoding errors as :class:`StorageFailure`."""
    try:
        yield
    except StorageFailure:
        raise
    except (sqlite3.Error, OSError, ValueError, TypeError) as e:
        logger.error("❌ Storage failure while {}: {}", action, e)
        raise StorageFailure(f"Storage failure while {action}: {e}") from e


def _decode(name: str, raw: str) -> Document:
    document = json.loads(raw)
    if not isinstance(document, dict):
        raise ValueError(f"document for '{name}' is not a JSON object")
    return document


def _item_count(document: Document) -> int:
    return len(document.get("items") or [])


# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------
SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS containers (
    name TEXT PRIMARY KEY,
    document TEXT NOT NULL DEFAULT '{}',
    item_count INTEGER NOT NULL DEFAULT 0,
    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
    updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
);

CREATE TRIGGER IF NOT EXISTS update_containers_timestamp
    AFTER UPDATE ON containers
    FOR EACH ROW
BEGIN
    UPDATE containers SET updated_at = CURRENT_TIMESTAMP WHERE name = OLD.name;
END;
"""

# ---------------------------------------------------------------------------
# Migration helpers
# ---------------------------------------------------------------------------
_MIGRATIONS = [
    # Migration 1: Add item_count column (upgrade from document-only rows).
    {
        "check": "SELECT COUNT(*) FROM pragma_table_info('containers') WHERE name='item_count'",
        "apply": [
            "ALTER TABLE containers ADD COLUMN item_count INTEGER NOT NULL DEFAULT 0",
            "UPDATE containers SET item_count = json_array_length(document, '$.items') "
            "WHERE json_type(document, '$.items') = 'array'",
        ],
        "description": "Add item_count column",
    },
]


def _run_migrations(conn: sqlite3.Connection) -> None:
    """Run any pending schema migrations."""
    for migration in _MIGRATIONS:
        cursor = conn.execute(str(migration["check"]))
        (count,) = cursor.fetchone()
        if count == 0:
            logger.info("🔄 Running migration: {}", migration["description"])
            for stmt in migration["apply"]:
                conn.execute(stmt)
            conn.commit()
            logger.success("✅ Migration applied: {}", migration["description"])


class SQLiteBackend:
    """Container documents stored as JSON rows in an SQLite file."""

    def __init__(self, db_path: Path, timeout: float = 5.0):
        self.db_path = Path(db_path)
        self.timeout = timeout

    # -----------------------------------------------------------------------
    # Lifecycle
    # -----------------------------------------------------------------------
    def open(self) -> None:
        """Create the database file and tables, and run migrations."""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        try:
            with self.get_connection() as conn:
                conn.executescript(SCHEMA_SQL)
                conn.commit()
                _run_migrations(conn)
            logger.success(f"✅ Database initialized at {self.db_path}")
        except Exception as e:
            logger.critical(f"❌ Failed to initialize database: {e}")
            raise

    def close(self) -> None:
        # Connections are per call; nothing is held open between calls.
        logger.debug("💾 SQLite backend closed ({})", self.db_path)

    @contextmanager
    def get_connection(self) -> Iterator[sqlite3.Connection]:
        """Synchronous context manager for a sqlite3 connection with row factory."""
        conn = sqlite3.connect(str(self.db_path), timeout=self.timeout)
        conn.row_factory = sqlite3.Row
        try:
            yield conn
        finally:
            conn.close()

    # -----------------------------------------------------------------------
    # Document CRUD
    # -----------------------------------------------------------------------
    def load_container_document(self, name: str) -> Optional[Document]:
        with storage_errors(f"loading container '{name}'"):
            with self.get_connection() as conn:
                row = conn.execute(
                    "SELECT document FROM containers WHERE name = ?", (name,)
                ).fetchone()
            if row is None:
                return None
            return _decode(name, row["document"])

    def save_container_document(self, name: str, document: Document) -> None:
        """Write the whole document in one statement (last writer wins)."""
        with storage_errors(f"saving container '{name}'"):
            payload = json.dumps(document, ensure_ascii=False)
            with self.get_connection() as conn:
                conn.execute(
                    """
                    INSERT INTO containers (name, document, item_count)
                    VALUES (?, ?, ?)
                    ON CONFLICT(name) DO UPDATE
                    SET document = excluded.document,
                        item_count = excluded.item_count
                    """,
                    (name, payload, _item_count(document)),
                )
                conn.commit()

    def delete_container_document(self, name: str) -> bool:
        with storage_errors(f"deleting container '{name}'"):
            with self.get_connection() as conn:
                cursor = conn.execute("DELETE FROM containers WHERE name = ?", (name,))
                conn.commit()
                return cursor.rowcount > 0

    def list_container_documents(self) -> List[Tuple[str, Document]]:
        with storage_errors("listing containers"):
            with self.get_connection() as conn:
                rows = conn.execute(
                    "SELECT name, document FROM containers ORDER BY name"
                ).fetchall()
            return [(row["name"], _decode(row["name"], row["document"])) for row in rows]

    def list_container_counts(self) -> List[Tuple[str, int]]:
        """Names and item counts without decoding documents."""
        with storage_errors("listing containers"):
            with self.get_connection() as conn:
                rows = conn.execute(
                    "SELECT name, item_count FROM containers ORDER BY name"
                ).fetchall()
            return [(row["name"], row["item_count"]) for row in rows]


class MemoryBackend:
    """In-process backend; documents are deep-copied on the way in and out."""

    def __init__(self) -> None:
        self._documents: Dict[str, Document] = {}
        self._lock = threading.Lock()

    def open(self) -> None:
        logger.debug("💾 Memory backend opened")

    def close(self) -> None:
        logger.debug("💾 Memory backend closed")

    def load_container_document(self, name: str) -> Optional[Document]:
        with self._lock:
            document = self._documents.get(name)
            return copy.deepcopy(document) if document is not None else None

    def save_container_document(self, name: str, document: Document) -> None:
        with self._lock:
            self._documents[name] = copy.deepcopy(document)

    def delete_container_document(self, name: str) -> bool:
        with self._lock:
            return self._documents.pop(name, None) is not None

    def list_container_documents(self) -> List[Tuple[str, Document]]:
        with self._lock:
            return [
                (name, copy.deepcopy(self._documents[name]))
                for name in sorted(self._documents)
            ]
