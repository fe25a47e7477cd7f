"""
Content Store - Container Repository

Owns the container lifecycle on top of a storage backend: get-or-create,
explicit create, list, delete, and whole-document save.

``get_container`` never reports "not found": an absent container is created
empty and persisted, so integration code can ask for content without
branching on existence.
"""

from typing import List

from loguru import logger

from content_store.database import StorageBackend, storage_errors
from content_store.models import Container, ContainerSummary, clean_name


def _to_container(name: str, document: dict) -> Container:
    """Decode a stored document; a malformed one is a storage failure."""
    with storage_errors(f"decoding container '{name}'"):
        return Container.from_document(name, document)


class ContainerRepository:
    def __init__(self, backend: StorageBackend):
        self.backend = backend

    def get_container(self, name: str) -> Container:
        """Fetch *name*, creating and persisting an empty container if absent."""
        name = clean_name(name)
        document = self.backend.load_container_document(name)
        if document is not None:
            return _to_container(name, document)

        container = Container(name=name)
        self.backend.save_container_document(name, container.to_document())
        logger.success("✅ Container created: {}", name)
        return container

    def load_container(self, name: str) -> Container:
        """
        Fetch *name* for modification without persisting anything.

        An absent container comes back empty and in memory only, so a write
        that later fails validation leaves the backend untouched.
        """
        name = clean_name(name)
        document = self.backend.load_container_document(name)
        if document is None:
            return Container(name=name)
        return _to_container(name, document)

    def create_container(self, name: str) -> Container:
        """Explicit create; an existing container is returned unchanged."""
        return self.get_container(name)

    def container_exists(self, name: str) -> bool:
        return self.backend.load_container_document(clean_name(name)) is not None

    def save_container(self, container: Container) -> None:
        """Persist the whole container document in a single backend write."""
        self.backend.save_container_document(container.name, container.to_document())

    def list_containers(self) -> List[ContainerSummary]:
        """Return container names and item counts, ordered by name."""
        list_counts = getattr(self.backend, "list_container_counts", None)
        if list_counts is not None:
            pairs = list_counts()
        else:
            pairs = [
                (name, len(document.get("items") or []))
                for name, document in self.backend.list_container_documents()
            ]
        return [
            ContainerSummary(name=name, item_count=count)
            for name, count in sorted(pairs)
        ]

    def delete_container(self, name: str) -> bool:
        """Remove a container and all its items.  Absent containers are a no-op."""
        name = clean_name(name)
        deleted = self.backend.delete_container_document(name)
        if deleted:
            logger.info("🗑️ Container '{}' deleted", name)
        else:
            logger.debug("Container '{}' not present, nothing to delete", name)
        return deleted
