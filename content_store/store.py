"""
Content Store - Facade

:class:`ContentStore` wires the repository, ordering engine and batch
coordinator onto one storage backend, built from an explicit
:class:`~content_store.config.StoreConfig`.

Usage::

    config = StoreConfig.from_env()
    with ContentStore(config) as store:
        store.save_all("HomePage", [("rows", "<div>A</div>"), ("carousel", "<div>B</div>")])
        html = store.get_content("HomePage")   # "<div>A</div>"
"""

from typing import Any, Iterable, List, Optional, Sequence

from loguru import logger

from content_store.config import StoreConfig, ensure_directories
from content_store.database import SQLiteBackend, StorageBackend
from content_store.errors import EmptyContainer, ItemNotFound
from content_store.models import Container, ContainerSummary, ContentItem
from content_store.services.batch import BatchUpdateCoordinator
from content_store.services.ordering import ContainerRef, OrderingEngine
from content_store.services.repository import ContainerRepository


class ContentStore:
    def __init__(
        self,
        config: Optional[StoreConfig] = None,
        backend: Optional[StorageBackend] = None,
    ):
        self.config = config or StoreConfig.from_env()
        self.backend: StorageBackend = backend or SQLiteBackend(self.config.db_path)
        self.repository = ContainerRepository(self.backend)
        self.ordering = OrderingEngine(self.repository)
        self.batch = BatchUpdateCoordinator(self.repository, self.ordering)
        self._opened = False

    # -----------------------------------------------------------------------
    # Lifecycle
    # -----------------------------------------------------------------------
    def open(self) -> "ContentStore":
        if self._opened:
            return self
        if isinstance(self.backend, SQLiteBackend):
            ensure_directories(self.config)
        self.backend.open()
        self._opened = True
        logger.info("📦 Content store opened ({})", type(self.backend).__name__)
        return self

    def close(self) -> None:
        if not self._opened:
            return
        self.backend.close()
        self._opened = False
        logger.info("📦 Content store closed")

    @property
    def is_open(self) -> bool:
        return self._opened

    def __enter__(self) -> "ContentStore":
        return self.open()

    def __exit__(self, *exc_info) -> None:
        self.close()

    # -----------------------------------------------------------------------
    # Containers
    # -----------------------------------------------------------------------
    def get_container(self, name: str) -> Container:
        return self.repository.get_container(name)

    def create_container(self, name: str) -> Container:
        return self.repository.create_container(name)

    def container_exists(self, name: str) -> bool:
        return self.repository.container_exists(name)

    def list_containers(self) -> List[ContainerSummary]:
        return self.repository.list_containers()

    def delete_container(self, name: str) -> bool:
        return self.repository.delete_container(name)

    # -----------------------------------------------------------------------
    # Items
    # -----------------------------------------------------------------------
    def list_items(self, container: ContainerRef) -> List[ContentItem]:
        return self.ordering.list_items(container)

    def get_item(self, container: ContainerRef, name: Optional[str] = None) -> ContentItem:
        return self.ordering.get_item(container, name)

    def get_item_by_name(self, container: ContainerRef, name: str) -> ContentItem:
        return self.ordering.get_item_by_name(container, name)

    def get_top_priority_item(self, container: ContainerRef) -> ContentItem:
        return self.ordering.get_top_priority_item(container)

    def get_content(
        self,
        container: ContainerRef,
        name: Optional[str] = None,
        default: Optional[str] = None,
    ) -> Optional[str]:
        """Value of the named (or top-priority) item, or *default* if there is none."""
        try:
            return self.ordering.get_item(container, name).value
        except (ItemNotFound, EmptyContainer):
            return default

    def set_order(self, container: ContainerRef, ordered_names: Sequence[str]) -> Container:
        return self.ordering.set_order(container, ordered_names)

    def save_all(self, container: ContainerRef, items: Iterable[Any]) -> Container:
        return self.batch.save_all(container, items)

    def save_item(
        self,
        container: ContainerRef,
        name: str,
        value: str,
        order: Optional[int] = None,
    ) -> ContentItem:
        return self.batch.save_item(container, name, value, order)

    def remove_item(self, container: ContainerRef, name: str) -> bool:
        return self.batch.remove_item(container, name)
