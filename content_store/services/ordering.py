"""
Content Store - Ordering Engine

Maintains and queries item order inside a container.

Priority rules:
    - lower ``order`` means higher priority
    - equal orders fall back to insertion order (``seq``), so the answer is
      deterministic and stable across repeated calls

The "no name" lookup (:meth:`OrderingEngine.get_top_priority_item`) is what
lets application code render whichever item is prioritised today without
knowing its name: reorder the container and the page changes.
"""

import copy
from typing import Iterable, List, Optional, Sequence, Union

from loguru import logger

from content_store.errors import EmptyContainer, ItemNotFound, OrderMismatch
from content_store.models import Container, ContentItem, clean_name
from content_store.services.repository import ContainerRepository

ContainerRef = Union[str, Container]


def priority_key(item: ContentItem):
    return (item.order, item.seq)


def sort_items(items: Iterable[ContentItem]) -> List[ContentItem]:
    """Return *items* in priority order."""
    return sorted(items, key=priority_key)


class OrderingEngine:
    def __init__(self, repository: ContainerRepository):
        self.repository = repository

    def resolve(self, container: ContainerRef) -> Container:
        """Accept a loaded container or a name (loaded with get-or-create)."""
        if isinstance(container, Container):
            return container
        return self.repository.get_container(container)

    def working_copy(self, container: ContainerRef) -> Container:
        """
        Container to modify for a write.

        Caller-owned containers are deep-copied, and absent containers are
        not persisted until the write itself succeeds.
        """
        if isinstance(container, Container):
            return copy.deepcopy(container)
        return self.repository.load_container(container)

    # -----------------------------------------------------------------------
    # Queries
    # -----------------------------------------------------------------------
    def list_items(self, container: ContainerRef) -> List[ContentItem]:
        return sort_items(self.resolve(container).items)

    def get_item_by_name(self, container: ContainerRef, name: str) -> ContentItem:
        resolved = self.resolve(container)
        item = resolved.find(clean_name(name, "item"))
        if item is None:
            raise ItemNotFound(resolved.name, name)
        return item

    def get_top_priority_item(self, container: ContainerRef) -> ContentItem:
        resolved = self.resolve(container)
        if not resolved.items:
            raise EmptyContainer(resolved.name)
        return min(resolved.items, key=priority_key)

    def get_item(
        self, container: ContainerRef, name: Optional[str] = None
    ) -> ContentItem:
        """Lookup by *name* when given, otherwise the top-priority item."""
        if name is None:
            return self.get_top_priority_item(container)
        return self.get_item_by_name(container, name)

    # -----------------------------------------------------------------------
    # Reordering
    # -----------------------------------------------------------------------
    def set_order(self, container: ContainerRef, ordered_names: Sequence[str]) -> Container:
        """
        Rank every item by its position in *ordered_names* (0 = top).

        *ordered_names* must name exactly the items currently in the
        container, each once.  Anything else raises :class:`OrderMismatch`
        before a single item is touched.
        """
        resolved = self.working_copy(container)
        ordered_names = list(ordered_names)

        current = set(resolved.item_names)
        requested = set(ordered_names)
        seen = set()
        duplicates = set()
        for name in ordered_names:
            if name in seen:
                duplicates.add(name)
            seen.add(name)

        if duplicates or requested != current:
            raise OrderMismatch(
                resolved.name,
                missing=current - requested,
                unknown=requested - current,
                duplicates=duplicates,
            )

        rank = {name: position for position, name in enumerate(ordered_names)}
        for item in resolved.items:
            item.order = rank[item.name]
        resolved.items = sort_items(resolved.items)

        self.repository.save_container(resolved)
        logger.info("🔀 Container '{}' reordered: {}", resolved.name, ordered_names)
        return resolved
