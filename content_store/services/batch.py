"""
Content Store - Batch Update Coordinator

Applies edits to a container as whole-document writes.

``save_all`` is a *full replace*: the input sequence becomes the container's
complete item set, in that order.  The new document is built entirely in
memory and handed to the backend in one write, so a validation or storage
failure leaves the stored container exactly as it was.
"""

from collections import Counter
from typing import Any, Iterable, List, Optional, Tuple

from loguru import logger

from content_store.errors import DuplicateItemName, InvalidName
from content_store.models import Container, ContentItem, clean_name
from content_store.services.ordering import ContainerRef, OrderingEngine, sort_items
from content_store.services.repository import ContainerRepository


def _normalize_entry(entry: Any) -> Tuple[str, str]:
    """Accept ``(name, value)`` pairs, ``{"name", "value"}`` dicts or items."""
    if isinstance(entry, ContentItem):
        name, value = entry.name, entry.value
    elif isinstance(entry, dict):
        if "name" not in entry:
            raise InvalidName(f"Item entry has no name: {entry!r}")
        name, value = entry["name"], entry.get("value", "")
    else:
        try:
            name, value = entry
        except (TypeError, ValueError):
            raise InvalidName(f"Expected a (name, value) pair, got {entry!r}") from None
    return clean_name(name, "item"), "" if value is None else str(value)


class BatchUpdateCoordinator:
    def __init__(self, repository: ContainerRepository, engine: OrderingEngine):
        self.repository = repository
        self.engine = engine

    def save_all(self, container: ContainerRef, items: Iterable[Any]) -> Container:
        """Replace the container's items and order with *items*."""
        entries: List[Tuple[str, str]] = [_normalize_entry(e) for e in items]

        counts = Counter(name for name, _ in entries)
        duplicates = [name for name, count in counts.items() if count > 1]
        target = container.name if isinstance(container, Container) else container
        if duplicates:
            raise DuplicateItemName(str(target), duplicates)

        working = self.engine.working_copy(container)
        existing = {item.name: item for item in working.items}

        new_items: List[ContentItem] = []
        created = updated = 0
        for position, (name, value) in enumerate(entries):
            item = existing.pop(name, None)
            if item is None:
                item = ContentItem(name=name, seq=working.allocate_seq())
                created += 1
            else:
                updated += 1
            item.value = value
            item.order = position
            new_items.append(item)

        working.items = new_items
        self.repository.save_container(working)
        logger.info(
            "💾 Container '{}' replaced: {} created, {} updated, {} removed",
            working.name,
            created,
            updated,
            len(existing),
        )
        return working

    def save_item(
        self,
        container: ContainerRef,
        name: str,
        value: str,
        order: Optional[int] = None,
    ) -> ContentItem:
        """
        Update or create a single item, leaving the others alone.

        New items go to the bottom (one past the current highest order)
        unless an explicit *order* is given.  An explicit order may tie with
        another item; ties resolve by insertion order.
        """
        name = clean_name(name, "item")
        working = self.engine.working_copy(container)
        item = working.find(name)

        if item is None:
            if order is None:
                order = max((i.order for i in working.items), default=-1) + 1
            item = ContentItem(
                name=name, value=value, order=order, seq=working.allocate_seq()
            )
            working.items.append(item)
            logger.success("✅ Item '{}' added to '{}'", name, working.name)
        else:
            item.value = value
            if order is not None:
                item.order = order
            logger.info("✏️ Item '{}' in '{}' updated", name, working.name)

        working.items = sort_items(working.items)
        self.repository.save_container(working)
        return item

    def remove_item(self, container: ContainerRef, name: str) -> bool:
        """Delete one item.  Removing an absent item is a no-op."""
        name = clean_name(name, "item")
        working = self.engine.working_copy(container)
        item = working.find(name)
        if item is None:
            logger.debug("Item '{}' not in '{}', nothing to remove", name, working.name)
            return False

        working.items.remove(item)
        self.repository.save_container(working)
        logger.info("🗑️ Item '{}' removed from '{}'", name, working.name)
        return True
