"""
Content Store - Error kinds

Every failure the store surfaces is a :class:`ContentStoreError` subclass so
callers (and the admin API) can tell the kinds apart without string matching.
"""

from typing import Iterable, List


class ContentStoreError(Exception):
    """Base class for all content store errors."""


class InvalidName(ContentStoreError, ValueError):
    """A container or item name is empty or not a string."""


class ItemNotFound(ContentStoreError, LookupError):
    """No item with the requested name exists in the container."""

    def __init__(self, container: str, item: str):
        self.container = container
        self.item = item
        super().__init__(f"Item '{item}' not found in container '{container}'")


class EmptyContainer(ContentStoreError):
    """A priority lookup was made on a container with no items."""

    def __init__(self, container: str):
        self.container = container
        super().__init__(f"Container '{container}' has no items")


class OrderMismatch(ContentStoreError):
    """A reorder request does not name exactly the container's items."""

    def __init__(
        self,
        container: str,
        missing: Iterable[str] = (),
        unknown: Iterable[str] = (),
        duplicates: Iterable[str] = (),
    ):
        self.container = container
        self.missing: List[str] = sorted(missing)
        self.unknown: List[str] = sorted(unknown)
        self.duplicates: List[str] = sorted(duplicates)

        parts = []
        if self.missing:
            parts.append(f"missing {self.missing}")
        if self.unknown:
            parts.append(f"unknown {self.unknown}")
        if self.duplicates:
            parts.append(f"repeated {self.duplicates}")
        super().__init__(
            f"Order for container '{container}' does not match its items: "
            + "; ".join(parts)
        )


class DuplicateItemName(ContentStoreError):
    """A batch save names the same item more than once."""

    def __init__(self, container: str, duplicates: Iterable[str]):
        self.container = container
        self.duplicates: List[str] = sorted(duplicates)
        super().__init__(
            f"Duplicate item names for container '{container}': {self.duplicates}"
        )


class StorageFailure(ContentStoreError):
    """The storage backend failed; the original error is chained as __cause__."""
