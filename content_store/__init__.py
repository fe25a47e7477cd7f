"""
Content Store - Priority-ordered content storage.

Named containers hold ordered content items.  Application code asks a
container for an item by name, or for whichever item currently has top
priority, and admins change what is shown by reordering instead of
redeploying.
"""

from content_store.errors import (
    ContentStoreError,
    DuplicateItemName,
    EmptyContainer,
    InvalidName,
    ItemNotFound,
    OrderMismatch,
    StorageFailure,
)
from content_store.models import Container, ContainerSummary, ContentItem
from content_store.store import ContentStore

__all__ = [
    "Container",
    "ContainerSummary",
    "ContentItem",
    "ContentStore",
    "ContentStoreError",
    "DuplicateItemName",
    "EmptyContainer",
    "InvalidName",
    "ItemNotFound",
    "OrderMismatch",
    "StorageFailure",
]
