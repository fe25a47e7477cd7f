"""
Content Store - Data model

Containers and their content items, plus conversion to and from the plain
dict "document" that storage backends persist.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from content_store.errors import InvalidName


def clean_name(name: Any, kind: str = "container") -> str:
    """Return *name* stripped of surrounding whitespace, rejecting blanks."""
    if not isinstance(name, str) or not name.strip():
        raise InvalidName(f"Invalid {kind} name: {name!r}")
    return name.strip()


@dataclass
class ContentItem:
    """A named value with a priority rank (lower ``order`` wins)."""

    name: str
    value: str = ""
    order: int = 0
    # Insertion sequence number, used to break ties between equal orders.
    seq: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "value": self.value,
            "order": self.order,
            "seq": self.seq,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any], default_seq: int = 0) -> "ContentItem":
        if not isinstance(data, dict) or "name" not in data:
            raise ValueError(f"item entry is not an object with a name: {data!r}")
        return cls(
            name=str(data["name"]),
            value=str(data.get("value", "")),
            order=int(data.get("order", 0)),
            seq=int(data.get("seq", default_seq)),
        )


@dataclass
class Container:
    """A named, priority-ordered collection of content items."""

    name: str
    items: List[ContentItem] = field(default_factory=list)
    next_seq: int = 0

    def find(self, name: str) -> Optional[ContentItem]:
        """Return the item called *name*, or None."""
        for item in self.items:
            if item.name == name:
                return item
        return None

    @property
    def item_names(self) -> List[str]:
        return [item.name for item in self.items]

    def allocate_seq(self) -> int:
        """Hand out the next insertion sequence number."""
        seq = self.next_seq
        self.next_seq += 1
        return seq

    def to_document(self) -> Dict[str, Any]:
        """Serialise to the plain dict stored by backends."""
        return {
            "name": self.name,
            "next_seq": self.next_seq,
            "items": [item.to_dict() for item in self.items],
        }

    @classmethod
    def from_document(cls, name: str, document: Dict[str, Any]) -> "Container":
        """
        Rebuild a container from a stored document.

        Items without a ``seq`` (hand-edited documents) are numbered after
        the highest ``seq`` already present, in stored list order, and
        ``next_seq`` is never allowed to fall behind the numbers in use.

        A document of the wrong shape raises ``ValueError``.
        """
        raw_items = document.get("items") or []
        if not isinstance(raw_items, list):
            raise ValueError(f"items of '{name}' is not a list")

        seqs = [raw.get("seq") for raw in raw_items if isinstance(raw, dict)]
        next_free = max((int(s) for s in seqs if s is not None), default=-1) + 1

        items = []
        for raw in raw_items:
            if isinstance(raw, dict) and raw.get("seq") is None:
                items.append(ContentItem.from_dict(raw, default_seq=next_free))
                next_free += 1
            else:
                items.append(ContentItem.from_dict(raw))

        next_seq = int(document.get("next_seq", 0))
        if items:
            next_seq = max(next_seq, max(item.seq for item in items) + 1)
        return cls(name=name, items=items, next_seq=next_seq)


@dataclass(frozen=True)
class ContainerSummary:
    """Name and item count, as listed on the admin surface."""

    name: str
    item_count: int

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "item_count": self.item_count}
