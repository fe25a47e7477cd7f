"""
Content Store - Container Repository Tests

Tests for content_store/services/repository.py and the document model:
- get-or-create semantics (absence is never an error)
- list_containers summaries ordered by name
- Idempotent delete
- Name validation
- Document conversion for hand-edited documents
"""

from unittest.mock import MagicMock

import pytest

from content_store.database import MemoryBackend
from content_store.errors import InvalidName
from content_store.models import Container, ContainerSummary, ContentItem
from content_store.services.ordering import sort_items
from content_store.services.repository import ContainerRepository
from tests.conftest import HOMEPAGE_ITEMS

# ===========================================================================
# get_container
# ===========================================================================


class TestGetContainer:
    """Test get-or-create."""

    def test_absent_container_is_created_empty(self, store):
        container = store.get_container("HomePage")
        assert container.name == "HomePage"
        assert container.items == []
        assert store.container_exists("HomePage")

    def test_second_call_does_not_duplicate(self, store):
        store.get_container("HomePage")
        store.get_container("HomePage")
        assert store.list_containers() == [ContainerSummary("HomePage", 0)]

    def test_creates_only_once(self):
        backend = MagicMock(wraps=MemoryBackend())
        repo = ContainerRepository(backend)
        repo.get_container("HomePage")
        repo.get_container("HomePage")
        assert backend.save_container_document.call_count == 1

    def test_existing_content_is_returned(self, store, homepage):
        container = store.get_container(homepage)
        assert container.item_names == ["rows", "carousel"]

    def test_name_is_stripped(self, store):
        assert store.get_container("  HomePage ").name == "HomePage"

    @pytest.mark.parametrize("bad", ["", "   ", None, 42])
    def test_invalid_names_rejected(self, store, bad):
        with pytest.raises(InvalidName):
            store.get_container(bad)

    def test_invalid_name_is_value_error(self, store):
        with pytest.raises(ValueError):
            store.get_container("")


class TestCreateContainer:
    """Explicit create never clobbers existing content."""

    def test_create_new(self, store):
        assert store.create_container("About").items == []

    def test_create_existing_keeps_items(self, store, homepage):
        container = store.create_container(homepage)
        assert len(container.items) == 2


class TestLoadContainer:
    """load_container reads without persisting."""

    def test_absent_container_not_persisted(self, store):
        container = store.repository.load_container("Draft")
        assert container.items == []
        assert not store.container_exists("Draft")


# ===========================================================================
# list_containers
# ===========================================================================


class TestListContainers:
    """Test summaries."""

    def test_empty_store(self, store):
        assert store.list_containers() == []

    def test_names_and_counts_ordered_by_name(self, store):
        store.save_all("ProductPage", [("a", "1"), ("b", "2"), ("c", "3")])
        store.save_all("HomePage", HOMEPAGE_ITEMS)
        store.get_container("About")
        assert store.list_containers() == [
            ContainerSummary("About", 0),
            ContainerSummary("HomePage", 2),
            ContainerSummary("ProductPage", 3),
        ]

    def test_counts_follow_updates(self, store, homepage):
        store.save_item(homepage, "footer", "<footer/>")
        store.remove_item(homepage, "rows")
        assert store.list_containers() == [ContainerSummary("HomePage", 2)]

    def test_summary_to_dict(self):
        assert ContainerSummary("HomePage", 2).to_dict() == {
            "name": "HomePage",
            "item_count": 2,
        }

    def test_backend_without_count_query(self):
        """Backends only need list_container_documents for summaries."""
        repo = ContainerRepository(MemoryBackend())
        repo.save_container(
            Container("HomePage", [ContentItem("rows", "<div>A</div>")], 1)
        )
        assert repo.list_containers() == [ContainerSummary("HomePage", 1)]


# ===========================================================================
# delete_container
# ===========================================================================


class TestDeleteContainer:
    """Test removal and idempotence."""

    def test_delete_removes_items(self, store, homepage):
        assert store.delete_container(homepage) is True
        assert not store.container_exists(homepage)
        # get-or-create brings it back empty
        assert store.get_container(homepage).items == []

    def test_delete_absent_is_noop(self, store):
        assert store.delete_container("Nowhere") is False
        assert store.list_containers() == []

    def test_delete_twice(self, store, homepage):
        store.delete_container(homepage)
        assert store.delete_container(homepage) is False


# ===========================================================================
# Document conversion
# ===========================================================================


class TestContainerDocument:
    """Test Container.to_document / from_document."""

    def test_round_trip(self):
        container = Container(
            "HomePage",
            [ContentItem("rows", "<div>A</div>", 0, 0), ContentItem("x", "y", 1, 4)],
            next_seq=5,
        )
        rebuilt = Container.from_document("HomePage", container.to_document())
        assert rebuilt == container

    def test_missing_seq_defaults_to_position(self):
        doc = {
            "items": [
                {"name": "a", "value": "1", "order": 0},
                {"name": "b", "value": "2", "order": 0},
            ]
        }
        container = Container.from_document("Legacy", doc)
        assert [i.seq for i in container.items] == [0, 1]
        assert container.next_seq == 2

    def test_missing_seq_numbered_after_existing(self):
        """Unnumbered items never reuse a seq already held by another item."""
        doc = {
            "items": [
                {"name": "a", "order": 0, "seq": 1},
                {"name": "b", "order": 0},
                {"name": "c", "order": 0, "seq": 0},
                {"name": "d", "order": 0},
            ]
        }
        container = Container.from_document("Mixed", doc)
        assert [i.seq for i in container.items] == [1, 2, 0, 3]
        assert container.next_seq == 4
        assert [i.name for i in sort_items(container.items)] == ["c", "a", "b", "d"]

    def test_next_seq_never_behind_items(self):
        doc = {"next_seq": 1, "items": [{"name": "a", "order": 0, "seq": 7}]}
        assert Container.from_document("C", doc).next_seq == 8

    def test_missing_fields_default(self):
        container = Container.from_document("C", {})
        assert container.items == []
        assert container.next_seq == 0

    def test_allocate_seq_increments(self):
        container = Container("C")
        assert [container.allocate_seq() for _ in range(3)] == [0, 1, 2]
        assert container.next_seq == 3
