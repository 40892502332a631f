"""
Unit Tests for the In-Memory Repository Base.
"""

import pytest
from pydantic import BaseModel

from beautyslot.backend.core.exceptions import NotFoundError
from beautyslot.backend.repositories.base import InMemoryRepository


class Item(BaseModel):
    id: int
    name: str = ""


class ItemRepository(InMemoryRepository[Item]):
    model = Item


class NamedItemRepository(InMemoryRepository[Item]):
    model = Item
    not_found_message = "Элемент не найден"


class TestCrud:
    """CRUD behaviour shared by every repository."""

    def test_add_keeps_insertion_order(self):
        repo = ItemRepository()
        repo.add(Item(id=1))
        repo.add(Item(id=2))
        repo.add(Item(id=3), prepend=True)

        assert [i.id for i in repo.get_all()] == [3, 1, 2]
        assert repo.count() == 3

    def test_get_all_returns_copy(self):
        repo = ItemRepository()
        repo.add(Item(id=1))

        repo.get_all().clear()

        assert repo.count() == 1

    def test_update_ignores_unknown_fields(self):
        repo = ItemRepository()
        repo.add(Item(id=1, name="old"))

        item = repo.update(1, name="new", color="red")

        assert item.name == "new"
        assert not hasattr(item, "color")

    def test_delete(self):
        repo = ItemRepository()
        repo.add(Item(id=1))

        repo.delete(1)

        assert not repo.exists(1)
        assert repo.get_by_id_or_none(1) is None

    def test_clear(self):
        repo = ItemRepository()
        repo.add(Item(id=1))
        repo.clear()
        assert repo.count() == 0


class TestNotFound:
    def test_default_message(self):
        with pytest.raises(NotFoundError, match="Item not found"):
            ItemRepository().get_by_id(1)

    def test_custom_message(self):
        with pytest.raises(NotFoundError, match="Элемент не найден"):
            NamedItemRepository().update(1, name="x")

    def test_delete_missing(self):
        with pytest.raises(NotFoundError):
            ItemRepository().delete(42)
