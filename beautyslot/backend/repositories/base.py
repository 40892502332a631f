"""
Base Repository.

Base class for the in-memory repositories with common CRUD operations.
Items live in a plain list in insertion order; nothing is persisted.
"""

from typing import Any, Generic, TypeVar

from pydantic import BaseModel

from beautyslot.backend.core.exceptions import NotFoundError
from beautyslot.backend.core.logging import get_logger

logger = get_logger(__name__)

ModelType = TypeVar("ModelType", bound=BaseModel)


class InMemoryRepository(Generic[ModelType]):
    """
    In-memory repository with common CRUD operations.

    Subclasses set the model class and a human-readable name used in
    not-found messages:

        class BroadcastRepository(InMemoryRepository[Broadcast]):
            model = Broadcast
            not_found_message = "Рассылка не найдена"
    """

    model: type[ModelType]
    not_found_message: str | None = None

    def __init__(self) -> None:
        self._items: list[ModelType] = []

    def get_by_id(self, id: Any) -> ModelType:
        """
        Get a single item by ID.

        Raises:
            NotFoundError: If item not found
        """
        instance = self.get_by_id_or_none(id)
        if instance is None:
            raise NotFoundError(self.not_found_message or f"{self.model.__name__} not found")
        return instance

    def get_by_id_or_none(self, id: Any) -> ModelType | None:
        """Get a single item by ID, returning None if not found."""
        for item in self._items:
            if item.id == id:
                return item
        return None

    def get_all(self) -> list[ModelType]:
        """Get all items in storage order."""
        return list(self._items)

    def add(self, instance: ModelType, prepend: bool = False) -> ModelType:
        """Store an item, at the front when ``prepend`` is set."""
        if prepend:
            self._items.insert(0, instance)
        else:
            self._items.append(instance)
        return instance

    def update(self, id: Any, **kwargs: Any) -> ModelType:
        """
        Update fields of an existing item in place.

        Raises:
            NotFoundError: If item not found
        """
        instance = self.get_by_id(id)

        for key, value in kwargs.items():
            if key in self.model.model_fields:
                setattr(instance, key, value)

        return instance

    def delete(self, id: Any) -> None:
        """
        Delete an item by ID.

        Raises:
            NotFoundError: If item not found
        """
        instance = self.get_by_id(id)
        self._items.remove(instance)

    def exists(self, id: Any) -> bool:
        """Check if an item exists by ID."""
        return self.get_by_id_or_none(id) is not None

    def count(self) -> int:
        return len(self._items)

    def clear(self) -> None:
        self._items.clear()
