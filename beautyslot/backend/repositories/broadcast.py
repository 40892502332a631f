"""
Broadcast Repository.

Broadcasts are numbered from 1 and listed newest first.
"""

from datetime import datetime
from typing import Any

from beautyslot.backend.models.broadcast import Broadcast, BroadcastStatus
from beautyslot.backend.repositories.base import InMemoryRepository


class BroadcastRepository(InMemoryRepository[Broadcast]):
    """Repository for broadcasts."""

    model = Broadcast
    not_found_message = "Рассылка не найдена"

    def __init__(self) -> None:
        super().__init__()
        self._next_id = 1

    def create(self, **kwargs: Any) -> Broadcast:
        """Create a DRAFT broadcast with the next id and put it first."""
        broadcast = Broadcast(id=self._next_id, **kwargs)
        self._next_id += 1
        return self.add(broadcast, prepend=True)

    def list_by_status(
        self,
        status: BroadcastStatus | None = None,
    ) -> list[Broadcast]:
        """List broadcasts newest first, optionally by status."""
        items = self.get_all()
        if status is not None:
            items = [b for b in items if b.status == status]
        return items

    def created_since(self, since: datetime) -> int:
        return sum(1 for b in self._items if b.created_at >= since)


_repo: BroadcastRepository | None = None


def get_broadcast_repository() -> BroadcastRepository:
    global _repo
    if _repo is None:
        _repo = BroadcastRepository()
    return _repo


def reset_broadcast_repository() -> None:
    global _repo
    _repo = BroadcastRepository()
