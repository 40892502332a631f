"""
Pagination Utilities.

Offset pagination (``skip``/``limit``) for list endpoints backed by the
in-memory stores.
"""

from dataclasses import dataclass
from typing import Annotated, TypeVar

from fastapi import Depends, Query

from beautyslot.backend.core.config import get_app_config

T = TypeVar("T")


@dataclass
class SkipLimit:
    """Pagination parameters extracted from query string."""

    skip: int
    limit: int

    def apply(self, items: list[T]) -> list[T]:
        """Return the requested window of an already filtered, sorted list."""
        return items[self.skip:self.skip + self.limit]


def _max_limit() -> int:
    return get_app_config().application.pagination.max_limit


def skip_limit_params(default_limit: int = 20):
    """
    Build a FastAPI dependency for ``skip``/``limit`` with a per-route default.

    Usage:
        @router.get("/items")
        async def list_items(page: SkipLimit = Depends(skip_limit_params(50))):
            ...
    """

    def dependency(
        skip: int = Query(default=0, ge=0, description="Number of items to skip"),
        limit: int = Query(
            default=default_limit,
            ge=1,
            description="Maximum number of items to return",
        ),
    ) -> SkipLimit:
        return SkipLimit(skip=skip, limit=min(limit, _max_limit()))

    return dependency


Page = Annotated[SkipLimit, Depends(skip_limit_params())]
"""Default page size of 20 items."""

LargePage = Annotated[SkipLimit, Depends(skip_limit_params(50))]
"""Page size of 50 items, used for appointments."""
