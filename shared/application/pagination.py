"""Pagination helpers shared by the list queries."""

from dataclasses import dataclass, field
from typing import Generic, List, TypeVar

from django.conf import settings

from shared.domain.exceptions import InvalidInputError

T = TypeVar('T')


def normalize_page(limit: int | None, offset: int | None) -> tuple[int, int]:
    """
    Apply the configured default and maximum page size

    A missing or zero limit means the default page size; larger limits
    are capped at the maximum.
    """
    default_size = getattr(settings, 'NESTLY_PAGE_SIZE', 20)
    max_size = getattr(settings, 'NESTLY_MAX_PAGE_SIZE', 100)

    if limit is not None and limit < 0:
        raise InvalidInputError("limit must not be negative")
    if offset is not None and offset < 0:
        raise InvalidInputError("offset must not be negative")

    if not limit:
        limit = default_size
    return min(limit, max_size), offset or 0


@dataclass
class Page(Generic[T]):
    """A slice of a larger result set plus its total size"""
    items: List[T] = field(default_factory=list)
    total_count: int = 0
    limit: int = 0
    offset: int = 0

    @property
    def has_more(self) -> bool:
        return self.offset + len(self.items) < self.total_count
