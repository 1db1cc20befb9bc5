"""Page-number pagination DTOs."""

import math
from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")


@dataclass
class ListQuery:
    """Filters and paging for permission / permission set listings."""

    limit: int
    page: int = 1
    search: str | None = None
    organization_id: str | None = None
    include_expired: bool = False

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


@dataclass
class Page(Generic[T]):
    """One page of results with navigation metadata."""

    items: list[T]
    current_page: int
    total: int
    total_pages: int
    has_next: bool
    has_prev: bool

    @classmethod
    def build(cls, items: list[T], total: int, query: ListQuery) -> "Page[T]":
        total_pages = math.ceil(total / query.limit) if query.limit else 0
        return cls(
            items=items,
            current_page=query.page,
            total=total,
            total_pages=total_pages,
            has_next=query.page < total_pages,
            has_prev=query.page > 1,
        )

    def pagination(self) -> dict[str, int | bool]:
        return {
            "current_page": self.current_page,
            "total": self.total,
            "total_pages": self.total_pages,
            "has_next": self.has_next,
            "has_prev": self.has_prev,
        }
