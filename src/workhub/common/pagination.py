from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Generic, List, TypeVar

from ..core.constants import MAX_PER_PAGE

T = TypeVar("T")


@dataclass(frozen=True)
class PageRequest:
    page: int
    per_page: int

    @classmethod
    def of(cls, page, per_page, *, default_per_page: int) -> "PageRequest":
        try:
            p = int(page) if page not in (None, "") else 1
        except (TypeError, ValueError):
            p = 1
        try:
            pp = int(per_page) if per_page not in (None, "") else default_per_page
        except (TypeError, ValueError):
            pp = default_per_page
        return cls(page=max(p, 1), per_page=min(max(pp, 1), MAX_PER_PAGE))

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.per_page


@dataclass(frozen=True)
class Page(Generic[T]):
    items: List[T]
    page: int
    per_page: int
    total_count: int

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total_count / self.per_page) if self.per_page else 0

    def meta(self) -> dict:
        return {
            "current_page": self.page,
            "total_pages": self.total_pages,
            "total_count": self.total_count,
            "per_page": self.per_page,
        }
