"""
Content component models.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from bloginno.domain.entities import Article, Category

LoadSource = Literal["store", "seed"]


@dataclass(frozen=True)
class SeedData:
    """Fallback collections used when the backing store is unreachable."""

    articles: tuple[Article, ...] = ()
    categories: tuple[Category, ...] = ()


@dataclass(frozen=True)
class LoadResult:
    """Outcome of the session-start load."""

    source: LoadSource
    article_count: int
    category_count: int
    skipped_rows: int = 0
    error: str | None = None

    @property
    def degraded(self) -> bool:
        return self.source == "seed"
