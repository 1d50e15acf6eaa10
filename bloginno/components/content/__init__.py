"""
Content component - article/category repository with local cache.
"""

from .component import ContentRepository
from .models import LoadResult, LoadSource, SeedData
from .seed import SEED_ARTICLES, SEED_CATEGORIES

__all__ = [
    "SEED_ARTICLES",
    "SEED_CATEGORIES",
    "ContentRepository",
    "LoadResult",
    "LoadSource",
    "SeedData",
]
