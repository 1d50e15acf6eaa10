"""
Integrity component - category/article referential integrity.

A category may not be deleted while any article references it. The check
reads the caller's in-memory article snapshot, not a live remote aggregate,
so it is not linearizable with article creation in another session.
"""

from __future__ import annotations

from collections.abc import Iterable

from bloginno.domain.entities import Article
from bloginno.domain.errors import Conflict


def articles_using(category_id: str, articles: Iterable[Article]) -> list[Article]:
    return [a for a in articles if a.category == category_id]


def can_delete(category_id: str, articles: Iterable[Article]) -> bool:
    """True if no article references the category."""
    return not any(a.category == category_id for a in articles)


def ensure_can_delete(category_id: str, articles: Iterable[Article]) -> None:
    """Raise Conflict if the category is still in use."""
    in_use = articles_using(category_id, articles)
    if in_use:
        raise Conflict(
            f"Category '{category_id}' is in use by {len(in_use)} article(s) "
            "and cannot be deleted",
            target_id=category_id,
        )
