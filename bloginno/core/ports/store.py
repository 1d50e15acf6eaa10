"""
Backing Store Interface.

Protocol-based interface for the remote database that holds the canonical
article and category records. Implementations: in-memory (dev/tests) and
SQLite. A hosted database adapter implements the same four calls.

Key requirements:
- Records are plain dicts keyed by column name
- insert() returns the identifier assigned by the store; a record that
  carries its own "id" keeps it, and a collision raises DuplicateKeyError
- All failures surface as StoreError subclasses, never driver exceptions
"""

from __future__ import annotations

from typing import Any, Protocol

ARTICLES = "articles"
CATEGORIES = "categories"
COLLECTIONS: frozenset[str] = frozenset({ARTICLES, CATEGORIES})


class BackingStorePort(Protocol):
    """Asynchronous record store keyed by collection name."""

    async def list(
        self,
        collection: str,
        *,
        order_by: str | None = None,
        descending: bool = False,
    ) -> list[dict[str, Any]]:
        """Return every record of a collection, optionally ordered by a column."""
        ...

    async def insert(self, collection: str, record: dict[str, Any]) -> Any:
        """
        Insert a record.

        Returns:
            The record id (assigned by the store unless the record has one)

        Raises:
            DuplicateKeyError: If the record's id already exists
            StoreError: On any other failure
        """
        ...

    async def update(self, collection: str, record_id: Any, fields: dict[str, Any]) -> None:
        """Replace the given fields of an existing record."""
        ...

    async def delete(self, collection: str, record_id: Any) -> None:
        """Delete a record. Deleting a missing id is not an error."""
        ...


class StoreError(Exception):
    """Base class for backing-store transport errors."""


class DuplicateKeyError(StoreError):
    """Raised when inserting a record whose id already exists."""

    def __init__(self, collection: str, record_id: Any) -> None:
        self.collection = collection
        self.record_id = record_id
        super().__init__(f"Duplicate key in {collection}: {record_id!r}")


class RecordNotFoundError(StoreError):
    """Raised when updating a record the store does not hold."""

    def __init__(self, collection: str, record_id: Any) -> None:
        self.collection = collection
        self.record_id = record_id
        super().__init__(f"No record {record_id!r} in {collection}")
