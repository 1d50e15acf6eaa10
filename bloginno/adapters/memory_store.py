"""In-memory backing store adapter.

This adapter implements BackingStorePort for development and tests.
For persistence across processes use SQLiteBackingStore.
"""

from __future__ import annotations

import copy
from typing import Any

from bloginno.core.ports.store import (
    COLLECTIONS,
    DuplicateKeyError,
    RecordNotFoundError,
    StoreError,
)


class InMemoryBackingStore:
    """Dict-of-dicts record store - suitable for single-process use."""

    def __init__(self) -> None:
        self._collections: dict[str, dict[Any, dict[str, Any]]] = {
            name: {} for name in COLLECTIONS
        }
        self._next_id: dict[str, int] = {name: 1 for name in COLLECTIONS}

    def _table(self, collection: str) -> dict[Any, dict[str, Any]]:
        try:
            return self._collections[collection]
        except KeyError:
            raise StoreError(f"Unknown collection: {collection}") from None

    async def list(
        self,
        collection: str,
        *,
        order_by: str | None = None,
        descending: bool = False,
    ) -> list[dict[str, Any]]:
        rows = [copy.deepcopy(r) for r in self._table(collection).values()]
        if order_by:
            rows.sort(key=lambda r: str(r.get(order_by) or ""), reverse=descending)
        return rows

    async def insert(self, collection: str, record: dict[str, Any]) -> Any:
        table = self._table(collection)
        record_id = record.get("id")
        if record_id is None:
            record_id = self._next_id[collection]
            while record_id in table:
                record_id += 1
        elif record_id in table:
            raise DuplicateKeyError(collection, record_id)

        if isinstance(record_id, int):
            self._next_id[collection] = max(self._next_id[collection], record_id + 1)

        table[record_id] = {**copy.deepcopy(record), "id": record_id}
        return record_id

    async def update(self, collection: str, record_id: Any, fields: dict[str, Any]) -> None:
        table = self._table(collection)
        if record_id not in table:
            raise RecordNotFoundError(collection, record_id)
        fields = {k: v for k, v in fields.items() if k != "id"}
        table[record_id] = {**table[record_id], **copy.deepcopy(fields)}

    async def delete(self, collection: str, record_id: Any) -> None:
        self._table(collection).pop(record_id, None)

    def clear(self) -> None:
        """Clear all records - useful for testing."""
        for table in self._collections.values():
            table.clear()

    def preload(self, collection: str, records: list[dict[str, Any]]) -> None:
        """Insert records synchronously - useful for test setup."""
        table = self._table(collection)
        for record in records:
            record_id = record.get("id")
            if record_id is None:
                record_id = self._next_id[collection]
            table[record_id] = {**copy.deepcopy(record), "id": record_id}
            if isinstance(record_id, int):
                self._next_id[collection] = max(self._next_id[collection], record_id + 1)
