"""
Reconciliation component models.
"""

from __future__ import annotations

from dataclasses import dataclass

from bloginno.core.ports.media import RemovalStatus
from bloginno.domain.entities import MediaKind


@dataclass(frozen=True)
class OrphanedMedia:
    """A stored media object no longer referenced by any article."""

    slot: MediaKind
    url: str
    object_id: str


@dataclass(frozen=True)
class CleanupResult:
    """Outcome of deleting one orphaned object."""

    orphan: OrphanedMedia
    status: RemovalStatus
    attempts: int
    error: str | None = None

    @property
    def deleted(self) -> bool:
        return self.status is RemovalStatus.DELETED
