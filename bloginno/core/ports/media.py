"""
Media Store Interface.

Protocol-based interface for the third-party object store that hosts
uploaded images and video.

Key requirements:
- upload() returns a durable URL or raises UploadFailed, never an empty URL
- Progress is reported as floats in [0, 100] while the transfer runs
- remove() is best effort: it reports an outcome and never raises
- Object ids are derived from previously issued URLs, never stored separately

Deletion requires a signed request. The signature is produced by a
DeletionSignerPort held by a trusted back end; without one, removals are
skipped and reported as such.
"""

from __future__ import annotations

from collections.abc import Callable
from enum import Enum
from typing import Protocol

from bloginno.domain.entities import MediaFile, MediaKind

ProgressCallback = Callable[[float], None]


class RemovalStatus(Enum):
    """Outcome of a media deletion request."""

    DELETED = "deleted"
    FAILED = "failed"
    SKIPPED = "skipped"  # No signer configured


class MediaStorePort(Protocol):
    """Object store for article media."""

    async def upload(
        self,
        file: MediaFile,
        media_kind: MediaKind,
        *,
        on_progress: ProgressCallback | None = None,
    ) -> str:
        """Upload a payload and return its secure retrieval URL."""
        ...

    async def remove(self, object_id: str, media_kind: MediaKind) -> RemovalStatus:
        """Delete a stored object by id."""
        ...

    def is_hosted(self, url: str) -> bool:
        """True if the URL was issued by this store."""
        ...

    def derive_object_id(self, url: str) -> str:
        """Extract the store's object id from a URL, or '' if it does not match."""
        ...


class DeletionSignerPort(Protocol):
    """Produces authenticated parameters for a destroy request."""

    def sign(self, params: dict[str, str]) -> dict[str, str]:
        """Return params extended with credentials and signature."""
        ...
