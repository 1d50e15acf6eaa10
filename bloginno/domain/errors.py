"""
Error taxonomy for content repository operations.

Every public repository operation raises one of these (or returns normally).
Raw transport exceptions from the backing store never escape; they are
wrapped in TransportFailed with the original chained as __cause__.
"""

from __future__ import annotations

from typing import Any


class ContentError(Exception):
    """Base class for content repository errors."""


class Unauthorized(ContentError):
    """Raised when a mutation is attempted without an authenticated principal."""

    def __init__(self, operation: str) -> None:
        self.operation = operation
        super().__init__(f"Authentication required for {operation}")


class ValidationFailed(ContentError):
    """Raised when a required field is missing, empty, or invalid."""

    def __init__(self, field: str, message: str | None = None) -> None:
        self.field = field
        self.message = message or f"{field} is required"
        super().__init__(self.message)


class Conflict(ContentError):
    """Raised on category id collision or when a category is still in use."""

    def __init__(self, message: str, *, target_id: Any = None) -> None:
        self.target_id = target_id
        super().__init__(message)


class UploadFailed(ContentError):
    """Raised when the media store rejects or fails an upload."""

    def __init__(self, media_kind: str, reason: str) -> None:
        self.media_kind = media_kind
        self.reason = reason
        super().__init__(f"{media_kind} upload failed: {reason}")


class NotFound(ContentError):
    """Raised when an update targets a record that does not exist."""

    def __init__(self, entity: str, entity_id: Any) -> None:
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} {entity_id!r} not found")


class TransportFailed(ContentError):
    """Raised when a backing-store read or write fails."""

    def __init__(self, operation: str, cause: BaseException | str) -> None:
        self.operation = operation
        self.cause = cause
        super().__init__(f"Backing store {operation} failed: {cause}")
