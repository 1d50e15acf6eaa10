"""
Port interfaces for bloginno.

Ports:
- BackingStorePort: canonical article/category records
- MediaStorePort: uploaded media objects
- IdentityProviderPort: acting principal
- TimePort: clock
"""

from bloginno.core.ports.identity import (
    AuthenticatorPort,
    IdentityProviderPort,
    PasswordHasherPort,
)
from bloginno.core.ports.media import (
    DeletionSignerPort,
    MediaStorePort,
    ProgressCallback,
    RemovalStatus,
)
from bloginno.core.ports.store import (
    ARTICLES,
    CATEGORIES,
    COLLECTIONS,
    BackingStorePort,
    DuplicateKeyError,
    RecordNotFoundError,
    StoreError,
)
from bloginno.core.ports.time import TimePort

__all__ = [
    "ARTICLES",
    "CATEGORIES",
    "COLLECTIONS",
    "AuthenticatorPort",
    "BackingStorePort",
    "DeletionSignerPort",
    "DuplicateKeyError",
    "IdentityProviderPort",
    "MediaStorePort",
    "PasswordHasherPort",
    "ProgressCallback",
    "RecordNotFoundError",
    "RemovalStatus",
    "StoreError",
    "TimePort",
]
