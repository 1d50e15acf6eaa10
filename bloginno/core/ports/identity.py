from __future__ import annotations

from typing import Protocol

from bloginno.domain.entities import Principal


class IdentityProviderPort(Protocol):
    """Supplies the principal on whose behalf mutations run."""

    def current_principal(self) -> Principal | None:
        """Return the authenticated principal, or None when signed out."""
        ...


class AuthenticatorPort(Protocol):
    """External identity service that checks credentials."""

    async def authenticate(self, email: str, password: str) -> Principal | None:
        """Return the principal for valid credentials, else None."""
        ...


class PasswordHasherPort(Protocol):
    def hash_password(self, password: str) -> str: ...

    def verify_password(self, password: str, hash_str: str) -> bool: ...
