"""
Identity component - who is acting.

Two admin policies are supported behind IdentityProviderPort:
- FixedCredentialIdentity: one configured admin email + Argon2 password hash
- DelegatedIdentity: credentials checked by an external identity service

Both keep a single session with a TTL. current_principal() returns None
when signed out or once the session has expired; the content repository
treats None as "operation forbidden".
"""

from __future__ import annotations

import asyncio
import logging
from datetime import timedelta

from bloginno.core.ports.identity import AuthenticatorPort, PasswordHasherPort
from bloginno.core.ports.time import TimePort
from bloginno.domain.entities import Principal
from bloginno.domain.errors import TransportFailed

from .models import IdentitySession

logger = logging.getLogger(__name__)


class _SessionIdentity:
    def __init__(self, *, time: TimePort, session_ttl_minutes: int) -> None:
        self._time = time
        self._ttl = timedelta(minutes=session_ttl_minutes)
        self._session: IdentitySession | None = None

    @property
    def session(self) -> IdentitySession | None:
        return self._session

    def _open_session(self, principal: Principal) -> Principal:
        now = self._time.now_utc()
        self._session = IdentitySession(
            principal=principal, started_at=now, expires_at=now + self._ttl
        )
        logger.info("Signed in principal %s", principal.id)
        return principal

    def logout(self) -> None:
        if self._session is not None:
            logger.info("Signed out principal %s", self._session.principal.id)
        self._session = None

    def current_principal(self) -> Principal | None:
        session = self._session
        if session is None:
            return None
        if session.expires_at <= self._time.now_utc():
            logger.info("Session for principal %s expired", session.principal.id)
            self._session = None
            return None
        return session.principal


class FixedCredentialIdentity(_SessionIdentity):
    """Single hardcoded admin account."""

    def __init__(
        self,
        *,
        admin_id: str,
        admin_email: str,
        password_hash: str,
        hasher: PasswordHasherPort,
        time: TimePort,
        session_ttl_minutes: int = 24 * 60,
    ) -> None:
        super().__init__(time=time, session_ttl_minutes=session_ttl_minutes)
        self._principal = Principal(id=admin_id, email=admin_email)
        self._password_hash = password_hash
        self._hasher = hasher

    async def login(self, email: str, password: str) -> Principal | None:
        expected = (self._principal.email or "").lower()
        # Argon2 verification is CPU-bound and runs in a worker thread
        if email.strip().lower() != expected or not await asyncio.to_thread(
            self._hasher.verify_password, password, self._password_hash
        ):
            logger.info("Rejected sign-in attempt for %s", email)
            return None
        return self._open_session(self._principal)


class DelegatedIdentity(_SessionIdentity):
    """Credentials are checked by an external identity service."""

    def __init__(
        self,
        authenticator: AuthenticatorPort,
        *,
        time: TimePort,
        session_ttl_minutes: int = 24 * 60,
    ) -> None:
        super().__init__(time=time, session_ttl_minutes=session_ttl_minutes)
        self._authenticator = authenticator

    async def login(self, email: str, password: str) -> Principal | None:
        try:
            principal = await self._authenticator.authenticate(email, password)
        except Exception as e:
            logger.error("Identity service unavailable: %s", e)
            raise TransportFailed("authenticate", e) from e

        if principal is None:
            logger.info("Identity service rejected sign-in for %s", email)
            return None
        return self._open_session(principal)
