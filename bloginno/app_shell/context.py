from __future__ import annotations

import logging
from dataclasses import dataclass

from bloginno.adapters.clock import SystemClock
from bloginno.adapters.cloudinary_signer import CloudinarySigner
from bloginno.adapters.crypto import Argon2PasswordHasher
from bloginno.adapters.memory_store import InMemoryBackingStore
from bloginno.adapters.sqlite_store import SQLiteBackingStore
from bloginno.app_shell.config import admin_password_hash, media_credentials
from bloginno.components.content import ContentRepository
from bloginno.components.identity import DelegatedIdentity, FixedCredentialIdentity
from bloginno.components.media import MediaStoreClient
from bloginno.components.reconcile import CleanupQueue
from bloginno.core.ports.identity import AuthenticatorPort
from bloginno.core.ports.store import BackingStorePort
from bloginno.core.ports.time import TimePort
from bloginno.rules.models import Rules

logger = logging.getLogger(__name__)


@dataclass
class ServiceContext:
    store: BackingStorePort
    media: MediaStoreClient
    cleanup: CleanupQueue
    identity: FixedCredentialIdentity | DelegatedIdentity
    content: ContentRepository
    rules: Rules
    clock: TimePort

    @classmethod
    def create(
        cls,
        rules: Rules,
        *,
        store: BackingStorePort | None = None,
        authenticator: AuthenticatorPort | None = None,
        clock: TimePort | None = None,
    ) -> ServiceContext:
        clock = clock or SystemClock()

        if store is None:
            if rules.store.backend == "sqlite":
                store = SQLiteBackingStore(rules.store.sqlite_path)
            else:
                store = InMemoryBackingStore()

        credentials = media_credentials()
        signer = CloudinarySigner(*credentials) if credentials else None
        if signer is None:
            logger.warning("No media API credentials configured; media deletions will be skipped")
        media = MediaStoreClient(rules.media, signer=signer, clock=clock)

        cleanup = CleanupQueue(
            media,
            max_attempts=rules.cleanup.max_attempts,
            retry_delay_seconds=rules.cleanup.retry_delay_seconds,
        )

        identity: FixedCredentialIdentity | DelegatedIdentity
        if rules.identity.mode == "delegated":
            if authenticator is None:
                raise ValueError("Delegated identity mode requires an authenticator")
            identity = DelegatedIdentity(
                authenticator,
                time=clock,
                session_ttl_minutes=rules.identity.session_ttl_minutes,
            )
        else:
            password_hash = admin_password_hash()
            if password_hash is None:
                raise ValueError("Fixed identity mode requires an admin password hash")
            identity = FixedCredentialIdentity(
                admin_id=rules.identity.admin_id,
                admin_email=rules.identity.admin_email,
                password_hash=password_hash,
                hasher=Argon2PasswordHasher(),
                time=clock,
                session_ttl_minutes=rules.identity.session_ttl_minutes,
            )

        content = ContentRepository(
            store,
            media,
            identity,
            time=clock,
            cleanup=cleanup,
            media_limits=rules.media.limits,
            validate_category_refs=rules.content.validate_category_refs,
            fallback_to_seed=rules.content.seed_on_store_failure,
        )

        return cls(
            store=store,
            media=media,
            cleanup=cleanup,
            identity=identity,
            content=content,
            rules=rules,
            clock=clock,
        )
