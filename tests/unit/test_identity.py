import threading
from datetime import timedelta
from unittest.mock import AsyncMock, Mock

import pytest

from bloginno.components.identity import DelegatedIdentity, FixedCredentialIdentity
from bloginno.domain.entities import Principal
from bloginno.domain.errors import TransportFailed


@pytest.fixture
def hasher():
    h = Mock()
    h.verify_password.side_effect = lambda password, hash_str: password == "secret"
    return h


@pytest.fixture
def fixed(hasher, clock):
    return FixedCredentialIdentity(
        admin_id="1",
        admin_email="admin@example.com",
        password_hash="$argon2id$stub",
        hasher=hasher,
        time=clock,
        session_ttl_minutes=30,
    )


def test_signed_out_by_default(fixed):
    assert fixed.current_principal() is None


@pytest.mark.asyncio
async def test_fixed_login_opens_session(fixed, hasher, clock):
    principal = await fixed.login(" Admin@Example.com ", "secret")

    assert principal == Principal(id="1", email="admin@example.com")
    assert fixed.current_principal() == principal
    assert fixed.session.expires_at == clock.now_utc() + timedelta(minutes=30)
    hasher.verify_password.assert_called_with("secret", "$argon2id$stub")


@pytest.mark.asyncio
async def test_fixed_login_rejects_bad_credentials(fixed, hasher):
    assert await fixed.login("admin@example.com", "wrong") is None
    assert await fixed.login("other@example.com", "secret") is None
    assert fixed.current_principal() is None


@pytest.mark.asyncio
async def test_session_expires_after_ttl(fixed, clock):
    await fixed.login("admin@example.com", "secret")

    clock.advance(minutes=29)
    assert fixed.current_principal() is not None

    clock.advance(minutes=1)
    assert fixed.current_principal() is None
    assert fixed.session is None


@pytest.mark.asyncio
async def test_logout(fixed):
    await fixed.login("admin@example.com", "secret")
    fixed.logout()
    assert fixed.current_principal() is None


@pytest.mark.asyncio
async def test_delegated_login(clock):
    authenticator = Mock()
    authenticator.authenticate = AsyncMock(return_value=Principal(id="u-7", email="e@x.io"))
    identity = DelegatedIdentity(authenticator, time=clock)

    principal = await identity.login("e@x.io", "pw")

    assert principal.id == "u-7"
    assert identity.current_principal() == principal
    authenticator.authenticate.assert_awaited_once_with("e@x.io", "pw")


@pytest.mark.asyncio
async def test_delegated_rejection(clock):
    authenticator = Mock()
    authenticator.authenticate = AsyncMock(return_value=None)
    identity = DelegatedIdentity(authenticator, time=clock)

    assert await identity.login("e@x.io", "pw") is None
    assert identity.current_principal() is None


@pytest.mark.asyncio
async def test_delegated_service_failure_is_transport_failed(clock):
    authenticator = Mock()
    authenticator.authenticate = AsyncMock(side_effect=ConnectionError("down"))
    identity = DelegatedIdentity(authenticator, time=clock)

    with pytest.raises(TransportFailed) as exc:
        await identity.login("e@x.io", "pw")
    assert exc.value.operation == "authenticate"
    assert isinstance(exc.value.__cause__, ConnectionError)


@pytest.mark.asyncio
async def test_password_verification_runs_off_the_event_loop(fixed, hasher):
    loop_thread = threading.get_ident()
    verify_threads = []

    def verify(password, hash_str):
        verify_threads.append(threading.get_ident())
        return password == "secret"

    hasher.verify_password.side_effect = verify

    assert await fixed.login("admin@example.com", "secret") is not None
    assert verify_threads and verify_threads[0] != loop_thread
