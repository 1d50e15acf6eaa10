from datetime import UTC, datetime, timedelta

import pytest

from bloginno.adapters.memory_store import InMemoryBackingStore
from bloginno.components.content import ContentRepository
from bloginno.components.media import derive_object_id, is_hosted_url
from bloginno.components.reconcile import CleanupQueue
from bloginno.core.ports.media import RemovalStatus
from bloginno.core.ports.store import CATEGORIES, StoreError
from bloginno.domain.entities import Category, Principal
from bloginno.domain.errors import UploadFailed

HOST = "res.cloudinary.com"


class FixedClock:
    def __init__(self, start: datetime | None = None):
        self.current = start or datetime(2025, 3, 7, 12, 0, tzinfo=UTC)

    def now_utc(self) -> datetime:
        return self.current

    def advance(self, **kwargs) -> None:
        self.current += timedelta(**kwargs)


class StaticIdentity:
    def __init__(self, principal: Principal | None):
        self.principal = principal

    def current_principal(self) -> Principal | None:
        return self.principal


class FakeMediaStore:
    """Records uploads/removals; URLs look like real delivery URLs."""

    def __init__(self):
        self.uploads: list[tuple[str, str]] = []
        self.removals: list[tuple[str, str]] = []
        self.fail_kinds: set[str] = set()
        self.removal_status = RemovalStatus.DELETED

    @property
    def calls(self) -> int:
        return len(self.uploads) + len(self.removals)

    async def upload(self, file, media_kind, *, on_progress=None):
        self.uploads.append((file.filename, media_kind))
        if on_progress:
            on_progress(0.0)
            on_progress(50.0)
        if media_kind in self.fail_kinds:
            raise UploadFailed(media_kind, "HTTP 500")
        if on_progress:
            on_progress(100.0)
        stem, _, ext = file.filename.rpartition(".")
        n = len(self.uploads)
        return f"https://{HOST}/demo/{media_kind}/upload/v1700000000/bloginno/{stem}-{n}.{ext}"

    async def remove(self, object_id, media_kind):
        self.removals.append((object_id, media_kind))
        return self.removal_status

    def is_hosted(self, url):
        return is_hosted_url(url, HOST)

    def derive_object_id(self, url):
        return derive_object_id(url) if self.is_hosted(url) else ""


class FlakyStore(InMemoryBackingStore):
    """In-memory store that can be told to fail specific operations."""

    def __init__(self):
        super().__init__()
        self.fail_on: set[str] = set()
        self.calls: list[str] = []

    def _maybe_fail(self, operation):
        self.calls.append(operation)
        if operation in self.fail_on:
            raise StoreError(f"{operation} unavailable")

    async def list(self, collection, *, order_by=None, descending=False):
        self._maybe_fail("list")
        return await super().list(collection, order_by=order_by, descending=descending)

    async def insert(self, collection, record):
        self._maybe_fail("insert")
        return await super().insert(collection, record)

    async def update(self, collection, record_id, fields):
        self._maybe_fail("update")
        await super().update(collection, record_id, fields)

    async def delete(self, collection, record_id):
        self._maybe_fail("delete")
        await super().delete(collection, record_id)


@pytest.fixture
def clock():
    return FixedClock()


@pytest.fixture
def admin():
    return Principal(id="1", email="admin@example.com")


@pytest.fixture
def identity(admin):
    return StaticIdentity(admin)


@pytest.fixture
def media():
    return FakeMediaStore()


@pytest.fixture
def store():
    s = FlakyStore()
    s.preload(
        CATEGORIES,
        [
            Category(id="innovation", name="Innovation", icon="Lightbulb").model_dump(mode="json"),
            Category(id="project", name="Projects", icon="Rocket").model_dump(mode="json"),
        ],
    )
    return s


@pytest.fixture
def cleanup(media):
    return CleanupQueue(media, retry_delay_seconds=0)


@pytest.fixture
def repo(store, media, identity, clock, cleanup):
    return ContentRepository(store, media, identity, time=clock, cleanup=cleanup)
