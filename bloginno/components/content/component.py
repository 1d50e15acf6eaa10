"""
Content component - article and category repository.

Owns the canonical article/category collections for a session. Reads are
served from an in-memory cache; every mutation is written to the backing
store first and the cache is replaced only after the write succeeded.

Invariants:
- Every mutation requires an authenticated principal (Unauthorized)
- Validation and authorization fail before any remote call
- Store errors surface as TransportFailed and leave the cache untouched,
  except an update of a record deleted elsewhere: NotFound, and the stale
  entry is dropped from the cache
- Upload failures abort before any store write
- Orphaned media cleanup is queued only after the primary write succeeded;
  its failures are logged, never raised
- A category referenced by any cached article cannot be deleted
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Sequence
from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

from bloginno.components.integrity import articles_using, ensure_can_delete
from bloginno.components.media import DEFAULT_MEDIA_LIMITS, ProgressReporter, validate_media_file
from bloginno.components.reconcile import (
    CleanupQueue,
    find_orphans,
    orphans_from_urls,
    orphans_of_deleted,
)
from bloginno.core.ports.identity import IdentityProviderPort
from bloginno.core.ports.media import MediaStorePort, ProgressCallback
from bloginno.core.ports.store import (
    ARTICLES,
    CATEGORIES,
    BackingStorePort,
    DuplicateKeyError,
    RecordNotFoundError,
    StoreError,
)
from bloginno.core.ports.time import TimePort
from bloginno.domain.entities import (
    Article,
    ArticleDraft,
    Category,
    CategoryDraft,
    MediaFile,
    MediaKind,
    Principal,
    category_id_from_name,
)
from bloginno.domain.errors import (
    Conflict,
    NotFound,
    TransportFailed,
    Unauthorized,
    UploadFailed,
    ValidationFailed,
)
from bloginno.domain.icons import validate_icon
from bloginno.rules.models import MediaKindLimits

from .models import LoadResult, LoadSource, SeedData
from .seed import SEED_ARTICLES, SEED_CATEGORIES

logger = logging.getLogger(__name__)

T = TypeVar("T")
M = TypeVar("M", bound=BaseModel)

REQUIRED_ARTICLE_FIELDS = ("title", "summary", "content", "category", "date", "read_time")


def _validate_article_text(values: Article | ArticleDraft) -> None:
    for name in REQUIRED_ARTICLE_FIELDS:
        value = getattr(values, name)
        if not value or not value.strip():
            raise ValidationFailed(name)


def _parse_rows(model: type[M], rows: Sequence[dict[str, Any]], collection: str) -> tuple[list[M], int]:
    parsed: list[M] = []
    skipped = 0
    for row in rows:
        try:
            parsed.append(model.model_validate(row))
        except ValidationError as e:
            skipped += 1
            logger.warning(
                "Skipping malformed %s row %r (%d validation error(s))",
                collection,
                row.get("id"),
                e.error_count(),
            )
    return parsed, skipped


class ContentRepository:
    """
    Session-scoped article/category repository.

    Call load() once at session start. Read accessors return snapshots;
    mutations replace whole tuples so readers never observe a partial update.
    """

    def __init__(
        self,
        store: BackingStorePort,
        media: MediaStorePort,
        identity: IdentityProviderPort,
        *,
        time: TimePort,
        cleanup: CleanupQueue | None = None,
        media_limits: dict[str, MediaKindLimits] | None = None,
        seed: SeedData | None = None,
        validate_category_refs: bool = True,
        fallback_to_seed: bool = True,
    ) -> None:
        self._store = store
        self._media = media
        self._identity = identity
        self._time = time
        self._cleanup = cleanup or CleanupQueue(media)
        self._media_limits = media_limits or DEFAULT_MEDIA_LIMITS
        self._seed = seed if seed is not None else SeedData(SEED_ARTICLES, SEED_CATEGORIES)
        self._validate_category_refs = validate_category_refs
        self._fallback_to_seed = fallback_to_seed

        self._articles: tuple[Article, ...] = ()
        self._categories: tuple[Category, ...] = ()
        self._loaded_from: LoadSource | None = None
        self._pending_category_ids: set[str] = set()

    # --- Reads ---

    @property
    def articles(self) -> tuple[Article, ...]:
        return self._articles

    @property
    def categories(self) -> tuple[Category, ...]:
        return self._categories

    @property
    def loaded_from(self) -> LoadSource | None:
        return self._loaded_from

    @property
    def cleanup(self) -> CleanupQueue:
        return self._cleanup

    def get_article(self, article_id: int) -> Article | None:
        return next((a for a in self._articles if a.id == article_id), None)

    def get_category(self, category_id: str) -> Category | None:
        return next((c for c in self._categories if c.id == category_id), None)

    def articles_in_category(self, category_id: str) -> list[Article]:
        return articles_using(category_id, self._articles)

    def articles_by_category(self) -> dict[str, list[Article]]:
        """Articles grouped by category id, in category order; empty categories included."""
        grouped: dict[str, list[Article]] = {c.id: [] for c in self._categories}
        for article in self._articles:
            grouped.setdefault(article.category, []).append(article)
        return grouped

    # --- Load ---

    async def load(self) -> LoadResult:
        """
        Fill the cache from the backing store.

        Falls back to the seed dataset when the store is unreachable (unless
        disabled, in which case TransportFailed is raised).
        """
        try:
            article_rows = await self._store.list(ARTICLES, order_by="created_at", descending=True)
            category_rows = await self._store.list(CATEGORIES, order_by="created_at")
        except StoreError as e:
            if not self._fallback_to_seed:
                logger.error("Backing store unavailable during load: %s", e)
                raise TransportFailed("load", e) from e

            self._articles = tuple(self._seed.articles)
            self._categories = tuple(self._seed.categories)
            self._loaded_from = "seed"
            logger.warning(
                "Backing store unavailable during load (%s); serving seed dataset "
                "(%d articles, %d categories)",
                e,
                len(self._articles),
                len(self._categories),
            )
            return LoadResult(
                source="seed",
                article_count=len(self._articles),
                category_count=len(self._categories),
                error=str(e),
            )

        articles, skipped_articles = _parse_rows(Article, article_rows, ARTICLES)
        categories, skipped_categories = _parse_rows(Category, category_rows, CATEGORIES)

        self._articles = tuple(articles)
        self._categories = tuple(categories)
        self._loaded_from = "store"
        logger.info(
            "Loaded %d articles and %d categories from backing store",
            len(self._articles),
            len(self._categories),
        )
        return LoadResult(
            source="store",
            article_count=len(self._articles),
            category_count=len(self._categories),
            skipped_rows=skipped_articles + skipped_categories,
        )

    # --- Articles ---

    async def create_article(
        self,
        draft: ArticleDraft,
        *,
        on_progress: ProgressCallback | None = None,
    ) -> Article:
        principal = self._require_principal("create article")
        _validate_article_text(draft)
        if not (
            draft.image_url.strip()
            or draft.video_url.strip()
            or draft.pending_file("image") is not None
            or draft.pending_file("video") is not None
        ):
            raise ValidationFailed("media", "Either an image or video is required")
        self._check_category_ref(draft.category)
        files = self._pending_files(draft.pending_file("image"), draft.pending_file("video"))

        uploaded = await self._upload_files(files, on_progress, reason="failed article create")

        now = self._time.now_utc()
        # id is assigned by the store
        pending = Article(
            id=0,
            title=draft.title,
            summary=draft.summary,
            content=draft.content,
            date=draft.date,
            read_time=draft.read_time,
            category=draft.category,
            image_url=uploaded.get("image", draft.image_url),
            video_url=uploaded.get("video", draft.video_url),
            owner_id=principal.id,
            created_at=now,
            updated_at=now,
        )
        try:
            article_id = await self._store_call(
                "insert article",
                self._store.insert(ARTICLES, pending.model_dump(mode="json", exclude={"id"})),
            )
        except TransportFailed:
            self._discard_uploads(uploaded, reason="failed article insert")
            raise

        article = Article.model_validate({**pending.model_dump(), "id": article_id})
        self._articles = (article, *self._articles)
        logger.info("Created article %s '%s'", article.id, article.title)
        return article

    async def update_article(
        self,
        record: Article,
        *,
        image_file: MediaFile | None = None,
        video_file: MediaFile | None = None,
        on_progress: ProgressCallback | None = None,
    ) -> Article:
        principal = self._require_principal("update article")
        previous = self.get_article(record.id)
        if previous is None:
            raise NotFound("article", record.id)
        _validate_article_text(record)
        self._check_category_ref(record.category)
        files = self._pending_files(image_file, video_file)

        uploaded = await self._upload_files(files, on_progress, reason="failed article update")

        updated = record.model_copy(
            update={
                "image_url": uploaded.get("image", record.image_url),
                "video_url": uploaded.get("video", record.video_url),
                "owner_id": previous.owner_id or principal.id,
                "created_at": previous.created_at,
                "updated_at": self._time.now_utc(),
            }
        )
        orphans = find_orphans(previous, updated, self._media)

        try:
            await self._store_call(
                "update article",
                self._store.update(
                    ARTICLES, updated.id, updated.model_dump(mode="json", exclude={"id"})
                ),
                missing=("article", updated.id),
            )
        except NotFound:
            self._articles = tuple(a for a in self._articles if a.id != updated.id)
            self._discard_uploads(uploaded, reason="update of a deleted article")
            raise
        except TransportFailed:
            self._discard_uploads(uploaded, reason="failed article update")
            raise

        self._articles = tuple(updated if a.id == updated.id else a for a in self._articles)
        logger.info("Updated article %s '%s'", updated.id, updated.title)
        self._cleanup.schedule(orphans, reason=f"update of article {updated.id}")
        return updated

    async def delete_article(self, article_id: int) -> None:
        self._require_principal("delete article")
        previous = self.get_article(article_id)
        if previous is None:
            logger.debug("Article %s not cached; nothing to delete", article_id)
            return

        orphans = orphans_of_deleted(previous, self._media)
        await self._store_call("delete article", self._store.delete(ARTICLES, article_id))

        self._articles = tuple(a for a in self._articles if a.id != article_id)
        logger.info("Deleted article %s", article_id)
        self._cleanup.schedule(orphans, reason=f"deletion of article {article_id}")

    # --- Categories ---

    async def create_category(self, draft: CategoryDraft) -> Category:
        principal = self._require_principal("create category")
        name = draft.name.strip()
        if not name:
            raise ValidationFailed("name")
        validate_icon(draft.icon)

        category_id = category_id_from_name(name)
        self._claim_category_id(category_id)
        try:
            category = Category(
                id=category_id,
                name=name,
                icon=draft.icon,
                owner_id=principal.id,
                created_at=self._time.now_utc(),
            )
            try:
                await self._store.insert(CATEGORIES, category.model_dump(mode="json"))
            except DuplicateKeyError as e:
                logger.warning("Category id '%s' already exists in backing store", category_id)
                raise Conflict(
                    f"A category with id '{category_id}' already exists", target_id=category_id
                ) from e
            except StoreError as e:
                logger.error("Backing store insert category failed: %s", e)
                raise TransportFailed("insert category", e) from e

            self._categories = (*self._categories, category)
        finally:
            self._pending_category_ids.discard(category_id)

        logger.info("Created category '%s'", category_id)
        return category

    async def update_category(self, record: Category) -> Category:
        self._require_principal("update category")
        previous = self.get_category(record.id)
        if previous is None:
            raise NotFound("category", record.id)
        if not record.name.strip():
            raise ValidationFailed("name")
        validate_icon(record.icon)

        updated = record.model_copy(
            update={
                "name": record.name.strip(),
                "owner_id": previous.owner_id,
                "created_at": previous.created_at,
            }
        )
        try:
            await self._store_call(
                "update category",
                self._store.update(
                    CATEGORIES, updated.id, updated.model_dump(mode="json", exclude={"id"})
                ),
                missing=("category", updated.id),
            )
        except NotFound:
            self._categories = tuple(c for c in self._categories if c.id != updated.id)
            raise

        self._categories = tuple(updated if c.id == updated.id else c for c in self._categories)
        logger.info("Updated category '%s'", updated.id)
        return updated

    async def delete_category(self, category_id: str) -> None:
        self._require_principal("delete category")
        ensure_can_delete(category_id, self._articles)
        if self.get_category(category_id) is None:
            logger.debug("Category '%s' not cached; nothing to delete", category_id)
            return

        await self._store_call("delete category", self._store.delete(CATEGORIES, category_id))

        self._categories = tuple(c for c in self._categories if c.id != category_id)
        logger.info("Deleted category '%s'", category_id)

    # --- Internals ---

    def _require_principal(self, operation: str) -> Principal:
        principal = self._identity.current_principal()
        if principal is None:
            logger.warning("Rejected %s: not signed in", operation)
            raise Unauthorized(operation)
        return principal

    def _check_category_ref(self, category_id: str) -> None:
        if self._validate_category_refs and self.get_category(category_id) is None:
            raise ValidationFailed("category", f"Unknown category '{category_id}'")

    def _claim_category_id(self, category_id: str) -> None:
        if self.get_category(category_id) is not None or category_id in self._pending_category_ids:
            raise Conflict(
                f"A category with id '{category_id}' already exists", target_id=category_id
            )
        self._pending_category_ids.add(category_id)

    def _pending_files(
        self, image_file: MediaFile | None, video_file: MediaFile | None
    ) -> dict[MediaKind, MediaFile]:
        files: dict[MediaKind, MediaFile] = {}
        if image_file is not None:
            validate_media_file(image_file, "image", self._media_limits)
            files["image"] = image_file
        if video_file is not None:
            validate_media_file(video_file, "video", self._media_limits)
            files["video"] = video_file
        return files

    async def _upload_files(
        self,
        files: dict[MediaKind, MediaFile],
        on_progress: ProgressCallback | None,
        *,
        reason: str,
    ) -> dict[MediaKind, str]:
        """Upload image then video; each gets its share of one progress range."""
        if not files:
            return {}

        phases = ProgressReporter(on_progress).phases(len(files))
        uploaded: dict[MediaKind, str] = {}
        try:
            for (slot, file), phase in zip(files.items(), phases):
                uploaded[slot] = await self._media.upload(file, slot, on_progress=phase)
        except UploadFailed:
            self._discard_uploads(uploaded, reason=reason)
            raise
        return uploaded

    def _discard_uploads(self, uploaded: dict[MediaKind, str], *, reason: str) -> None:
        self._cleanup.schedule(orphans_from_urls(uploaded, self._media), reason=reason)

    async def _store_call(
        self,
        operation: str,
        call: Awaitable[T],
        *,
        missing: tuple[str, Any] | None = None,
    ) -> T:
        """Await a store call; a vanished record becomes NotFound when `missing` names it."""
        try:
            return await call
        except RecordNotFoundError as e:
            if missing is None:
                logger.error("Backing store %s failed: %s", operation, e)
                raise TransportFailed(operation, e) from e
            entity, entity_id = missing
            logger.warning(
                "%s %r no longer exists in backing store; dropped from cache", entity, entity_id
            )
            raise NotFound(entity, entity_id) from e
        except StoreError as e:
            logger.error("Backing store %s failed: %s", operation, e)
            raise TransportFailed(operation, e) from e
