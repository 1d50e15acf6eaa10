"""
Reconcile component - orphaned media detection and cleanup.

An article's hosted image/video URL is the only live reference to that
stored object. When the reference changes, or the article is deleted, the
previous object is orphaned and should be removed from the media store.

Cleanup is a secondary step: it is queued only after the primary mutation
has been committed and its failures are logged, never propagated. A failed
cleanup can never roll back a successful update or delete.

Rules:
- Slots (image, video) are reconciled independently
- A slot is orphaned iff the previous URL is non-empty, hosted by the media
  store, and differs from the new URL
- On delete, every hosted slot is orphaned
- URLs whose object id cannot be derived are dropped (nothing to delete)
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping, Sequence

from bloginno.core.ports.media import MediaStorePort, RemovalStatus
from bloginno.domain.entities import MEDIA_KINDS, Article, MediaKind

from .models import CleanupResult, OrphanedMedia

logger = logging.getLogger(__name__)


def _orphan(slot: MediaKind, url: str, media: MediaStorePort) -> OrphanedMedia | None:
    if not url or not media.is_hosted(url):
        return None
    object_id = media.derive_object_id(url)
    if not object_id:
        logger.debug("Hosted %s URL %s has no derivable object id", slot, url)
        return None
    return OrphanedMedia(slot=slot, url=url, object_id=object_id)


def find_orphans(
    previous: Article,
    new: Article,
    media: MediaStorePort,
) -> list[OrphanedMedia]:
    """Media objects referenced by `previous` but no longer by `new`."""
    orphans: list[OrphanedMedia] = []
    for slot in MEDIA_KINDS:
        old_url = previous.media_url(slot)
        if old_url == new.media_url(slot):
            continue
        orphan = _orphan(slot, old_url, media)
        if orphan:
            orphans.append(orphan)
    return orphans


def orphans_from_urls(
    urls: Mapping[MediaKind, str],
    media: MediaStorePort,
) -> list[OrphanedMedia]:
    """Hosted objects among the given slot -> URL pairs."""
    orphans: list[OrphanedMedia] = []
    for slot, url in urls.items():
        orphan = _orphan(slot, url, media)
        if orphan:
            orphans.append(orphan)
    return orphans


def orphans_of_deleted(record: Article, media: MediaStorePort) -> list[OrphanedMedia]:
    """Every hosted media object of a deleted article."""
    return orphans_from_urls({slot: record.media_url(slot) for slot in MEDIA_KINDS}, media)


class CleanupQueue:
    """
    Runs orphan deletions as background tasks.

    FAILED removals are retried up to max_attempts; SKIPPED removals (no
    signer) are not retried. Nothing raised here reaches the caller of the
    mutation that scheduled the work.
    """

    def __init__(
        self,
        media: MediaStorePort,
        *,
        max_attempts: int = 3,
        retry_delay_seconds: float = 1.0,
    ) -> None:
        self._media = media
        self._max_attempts = max(1, max_attempts)
        self._retry_delay_seconds = retry_delay_seconds
        self._tasks: set[asyncio.Task[list[CleanupResult]]] = set()
        self._results: list[CleanupResult] = []

    @property
    def pending(self) -> int:
        return len(self._tasks)

    def schedule(
        self,
        orphans: Sequence[OrphanedMedia],
        *,
        reason: str,
    ) -> asyncio.Task[list[CleanupResult]] | None:
        """Start deleting orphans in the background. Must run inside an event loop."""
        if not orphans:
            return None

        logger.info(
            "Queued cleanup of %d orphaned media object(s) after %s", len(orphans), reason
        )
        task = asyncio.get_running_loop().create_task(self._run_batch(list(orphans)))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def drain(self) -> list[CleanupResult]:
        """Wait for all queued cleanup and return results gathered since the last drain."""
        while self._tasks:
            batch = list(self._tasks)
            await asyncio.gather(*batch)
            self._tasks.difference_update(batch)

        results, self._results = self._results, []
        return results

    async def _run_batch(self, orphans: list[OrphanedMedia]) -> list[CleanupResult]:
        results = [await self._remove(orphan) for orphan in orphans]
        self._results.extend(results)
        return results

    async def _remove(self, orphan: OrphanedMedia) -> CleanupResult:
        status = RemovalStatus.FAILED
        error: str | None = None
        attempts = 0

        while attempts < self._max_attempts:
            attempts += 1
            try:
                status = await self._media.remove(orphan.object_id, orphan.slot)
                error = None
            except Exception as e:
                status, error = RemovalStatus.FAILED, str(e)
                logger.warning(
                    "Removing orphaned %s '%s' raised (attempt %d): %s",
                    orphan.slot,
                    orphan.object_id,
                    attempts,
                    e,
                )

            if status is not RemovalStatus.FAILED:
                break
            if attempts < self._max_attempts:
                await asyncio.sleep(self._retry_delay_seconds)

        if status is RemovalStatus.DELETED:
            logger.info("Removed orphaned %s '%s'", orphan.slot, orphan.object_id)
        elif status is RemovalStatus.SKIPPED:
            logger.warning(
                "Orphaned %s '%s' was not removed (deletion skipped)",
                orphan.slot,
                orphan.object_id,
            )
        else:
            logger.error(
                "Giving up on orphaned %s '%s' after %d attempt(s)",
                orphan.slot,
                orphan.object_id,
                attempts,
            )

        return CleanupResult(orphan=orphan, status=status, attempts=attempts, error=error)
