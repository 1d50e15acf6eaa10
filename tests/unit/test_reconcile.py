import pytest

from bloginno.components.reconcile import (
    CleanupQueue,
    OrphanedMedia,
    find_orphans,
    orphans_from_urls,
    orphans_of_deleted,
)
from bloginno.core.ports.media import RemovalStatus
from bloginno.domain.entities import Article

OLD_IMAGE = "https://res.cloudinary.com/demo/image/upload/v1/bloginno/old.jpg"
NEW_IMAGE = "https://res.cloudinary.com/demo/image/upload/v2/bloginno/new.jpg"
VIDEO = "https://res.cloudinary.com/demo/video/upload/v1/bloginno/clip.mp4"


def make_article(**overrides):
    fields = dict(
        id=1, title="t", summary="s", content="c", date="d", read_time="r",
        category="innovation", image_url=OLD_IMAGE, video_url=VIDEO,
    )
    fields.update(overrides)
    return Article(**fields)


def test_changed_image_is_the_only_orphan(media):
    previous = make_article()
    new = make_article(image_url=NEW_IMAGE)

    assert find_orphans(previous, new, media) == [
        OrphanedMedia(slot="image", url=OLD_IMAGE, object_id="bloginno/old")
    ]


def test_unchanged_record_has_no_orphans(media):
    assert find_orphans(make_article(), make_article(), media) == []


def test_cleared_video_is_orphaned(media):
    orphans = find_orphans(make_article(), make_article(video_url=""), media)
    assert [(o.slot, o.object_id) for o in orphans] == [("video", "bloginno/clip")]


def test_external_urls_are_never_orphans(media):
    previous = make_article(image_url="https://images.unsplash.com/a.jpg")
    assert find_orphans(previous, make_article(image_url=NEW_IMAGE), media) == []


def test_deleted_article_orphans_every_hosted_slot(media):
    orphans = orphans_of_deleted(make_article(), media)
    assert [o.slot for o in orphans] == ["image", "video"]


def test_orphans_from_urls_skips_empty_and_external(media):
    orphans = orphans_from_urls({"image": "", "video": "https://example.com/v.mp4"}, media)
    assert orphans == []


@pytest.mark.asyncio
async def test_schedule_with_nothing_to_do(media):
    queue = CleanupQueue(media)
    assert queue.schedule([], reason="noop") is None
    assert await queue.drain() == []


@pytest.mark.asyncio
async def test_queue_removes_orphans(media):
    queue = CleanupQueue(media, retry_delay_seconds=0)

    queue.schedule(orphans_of_deleted(make_article(), media), reason="test")
    assert queue.pending == 1
    results = await queue.drain()

    assert queue.pending == 0
    assert all(r.deleted for r in results)
    assert media.removals == [("bloginno/old", "image"), ("bloginno/clip", "video")]


@pytest.mark.asyncio
async def test_skipped_removal_is_not_retried(media):
    media.removal_status = RemovalStatus.SKIPPED
    queue = CleanupQueue(media, max_attempts=3, retry_delay_seconds=0)

    queue.schedule(orphans_from_urls({"image": OLD_IMAGE}, media), reason="test")
    (result,) = await queue.drain()

    assert result.status is RemovalStatus.SKIPPED
    assert result.attempts == 1
    assert not result.deleted


@pytest.mark.asyncio
async def test_exceptions_are_retried_and_swallowed(media):
    class ExplodingMedia(type(media)):
        async def remove(self, object_id, media_kind):
            self.removals.append((object_id, media_kind))
            raise RuntimeError("network down")

    exploding = ExplodingMedia()
    queue = CleanupQueue(exploding, max_attempts=2, retry_delay_seconds=0)

    queue.schedule(orphans_from_urls({"image": OLD_IMAGE}, exploding), reason="test")
    (result,) = await queue.drain()

    assert result.status is RemovalStatus.FAILED
    assert result.attempts == 2
    assert result.error == "network down"
    assert len(exploding.removals) == 2
