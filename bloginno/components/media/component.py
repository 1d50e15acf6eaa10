"""
Media component - Upload to and deletion from the hosted media store.

Talks to a Cloudinary-style HTTP API:
- POST {api_base}/v1_1/{cloud}/auto/upload    multipart: file + upload_preset
- POST {api_base}/v1_1/{cloud}/{kind}/destroy form: public_id, timestamp,
                                              api_key, signature

Delivery URLs look like
    https://res.cloudinary.com/{cloud}/image/upload/v1712345678/folder/name.jpg
and the object id ("public id") is the path after the version segment,
without the extension: "folder/name".

Invariants:
- upload() returns a non-empty secure URL or raises UploadFailed
- remove() never raises; unsigned removals are SKIPPED, not DELETED
- derive_object_id() never raises; non-matching URLs yield ""
"""

from __future__ import annotations

import asyncio
import logging
import re
from collections.abc import AsyncIterator
from datetime import UTC, datetime
from functools import lru_cache
from urllib.parse import urlparse

import aiohttp

from bloginno.core.ports.media import DeletionSignerPort, ProgressCallback, RemovalStatus
from bloginno.core.ports.time import TimePort
from bloginno.domain.entities import MediaFile, MediaKind
from bloginno.domain.errors import UploadFailed, ValidationFailed
from bloginno.rules.models import MediaKindLimits, MediaRules

logger = logging.getLogger(__name__)

UPLOAD_SEGMENT = "upload"
_VERSION_SEGMENT = re.compile(r"^v\d+$")

DEFAULT_MEDIA_LIMITS: dict[str, MediaKindLimits] = {
    "image": MediaKindLimits(mime_prefix="image/", max_upload_bytes=10 * 1024 * 1024),
    "video": MediaKindLimits(mime_prefix="video/", max_upload_bytes=100 * 1024 * 1024),
}


# --- URL Helpers ---


def is_hosted_url(url: str, delivery_host: str) -> bool:
    """True if the URL is served from the media store's delivery host."""
    if not url:
        return False
    try:
        host = urlparse(url).hostname or ""
    except ValueError:
        return False
    return host == delivery_host or host.endswith("." + delivery_host)


def derive_object_id(url: str) -> str:
    """
    Extract the object id from a delivery URL.

    Strips everything up to and including the "upload" segment, any
    transformation segments before the version marker, the version marker
    itself, and the file extension. Returns "" when the URL has no upload
    segment or nothing follows it.
    """
    try:
        path = urlparse(url).path
    except ValueError:
        return ""

    parts = [p for p in path.split("/") if p]
    if UPLOAD_SEGMENT not in parts:
        return ""

    rest = parts[parts.index(UPLOAD_SEGMENT) + 1 :]
    for i, part in enumerate(rest):
        if _VERSION_SEGMENT.match(part):
            rest = rest[i + 1 :]
            break
    if not rest:
        return ""

    stem, dot, _ext = rest[-1].rpartition(".")
    if dot:
        rest[-1] = stem
    if not rest[-1]:
        return ""
    return "/".join(rest)


@lru_cache(maxsize=512)
def build_image_url(url: str, width: int = 800, delivery_host: str = "res.cloudinary.com") -> str:
    """Add resize + auto quality/format transformations to a hosted image URL."""
    if not is_hosted_url(url, delivery_host):
        return url
    return url.replace("/upload/", f"/upload/w_{width},q_auto,f_auto/", 1)


def build_video_url(url: str, delivery_host: str = "res.cloudinary.com") -> str:
    """Add auto quality to a hosted video URL."""
    if not is_hosted_url(url, delivery_host):
        return url
    return url.replace("/upload/", "/upload/q_auto/", 1)


# --- Validation ---


def validate_media_file(
    file: MediaFile,
    media_kind: MediaKind,
    limits: dict[str, MediaKindLimits],
) -> None:
    """Reject a pending file whose type or size does not fit its slot."""
    field = f"{media_kind}_file"
    kind_limits = limits.get(media_kind)
    if kind_limits is None:
        raise ValidationFailed(field, f"Uploads of {media_kind} files are not configured")

    if not file.data:
        raise ValidationFailed(field, "File is empty")

    if not file.content_type.startswith(kind_limits.mime_prefix):
        article = "an" if media_kind[0] in "aeiou" else "a"
        raise ValidationFailed(field, f"Please upload {article} {media_kind} file")

    if file.size_bytes > kind_limits.max_upload_bytes:
        max_mb = kind_limits.max_upload_bytes / (1024 * 1024)
        raise ValidationFailed(field, f"File size exceeds {max_mb:g}MB limit")


# --- Client ---


class MediaStoreClient:
    """
    HTTP client for the hosted media store.

    Implements MediaStorePort. A session is opened per request; the client
    holds configuration only.
    """

    def __init__(
        self,
        rules: MediaRules,
        *,
        signer: DeletionSignerPort | None = None,
        clock: TimePort | None = None,
    ) -> None:
        self._rules = rules
        self._signer = signer
        self._clock = clock

    @property
    def upload_endpoint(self) -> str:
        return f"{self._rules.api_base.rstrip('/')}/v1_1/{self._rules.cloud_name}/auto/upload"

    def destroy_endpoint(self, media_kind: MediaKind) -> str:
        return (
            f"{self._rules.api_base.rstrip('/')}/v1_1/{self._rules.cloud_name}"
            f"/{media_kind}/destroy"
        )

    def is_hosted(self, url: str) -> bool:
        return is_hosted_url(url, self._rules.delivery_host)

    def derive_object_id(self, url: str) -> str:
        if not self.is_hosted(url):
            return ""
        return derive_object_id(url)

    def image_url(self, url: str, width: int | None = None) -> str:
        return build_image_url(
            url, width or self._rules.delivery.image_width, self._rules.delivery_host
        )

    def video_url(self, url: str) -> str:
        return build_video_url(url, self._rules.delivery_host)

    def _timeout(self) -> aiohttp.ClientTimeout:
        return aiohttp.ClientTimeout(total=self._rules.upload_timeout_seconds)

    def _now(self) -> datetime:
        return self._clock.now_utc() if self._clock else datetime.now(UTC)

    async def _stream(self, data: bytes, report: ProgressCallback) -> AsyncIterator[bytes]:
        """Yield the payload in chunks, reporting progress as each is consumed."""
        total = len(data)
        chunk_size = self._rules.chunk_size_bytes
        report(0.0)
        for offset in range(0, total, chunk_size):
            piece = data[offset : offset + chunk_size]
            yield piece
            report((offset + len(piece)) * 100.0 / total)

    async def upload(
        self,
        file: MediaFile,
        media_kind: MediaKind,
        *,
        on_progress: ProgressCallback | None = None,
    ) -> str:
        """
        Upload a payload and return its secure URL.

        Raises:
            UploadFailed: On transport error, timeout, HTTP error status,
                          unparseable body, or a body without secure_url
        """
        report: ProgressCallback = on_progress or (lambda _pct: None)

        form = aiohttp.FormData()
        form.add_field("upload_preset", self._rules.upload_preset)
        form.add_field(
            "file",
            self._stream(file.data, report),
            filename=file.filename,
            content_type=file.content_type,
        )

        logger.info(
            "Uploading %s '%s' (%d bytes) to media store",
            media_kind,
            file.filename,
            file.size_bytes,
        )
        try:
            async with aiohttp.ClientSession() as session:
                async with session.post(
                    self.upload_endpoint, data=form, timeout=self._timeout()
                ) as response:
                    if response.status >= 400:
                        detail = await response.text()
                        logger.warning(
                            "Media store rejected %s upload: HTTP %d", media_kind, response.status
                        )
                        raise UploadFailed(media_kind, f"HTTP {response.status}: {detail[:200]}")
                    payload = await response.json(content_type=None)
        except asyncio.TimeoutError as e:
            logger.warning(
                "Media store %s upload timed out after %.0fs",
                media_kind,
                self._rules.upload_timeout_seconds,
            )
            raise UploadFailed(media_kind, "upload timed out") from e
        except (aiohttp.ClientError, ValueError) as e:
            logger.warning("Media store %s upload failed: %s", media_kind, e)
            raise UploadFailed(media_kind, str(e) or type(e).__name__) from e

        url = payload.get("secure_url") if isinstance(payload, dict) else None
        if not isinstance(url, str) or not url:
            raise UploadFailed(media_kind, "response did not include a secure_url")

        report(100.0)
        logger.info("Uploaded %s '%s' to %s", media_kind, file.filename, url)
        return url

    async def remove(self, object_id: str, media_kind: MediaKind) -> RemovalStatus:
        """Delete a stored object. Never raises."""
        if not object_id:
            logger.debug("No object id to remove for %s", media_kind)
            return RemovalStatus.SKIPPED

        if self._signer is None:
            logger.warning(
                "Media store deletion of %s '%s' SKIPPED: no deletion signer configured, "
                "the object is still stored",
                media_kind,
                object_id,
            )
            return RemovalStatus.SKIPPED

        params = self._signer.sign(
            {"public_id": object_id, "timestamp": str(int(self._now().timestamp()))}
        )
        try:
            async with aiohttp.ClientSession() as session:
                async with session.post(
                    self.destroy_endpoint(media_kind), data=params, timeout=self._timeout()
                ) as response:
                    status = response.status
                    payload = await response.json(content_type=None)
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
            logger.warning("Media store deletion of %s '%s' failed: %s", media_kind, object_id, e)
            return RemovalStatus.FAILED

        result = payload.get("result") if isinstance(payload, dict) else None
        if status < 400 and result in ("ok", "not found"):
            logger.info("Deleted %s '%s' from media store (%s)", media_kind, object_id, result)
            return RemovalStatus.DELETED

        logger.warning(
            "Media store refused deletion of %s '%s': HTTP %d %r",
            media_kind,
            object_id,
            status,
            result,
        )
        return RemovalStatus.FAILED
