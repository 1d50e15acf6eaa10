"""
Media component - hosted media upload, deletion and URL helpers.
"""

from .component import (
    DEFAULT_MEDIA_LIMITS,
    MediaStoreClient,
    build_image_url,
    build_video_url,
    derive_object_id,
    is_hosted_url,
    validate_media_file,
)
from .progress import ProgressReporter

__all__ = [
    "DEFAULT_MEDIA_LIMITS",
    "MediaStoreClient",
    "ProgressReporter",
    "build_image_url",
    "build_video_url",
    "derive_object_id",
    "is_hosted_url",
    "validate_media_file",
]
