import re
from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

# --- Enums / Literals ---
MediaKind = Literal["image", "video"]
MEDIA_KINDS: tuple[MediaKind, ...] = ("image", "video")

DEFAULT_ICON = "Tag"


def category_id_from_name(name: str) -> str:
    """Derive a category id: trimmed, lower-cased, whitespace runs become '-'."""
    return re.sub(r"\s+", "-", name.strip().lower())


# --- Identity ---

class Principal(BaseModel):
    id: str
    email: str | None = None

# --- Media ---

class MediaFile(BaseModel):
    """A local payload waiting to be uploaded to the media store."""

    model_config = ConfigDict(frozen=True)

    filename: str
    content_type: str
    data: bytes

    @property
    def size_bytes(self) -> int:
        return len(self.data)

# --- Articles ---

class Article(BaseModel):
    id: int
    title: str
    summary: str
    content: str
    date: str
    read_time: str
    category: str
    image_url: str = ""
    video_url: str = ""
    owner_id: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def media_url(self, slot: MediaKind) -> str:
        return self.image_url if slot == "image" else self.video_url

class ArticleDraft(BaseModel):
    """Creation payload: an Article without id, plus optional pending uploads."""

    title: str = ""
    summary: str = ""
    content: str = ""
    date: str = ""
    read_time: str = ""
    category: str = ""
    image_url: str = ""
    video_url: str = ""
    image_file: MediaFile | None = None
    video_file: MediaFile | None = None

    def pending_file(self, slot: MediaKind) -> MediaFile | None:
        return self.image_file if slot == "image" else self.video_file

# --- Categories ---

class Category(BaseModel):
    id: str
    name: str
    icon: str = DEFAULT_ICON
    owner_id: str | None = None
    created_at: datetime | None = None

class CategoryDraft(BaseModel):
    name: str
    icon: str = Field(default=DEFAULT_ICON)
