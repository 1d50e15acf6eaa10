from typing import Literal

from pydantic import BaseModel, Field


class ProjectRules(BaseModel):
    slug: str
    rules_version: str

class MediaKindLimits(BaseModel):
    mime_prefix: str
    max_upload_bytes: int

class DeliveryRules(BaseModel):
    image_width: int = 800

class MediaRules(BaseModel):
    api_base: str = "https://api.cloudinary.com"
    delivery_host: str = "res.cloudinary.com"
    cloud_name: str
    upload_preset: str
    upload_timeout_seconds: float = 120.0
    chunk_size_bytes: int = 64 * 1024
    limits: dict[str, MediaKindLimits]
    delivery: DeliveryRules = Field(default_factory=DeliveryRules)

class CleanupRules(BaseModel):
    max_attempts: int = 3
    retry_delay_seconds: float = 1.0

class ContentRules(BaseModel):
    validate_category_refs: bool = True
    seed_on_store_failure: bool = True

class StoreRules(BaseModel):
    backend: Literal["memory", "sqlite"] = "memory"
    sqlite_path: str = "./data/bloginno.db"

class IdentityRules(BaseModel):
    mode: Literal["fixed", "delegated"] = "fixed"
    admin_id: str = "1"
    admin_email: str
    session_ttl_minutes: int = 24 * 60

class LoggingRules(BaseModel):
    level: str = "INFO"

class OpsRules(BaseModel):
    required_env: list[str] = Field(default_factory=list)

class Rules(BaseModel):
    project: ProjectRules
    media: MediaRules
    cleanup: CleanupRules = Field(default_factory=CleanupRules)
    content: ContentRules = Field(default_factory=ContentRules)
    store: StoreRules = Field(default_factory=StoreRules)
    identity: IdentityRules
    logging: LoggingRules = Field(default_factory=LoggingRules)
    ops: OpsRules = Field(default_factory=OpsRules)
