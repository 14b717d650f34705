from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from sitemeta.config import Settings

METADATA_FIELDS = ("title", "description", "icon", "favicon", "site_name", "og_image")


class ResolutionPolicy(str, Enum):
    API_FIRST = "api"
    CLIENT_FIRST = "client"
    AUTO = "auto"


class SiteMetadata(BaseModel):
    """Partial metadata as produced by one strategy or the known-site table."""

    title: Optional[str] = None
    description: Optional[str] = None
    icon: Optional[str] = None
    favicon: Optional[str] = None
    site_name: Optional[str] = Field(default=None, alias="siteName")
    og_image: Optional[str] = Field(default=None, alias="ogImage")

    model_config = ConfigDict(populate_by_name=True)

    @field_validator(*METADATA_FIELDS, mode="before")
    @classmethod
    def blank_to_none(cls, value):
        # Absent means unknown; never keep an empty-string placeholder
        if isinstance(value, str):
            value = value.strip()
            return value or None
        return value

    def fields(self) -> dict:
        return {name: getattr(self, name) for name in METADATA_FIELDS}

    def is_empty(self) -> bool:
        return not any(self.fields().values())

    def to_payload(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)


class MetadataRecord(SiteMetadata):
    url: str
    error: Optional[str] = None


class ResolutionOptions(BaseModel):
    timeout_ms: int = Field(default=8000, gt=0)
    cache_ttl_ms: int = Field(default=30 * 60 * 1000, ge=0)
    failure_cache_ttl_ms: int = Field(default=5 * 60 * 1000, ge=0)
    policy: ResolutionPolicy = ResolutionPolicy.AUTO
    fallback_icon: str = Field(default="🌐", min_length=1)
    retry_budget: int = Field(default=1, ge=0)
    force_refresh: bool = False
    known_site_shortcut: bool = True

    @classmethod
    def from_settings(cls, settings: Settings) -> "ResolutionOptions":
        return cls(
            timeout_ms=settings.timeout_ms,
            cache_ttl_ms=settings.cache_ttl_ms,
            failure_cache_ttl_ms=settings.failure_cache_ttl_ms,
            policy=ResolutionPolicy(settings.default_policy),
            fallback_icon=settings.fallback_icon,
            retry_budget=settings.retry_budget,
            known_site_shortcut=settings.known_site_shortcut,
        )

    def with_overrides(self, **overrides) -> "ResolutionOptions":
        """Return a validated copy with every non-None override applied."""
        data = self.model_dump()
        data.update({key: value for key, value in overrides.items() if value is not None})
        return ResolutionOptions(**data)


class ParseWebsiteRequest(BaseModel):
    url: Optional[str] = None
    timeout: Optional[int] = None


class FetchMetadataRequest(BaseModel):
    url: str
    policy: Optional[ResolutionPolicy] = None
    force_refresh: bool = False
    timeout_ms: Optional[int] = Field(default=None, gt=0)


class BatchFetchRequest(BaseModel):
    urls: List[str]
    policy: Optional[ResolutionPolicy] = None
    force_refresh: bool = False
