"""Application configuration for the blog media service.

Every value is read once at startup into a frozen :class:`AppConfig`
snapshot which is then handed to the services; nothing mutates it at
request time. Environment variables use the ``BLOGMEDIA_`` prefix and
``__`` for nested sections, e.g. ``BLOGMEDIA_WATERMARK__IS_ENABLED=false``.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

SMALL_IMAGE_PIXELS_THRESHOLD = 1920 * 1080

STATIC_ROOT = Path(__file__).resolve().parent / "static"


def _default_storage_root() -> Path:
    return Path("./var/uploads")


class CdnSettings(BaseModel):
    """Serve images by redirecting to a CDN instead of reading storage."""

    model_config = ConfigDict(frozen=True)

    get_image_by_cdn_redirect: bool = False
    cdn_endpoint: str = ""

    @model_validator(mode="after")
    def _require_endpoint(self) -> "CdnSettings":
        if self.get_image_by_cdn_redirect and not self.cdn_endpoint.strip():
            raise ValueError("cdn_endpoint is required when CDN redirect is enabled")
        return self


class WatermarkSettings(BaseModel):
    model_config = ConfigDict(frozen=True)

    is_enabled: bool = True
    keep_origin_image: bool = False
    font_size: int = Field(default=20, ge=1)
    watermark_text: str = "Blog"


class ContentSettings(BaseModel):
    """Blog content flags; only ``use_friendly_not_found_image`` is read here."""

    model_config = ConfigDict(frozen=True)

    disharmony_words: str = ""
    enable_comments: bool = True
    enable_word_filter: bool = False
    use_friendly_not_found_image: bool = True
    post_list_page_size: int = Field(default=10, ge=1)
    hot_tag_amount: int = Field(default=10, ge=0)

    @property
    def disharmony_word_list(self) -> list[str]:
        """Return ``disharmony_words`` split on ``|`` without blanks."""
        return [word.strip() for word in self.disharmony_words.split("|") if word.strip()]


class CaptchaSettings(BaseModel):
    model_config = ConfigDict(frozen=True)

    image_width: int = Field(default=100, ge=20)
    image_height: int = Field(default=36, ge=10)
    code_length: int = Field(default=4, ge=1, le=12)


class BlogOwnerSettings(BaseModel):
    model_config = ConfigDict(frozen=True)

    avatar_base64: str = ""


class StorageSettings(BaseModel):
    model_config = ConfigDict(frozen=True)

    root: Path = Field(default_factory=_default_storage_root)


class AppConfig(BaseSettings):
    """Pydantic settings container for the whole service."""

    model_config = SettingsConfigDict(
        env_prefix="BLOGMEDIA_",
        env_nested_delimiter="__",
        frozen=True,
    )

    cdn: CdnSettings = Field(default_factory=CdnSettings)
    watermark: WatermarkSettings = Field(default_factory=WatermarkSettings)
    content: ContentSettings = Field(default_factory=ContentSettings)
    captcha: CaptchaSettings = Field(default_factory=CaptchaSettings)
    blog_owner: BlogOwnerSettings = Field(default_factory=BlogOwnerSettings)
    storage: StorageSettings = Field(default_factory=StorageSettings)

    image_cache_sliding_expiration_minutes: int = Field(
        default=60,
        ge=1,
        description="Idle minutes before a cached image is fetched from storage again.",
    )
    small_image_pixels_threshold: int = Field(
        default=SMALL_IMAGE_PIXELS_THRESHOLD,
        ge=0,
        description="Images with fewer pixels (width * height) are not watermarked.",
    )
    jwt_signing_key: str = Field(
        default="",
        description="HS256 key used to sign admin access tokens; required.",
    )
    jwt_ttl_hours: int = Field(default=24, ge=1)
    admin_username: str = Field(default="admin", min_length=1)
    admin_password_hash: str = Field(
        default="",
        description="sha256 hex digest of the admin password; empty disables login.",
    )
    session_secret: str = Field(
        default="",
        description="Secret used to sign the session cookie holding captcha codes; required.",
    )


def load_config() -> AppConfig:
    """Load configuration from the environment."""
    return AppConfig()


__all__ = [
    "AppConfig",
    "BlogOwnerSettings",
    "CaptchaSettings",
    "CdnSettings",
    "ContentSettings",
    "StorageSettings",
    "WatermarkSettings",
    "load_config",
]
