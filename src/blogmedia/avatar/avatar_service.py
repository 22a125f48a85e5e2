"""Serve the blog owner's avatar from configuration or a placeholder."""

from __future__ import annotations

import base64
import binascii
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import structlog

from ..cache.memory_cache import MemoryCache
from ..config import STATIC_ROOT, BlogOwnerSettings

logger = structlog.get_logger(__name__)

# ":" never survives the upload filename check, so this key cannot clash with an image.
AVATAR_CACHE_KEY = "static:avatar"
AVATAR_PLACEHOLDER = STATIC_ROOT / "images" / "avatar-placeholder.png"


@dataclass(slots=True, frozen=True)
class AvatarImage:
    """Either decoded ``content`` or a static file ``path``."""

    content: bytes | None = None
    path: Path | None = None
    media_type: str = "image/png"


@dataclass(slots=True)
class AvatarService:
    settings: BlogOwnerSettings
    cache: MemoryCache
    placeholder: Path = AVATAR_PLACEHOLDER
    log: Any = field(default_factory=lambda: logger)

    def get_avatar(self) -> AvatarImage:
        # line-wrapped payloads are accepted; whitespace is not part of the alphabet
        encoded = "".join(self.settings.avatar_base64.split())
        if not encoded:
            return AvatarImage(path=self.placeholder)

        def decode() -> bytes:
            self.log.debug("avatar.cache_miss")
            return base64.b64decode(encoded, validate=True)

        try:
            # no expiration: the avatar only changes with configuration
            content = self.cache.get_or_create(AVATAR_CACHE_KEY, decode)
        except (binascii.Error, ValueError):
            self.log.error("avatar.invalid_base64", exc_info=True)
            return AvatarImage(path=self.placeholder)
        return AvatarImage(content=content)


__all__ = ["AVATAR_CACHE_KEY", "AvatarImage", "AvatarService"]
