"""Domain service serving and accepting uploaded images."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import timedelta
from pathlib import Path
from typing import Any, Protocol

import structlog

from ..cache.memory_cache import MemoryCache
from ..config import STATIC_ROOT, AppConfig
from ..storage.storage_base import ImageStorageProvider, StorageResult, guess_image_mime
from .filenames import GuidFileNameGenerator, split_upload_name
from .images_models import (
    ALLOWED_IMAGE_EXTENSIONS,
    UNWATERMARKED_EXTENSIONS,
    ImageFailure,
    RetrievalResult,
    UploadResult,
)
from .watermark import WatermarkPosition

logger = structlog.get_logger(__name__)

NOT_FOUND_IMAGE = STATIC_ROOT / "images" / "image-not-found.png"

WATERMARK_COLOR = (128, 128, 128, 128)
WATERMARK_MARGIN = 15

_RESERVED_FILENAME_CHARS = frozenset('<>:"/\\|?*') | frozenset(chr(code) for code in range(32))


def has_invalid_filename_chars(filename: str) -> bool:
    return any(char in _RESERVED_FILENAME_CHARS for char in filename)


def combine_url(base: str, path: str) -> str:
    """Join ``base`` and ``path`` with exactly one slash."""
    return f"{base.rstrip('/')}/{path.lstrip('/')}"


class Watermarker(Protocol):
    def add_watermark(
        self,
        data: bytes,
        ext: str,
        text: str,
        *,
        color: tuple[int, int, int, int],
        position: WatermarkPosition,
        margin: int,
        font_size: int,
    ) -> bytes | None:
        ...


class OriginSaver(Protocol):
    def submit(self, name: str, data: bytes) -> None:
        ...


@dataclass(slots=True)
class ImageService:
    """Coordinates image retrieval and upload.

    Public methods never raise: expected failures come back as
    :class:`ImageFailure` kinds and anything unexpected is logged and
    reported as ``SERVER_ERROR``.
    """

    config: AppConfig
    storage: ImageStorageProvider
    cache: MemoryCache
    watermarker: Watermarker
    origin_saver: OriginSaver
    name_generator: Callable[[], GuidFileNameGenerator] = GuidFileNameGenerator
    not_found_image: Path = NOT_FOUND_IMAGE
    log: Any = field(default_factory=lambda: logger)

    @property
    def cache_sliding_expiration(self) -> timedelta:
        return timedelta(minutes=self.config.image_cache_sliding_expiration_minutes)

    async def serve(self, filename: str) -> RetrievalResult:
        try:
            return await self._serve(filename)
        except Exception:
            self.log.exception("images.serve.unexpected_error", image=filename)
            return RetrievalResult(failure=ImageFailure.SERVER_ERROR)

    async def _serve(self, filename: str) -> RetrievalResult:
        if has_invalid_filename_chars(filename):
            self.log.warning("images.serve.invalid_filename", image=filename)
            return RetrievalResult(failure=ImageFailure.INVALID_INPUT)

        self.log.debug("images.serve.requested", image=filename)

        cdn = self.config.cdn
        if cdn.get_image_by_cdn_redirect:
            return RetrievalResult(redirect_url=combine_url(cdn.cdn_endpoint, filename))

        async def fetch() -> StorageResult:
            self.log.debug("images.serve.cache_miss", image=filename)
            return await self.storage.get(filename)

        entry: StorageResult = await self.cache.get_or_create_async(
            filename, fetch, sliding=self.cache_sliding_expiration
        )
        if entry.success:
            return RetrievalResult(
                data=entry.data,
                content_type=entry.content_type or guess_image_mime(Path(filename).suffix),
            )

        self.log.error("images.serve.fetch_failed", image=filename, reason=entry.message)
        if self.config.content.use_friendly_not_found_image:
            return RetrievalResult(fallback_path=self.not_found_image, content_type="image/png")
        return RetrievalResult(failure=ImageFailure.NOT_FOUND)

    async def upload(self, filename: str | None, data: bytes | None) -> UploadResult:
        try:
            return await self._upload(filename, data)
        except Exception:
            self.log.exception("images.upload.unexpected_error", upload=filename)
            return UploadResult(failure=ImageFailure.SERVER_ERROR)

    async def _upload(self, filename: str | None, data: bytes | None) -> UploadResult:
        if not filename or not data:
            self.log.error("images.upload.empty_file", upload=filename)
            return UploadResult(failure=ImageFailure.INVALID_INPUT)

        name, ext = split_upload_name(filename)
        if not name or ext not in ALLOWED_IMAGE_EXTENSIONS:
            self.log.error("images.upload.invalid_extension", upload=filename, ext=ext)
            return UploadResult(failure=ImageFailure.INVALID_INPUT)

        generator = self.name_generator()
        primary_name = generator.get_file_name(name)
        origin_name = generator.get_file_name(name, "origin")

        settings = self.config.watermark
        payload = data
        if settings.is_enabled and ext not in UNWATERMARKED_EXTENSIONS:
            self.log.info("images.upload.watermark", image=primary_name)
            watermarked = await asyncio.to_thread(
                self.watermarker.add_watermark,
                data,
                ext,
                settings.watermark_text,
                color=WATERMARK_COLOR,
                position=WatermarkPosition.BOTTOM_RIGHT,
                margin=WATERMARK_MARGIN,
                font_size=settings.font_size,
            )
            if watermarked is not None:
                payload = watermarked

        response = await self.storage.insert(primary_name, payload)

        if settings.keep_origin_image:
            self.origin_saver.submit(origin_name, data)

        self.log.info(
            "images.upload.stored",
            image=primary_name,
            success=response.success,
            location=response.location,
            reason=response.message,
        )
        if response.success:
            return UploadResult(location=f"/uploads/{response.location or primary_name}")

        self.log.error("images.upload.store_failed", image=primary_name, reason=response.message)
        return UploadResult(failure=ImageFailure.SERVER_ERROR)


__all__ = ["ImageService", "combine_url", "has_invalid_filename_chars"]
