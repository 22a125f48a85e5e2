"""Filesystem image storage with path validation and atomic writes."""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path

import aiofiles
import aiofiles.os

from .storage_base import StorageResult, guess_image_mime

logger = logging.getLogger(__name__)


class FileSystemImageStorage:
    """Store images as flat files under ``root``.

    Names are resolved against the root and anything escaping it is refused,
    so callers never need to sanitise path separators themselves. Writes go
    through a temp file + rename. Failures are reported as
    :class:`StorageResult` values, never raised.
    """

    def __init__(self, root: Path | str) -> None:
        self.root = Path(root).resolve()
        self.root.mkdir(parents=True, exist_ok=True)

    def _resolve(self, name: str) -> Path | None:
        full_path = (self.root / name).resolve()
        try:
            full_path.relative_to(self.root)
        except ValueError:
            return None
        if full_path == self.root:
            return None
        return full_path

    async def get(self, name: str) -> StorageResult:
        path = self._resolve(name)
        if path is None:
            logger.warning("storage.get.path_rejected", extra={"image_name": name})
            return StorageResult.failure(f"invalid image name: {name}")
        if not await aiofiles.os.path.isfile(path):
            return StorageResult.failure(f"image not found: {name}")
        try:
            async with aiofiles.open(path, "rb") as source:
                data = await source.read()
        except OSError as exc:
            logger.error("storage.get.read_failed", exc_info=exc, extra={"image_name": name})
            return StorageResult.failure(f"failed to read image {name}: {exc}")
        return StorageResult(
            success=True,
            data=data,
            content_type=guess_image_mime(path.suffix),
        )

    async def insert(self, name: str, data: bytes) -> StorageResult:
        path = self._resolve(name)
        if path is None:
            logger.warning("storage.insert.path_rejected", extra={"image_name": name})
            return StorageResult.failure(f"invalid image name: {name}")

        temp_path: str | None = None
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            fd, temp_path = tempfile.mkstemp(dir=path.parent, prefix=".tmp_", suffix=path.suffix)
            os.close(fd)
            async with aiofiles.open(temp_path, "wb") as sink:
                await sink.write(data)
            await aiofiles.os.replace(temp_path, path)
        except OSError as exc:
            logger.error("storage.insert.write_failed", exc_info=exc, extra={"image_name": name})
            return StorageResult.failure(f"failed to write image {name}: {exc}")
        finally:
            if temp_path is not None and os.path.exists(temp_path):
                os.unlink(temp_path)

        logger.info(
            "storage.insert.saved",
            extra={"image_name": name, "size_bytes": len(data)},
        )
        return StorageResult(success=True, location=path.relative_to(self.root).as_posix())


__all__ = ["FileSystemImageStorage"]
