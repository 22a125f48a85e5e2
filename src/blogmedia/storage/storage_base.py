"""Contract shared by image storage backends."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol


@dataclass(slots=True, frozen=True)
class StorageResult:
    """Outcome of a storage call.

    Reads fill ``data`` and ``content_type``; writes fill ``location`` with
    the name under which the blob can be fetched again.
    """

    success: bool
    data: bytes | None = None
    content_type: str | None = None
    location: str | None = None
    message: str = ""

    @classmethod
    def failure(cls, message: str) -> "StorageResult":
        return cls(success=False, message=message)


class ImageStorageProvider(Protocol):
    """Async key/value blob store keyed by filename."""

    async def get(self, name: str) -> StorageResult:
        ...

    async def insert(self, name: str, data: bytes) -> StorageResult:
        ...


def guess_image_mime(suffix: str) -> str:
    lowered = suffix.lower()
    if lowered in {".jpg", ".jpeg"}:
        return "image/jpeg"
    if lowered == ".png":
        return "image/png"
    if lowered == ".gif":
        return "image/gif"
    if lowered == ".bmp":
        return "image/bmp"
    if lowered == ".webp":
        return "image/webp"
    return "application/octet-stream"


__all__ = ["ImageStorageProvider", "StorageResult", "guess_image_mime"]
