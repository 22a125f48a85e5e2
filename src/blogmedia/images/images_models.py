"""Data structures returned by the image service."""

from dataclasses import dataclass
from enum import StrEnum
from pathlib import Path

ALLOWED_IMAGE_EXTENSIONS = frozenset({".png", ".jpg", ".jpeg", ".bmp", ".gif"})

# Animated format the watermarker cannot handle.
UNWATERMARKED_EXTENSIONS = frozenset({".gif"})


class ImageFailure(StrEnum):
    """Failure kinds surfaced to the HTTP layer."""

    INVALID_INPUT = "invalid_input"
    NOT_FOUND = "not_found"
    SERVER_ERROR = "server_error"


@dataclass(slots=True, frozen=True)
class RetrievalResult:
    """Outcome of serving ``/uploads/{filename}``.

    Exactly one of ``data``, ``redirect_url``, ``fallback_path`` or
    ``failure`` is set.
    """

    data: bytes | None = None
    content_type: str | None = None
    redirect_url: str | None = None
    fallback_path: Path | None = None
    failure: ImageFailure | None = None


@dataclass(slots=True, frozen=True)
class UploadResult:
    location: str | None = None
    failure: ImageFailure | None = None
