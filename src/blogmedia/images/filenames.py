"""Unique stored-name generation for uploaded images."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from pathlib import PureWindowsPath


def split_upload_name(filename: str) -> tuple[str, str]:
    """Return the base name and lower-cased extension of an uploaded file.

    Browsers may send a full client path with either separator, so only the
    last component is kept.
    """
    base = PureWindowsPath(filename).name
    return base, PureWindowsPath(base).suffix.lower()


@dataclass(slots=True, frozen=True)
class GuidFileNameGenerator:
    """Derive stored names from one fresh identifier.

    ``get_file_name("cat.PNG")`` gives ``"<uid>.png"`` and
    ``get_file_name("cat.PNG", "origin")`` gives ``"<uid>-origin.png"``.
    """

    uid: str = field(default_factory=lambda: uuid.uuid4().hex)

    def get_file_name(self, filename: str, purpose: str = "") -> str:
        _, ext = split_upload_name(filename)
        suffix = f"-{purpose}" if purpose else ""
        return f"{self.uid}{suffix}{ext}"


__all__ = ["GuidFileNameGenerator", "split_upload_name"]
