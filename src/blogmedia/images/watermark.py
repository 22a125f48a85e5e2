"""Text watermarking built on Pillow."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from io import BytesIO
from pathlib import Path

from PIL import Image, ImageDraw, ImageFont

from ..config import SMALL_IMAGE_PIXELS_THRESHOLD

_SAVE_FORMATS = {
    ".png": "PNG",
    ".jpg": "JPEG",
    ".jpeg": "JPEG",
    ".bmp": "BMP",
}

RGBA = tuple[int, int, int, int]


class WatermarkPosition(StrEnum):
    TOP_LEFT = "top_left"
    TOP_RIGHT = "top_right"
    BOTTOM_LEFT = "bottom_left"
    BOTTOM_RIGHT = "bottom_right"


class UnsupportedImageFormatError(ValueError):
    """Raised for extensions the watermarker cannot re-encode."""


@dataclass(slots=True)
class ImageWatermarker:
    """Draw a text watermark onto still images.

    When ``skip_small_images`` is set, images with fewer than
    ``small_image_pixels_threshold`` pixels are left alone and
    :meth:`add_watermark` returns ``None``.
    """

    skip_small_images: bool = True
    small_image_pixels_threshold: int = SMALL_IMAGE_PIXELS_THRESHOLD
    font_path: Path | None = None

    def add_watermark(
        self,
        data: bytes,
        ext: str,
        text: str,
        *,
        color: RGBA = (128, 128, 128, 128),
        position: WatermarkPosition = WatermarkPosition.BOTTOM_RIGHT,
        margin: int = 15,
        font_size: int = 20,
    ) -> bytes | None:
        image_format = _SAVE_FORMATS.get(ext.lower())
        if image_format is None:
            raise UnsupportedImageFormatError(f"cannot watermark {ext!r} images")

        with Image.open(BytesIO(data)) as source:
            if self.skip_small_images and source.width * source.height < self.small_image_pixels_threshold:
                return None
            base = source.convert("RGBA")

        overlay = Image.new("RGBA", base.size, (0, 0, 0, 0))
        draw = ImageDraw.Draw(overlay)
        font = self._load_font(font_size)
        left, top, right, bottom = draw.textbbox((0, 0), text, font=font)
        x, y = _anchor(position, base.size, (right - left, bottom - top), margin)
        # textbbox offsets are relative to the draw origin
        draw.text((x - left, y - top), text, font=font, fill=color)

        composed = Image.alpha_composite(base, overlay)
        if image_format in {"JPEG", "BMP"}:
            composed = composed.convert("RGB")
        buffer = BytesIO()
        composed.save(buffer, format=image_format)
        return buffer.getvalue()

    def _load_font(self, size: int) -> ImageFont.FreeTypeFont | ImageFont.ImageFont:
        if self.font_path is not None:
            return ImageFont.truetype(str(self.font_path), size=size)
        return ImageFont.load_default(size=size)


def _anchor(
    position: WatermarkPosition,
    image_size: tuple[int, int],
    text_size: tuple[int, int],
    margin: int,
) -> tuple[int, int]:
    width, height = image_size
    text_width, text_height = text_size
    left = margin
    top = margin
    right = max(margin, width - text_width - margin)
    bottom = max(margin, height - text_height - margin)
    if position is WatermarkPosition.TOP_LEFT:
        return left, top
    if position is WatermarkPosition.TOP_RIGHT:
        return right, top
    if position is WatermarkPosition.BOTTOM_LEFT:
        return left, bottom
    return right, bottom


__all__ = ["ImageWatermarker", "UnsupportedImageFormatError", "WatermarkPosition"]
