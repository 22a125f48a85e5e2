from __future__ import annotations

from io import BytesIO

from PIL import Image


def make_image(
    width: int = 64,
    height: int = 48,
    *,
    image_format: str = "PNG",
    color: tuple[int, int, int] = (30, 90, 200),
) -> bytes:
    image = Image.new("RGB", (width, height), color)
    buffer = BytesIO()
    image.save(buffer, format=image_format)
    return buffer.getvalue()


def open_image(data: bytes) -> Image.Image:
    image = Image.open(BytesIO(data))
    image.load()
    return image
