from __future__ import annotations

import pytest

from src.blogmedia.images.watermark import (
    ImageWatermarker,
    UnsupportedImageFormatError,
    WatermarkPosition,
)
from tests.helpers.images import make_image, open_image

WHITE = (255, 255, 255)


def test_small_images_are_skipped() -> None:
    watermarker = ImageWatermarker(small_image_pixels_threshold=200 * 200)

    assert watermarker.add_watermark(make_image(100, 100), ".png", "Blog") is None


def test_threshold_is_ignored_when_skipping_disabled() -> None:
    watermarker = ImageWatermarker(skip_small_images=False, small_image_pixels_threshold=10**9)

    assert watermarker.add_watermark(make_image(100, 100), ".png", "Blog") is not None


@pytest.mark.parametrize(
    ("ext", "expected_format"),
    [(".png", "PNG"), (".jpg", "JPEG"), (".JPEG", "JPEG"), (".bmp", "BMP")],
)
def test_output_keeps_format_and_size(ext: str, expected_format: str) -> None:
    watermarker = ImageWatermarker(small_image_pixels_threshold=0)
    source = make_image(320, 200, image_format=expected_format, color=WHITE)

    result = watermarker.add_watermark(source, ext, "Blog", font_size=24)

    assert result is not None
    image = open_image(result)
    assert image.format == expected_format
    assert image.size == (320, 200)


def test_text_is_drawn_in_bottom_right_corner_only() -> None:
    watermarker = ImageWatermarker(small_image_pixels_threshold=0)
    source = make_image(400, 300, color=WHITE)

    result = watermarker.add_watermark(
        source,
        ".png",
        "BLOG",
        position=WatermarkPosition.BOTTOM_RIGHT,
        margin=15,
        font_size=30,
    )

    image = open_image(result).convert("RGB")
    top_left = image.crop((0, 0, 200, 150))
    bottom_right = image.crop((200, 150, 400, 300))
    assert top_left.getcolors() == [(200 * 150, WHITE)]
    assert len(bottom_right.getcolors(maxcolors=100_000)) > 1


def test_gif_is_not_supported() -> None:
    watermarker = ImageWatermarker(small_image_pixels_threshold=0)

    with pytest.raises(UnsupportedImageFormatError):
        watermarker.add_watermark(make_image(image_format="GIF"), ".gif", "Blog")
