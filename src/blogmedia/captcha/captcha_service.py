"""Captcha code generation, rendering and validation.

The code lives in the caller's session under :data:`CAPTCHA_SESSION_KEY`;
the image is a PNG rendered with Pillow. Codes are single use: validation
clears the stored code whether or not it matched.

This package only serves the image. :meth:`CaptchaService.validate` is the
hook for form handlers (comments, sign-up) mounted next to it, which read
``request.app.state.captcha_service`` and check the submitted code against
``request.session``.
"""

from __future__ import annotations

import hmac
import random
import secrets
from collections.abc import MutableMapping
from dataclasses import dataclass, field
from io import BytesIO
from typing import Any

from PIL import Image, ImageDraw, ImageFont

from ..config import CaptchaSettings

CAPTCHA_SESSION_KEY = "captcha_code"

# No 0/O, 1/I/L: they are hard to tell apart once distorted.
CAPTCHA_ALPHABET = "ABCDEFGHJKMNPQRSTUVWXYZ23456789"

_BACKGROUND = (245, 245, 245)
_NOISE_LINES = 4
_PIXELS_PER_NOISE_DOT = 50


@dataclass(slots=True)
class CaptchaService:
    settings: CaptchaSettings
    rng: random.Random = field(default_factory=random.SystemRandom)

    def generate_code(self) -> str:
        return "".join(secrets.choice(CAPTCHA_ALPHABET) for _ in range(self.settings.code_length))

    def generate(self, session: MutableMapping[str, Any]) -> bytes:
        """Store a fresh code in ``session`` and return its PNG image."""
        code = self.generate_code()
        session[CAPTCHA_SESSION_KEY] = code
        return self.render(code)

    def validate(self, session: MutableMapping[str, Any], code: str | None) -> bool:
        expected = session.pop(CAPTCHA_SESSION_KEY, None)
        if not expected or not code:
            return False
        return hmac.compare_digest(str(expected).upper(), code.strip().upper())

    def render(self, code: str) -> bytes:
        width, height = self.settings.image_width, self.settings.image_height
        image = Image.new("RGB", (width, height), _BACKGROUND)
        draw = ImageDraw.Draw(image)

        for _ in range(_NOISE_LINES):
            start = (self.rng.randrange(width), self.rng.randrange(height))
            end = (self.rng.randrange(width), self.rng.randrange(height))
            draw.line([start, end], fill=self._random_color(120, 200), width=1)

        font = ImageFont.load_default(size=max(10, int(height * 0.7)))
        step = width / (len(code) + 1)
        for index, char in enumerate(code):
            left, top, right, bottom = draw.textbbox((0, 0), char, font=font)
            x = step * (index + 0.5) + self.rng.uniform(-2, 2)
            y = (height - (bottom - top)) / 2 - top + self.rng.uniform(-3, 3)
            draw.text((x, y), char, font=font, fill=self._random_color(20, 110))

        for _ in range(max(1, width * height // _PIXELS_PER_NOISE_DOT)):
            point = (self.rng.randrange(width), self.rng.randrange(height))
            draw.point(point, fill=self._random_color(0, 255))

        buffer = BytesIO()
        image.save(buffer, format="PNG")
        return buffer.getvalue()

    def _random_color(self, low: int, high: int) -> tuple[int, int, int]:
        return tuple(self.rng.randint(low, high) for _ in range(3))  # type: ignore[return-value]


__all__ = ["CAPTCHA_ALPHABET", "CAPTCHA_SESSION_KEY", "CaptchaService"]
