"""Captcha image route."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from fastapi.responses import Response

from .captcha_service import CaptchaService

router = APIRouter(tags=["captcha"])


def get_captcha_service(request: Request) -> CaptchaService:
    try:
        return request.app.state.captcha_service  # type: ignore[attr-defined]
    except AttributeError as exc:  # pragma: no cover - defensive path
        raise RuntimeError("CaptchaService is not configured") from exc


@router.get("/get-captcha-image")
async def get_captcha_image(
    request: Request,
    service: CaptchaService = Depends(get_captcha_service),
) -> Response:
    image = service.generate(request.session)
    return Response(
        content=image,
        media_type="image/png",
        headers={"Cache-Control": "no-store"},
    )
