"""Avatar route."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from fastapi.responses import FileResponse, Response

from .avatar_service import AvatarService

router = APIRouter(tags=["avatar"])


def get_avatar_service(request: Request) -> AvatarService:
    try:
        return request.app.state.avatar_service  # type: ignore[attr-defined]
    except AttributeError as exc:  # pragma: no cover - defensive path
        raise RuntimeError("AvatarService is not configured") from exc


@router.get("/avatar")
async def get_blogger_avatar(service: AvatarService = Depends(get_avatar_service)) -> Response:
    avatar = service.get_avatar()
    if avatar.content is not None:
        return Response(content=avatar.content, media_type=avatar.media_type)
    return FileResponse(avatar.path, media_type=avatar.media_type)
