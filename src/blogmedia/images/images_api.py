"""HTTP routes for uploaded images."""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, File, HTTPException, Request, UploadFile, status
from fastapi.responses import FileResponse, JSONResponse, RedirectResponse, Response

from ..auth.auth_dependencies import require_blog_owner
from .images_models import ImageFailure
from .images_service import ImageService

router = APIRouter(tags=["images"])
logger = logging.getLogger(__name__)

_FAILURE_STATUS = {
    ImageFailure.INVALID_INPUT: status.HTTP_400_BAD_REQUEST,
    ImageFailure.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ImageFailure.SERVER_ERROR: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def get_image_service(request: Request) -> ImageService:
    """Fetch image service from application state."""
    try:
        return request.app.state.image_service  # type: ignore[attr-defined]
    except AttributeError as exc:  # pragma: no cover - defensive path
        raise RuntimeError("ImageService is not configured") from exc


def _failure(reason: ImageFailure) -> HTTPException:
    return HTTPException(
        status_code=_FAILURE_STATUS[reason],
        detail={"status": "error", "failure_reason": reason.value},
    )


@router.get("/uploads/{filename}")
async def get_image(
    filename: str,
    service: ImageService = Depends(get_image_service),
) -> Response:
    """Serve an uploaded image, a CDN redirect or the not-found placeholder."""
    result = await service.serve(filename)
    if result.failure is not None:
        raise _failure(result.failure)
    if result.redirect_url is not None:
        return RedirectResponse(result.redirect_url, status_code=status.HTTP_302_FOUND)
    if result.fallback_path is not None:
        return FileResponse(result.fallback_path, media_type=result.content_type or "image/png")
    return Response(content=result.data, media_type=result.content_type)


@router.post("/image/upload")
async def upload_image(
    _owner: Annotated[dict, Depends(require_blog_owner)],
    file: UploadFile | None = File(None),
    service: ImageService = Depends(get_image_service),
) -> JSONResponse:
    """Store an uploaded image and return its public location."""
    if file is None:
        logger.warning("images.upload.missing_file")
        raise _failure(ImageFailure.INVALID_INPUT)

    try:
        data = await file.read()
    finally:
        await file.close()

    result = await service.upload(file.filename, data)
    if result.failure is not None:
        raise _failure(result.failure)
    return JSONResponse({"location": result.location})


__all__ = ["router", "get_image", "upload_image"]
