"""Dependency wiring helpers."""

from fastapi import FastAPI
from starlette.middleware.sessions import SessionMiddleware

from .auth.auth_api import router as auth_router
from .auth.auth_service import AuthService
from .avatar.avatar_api import router as avatar_router
from .avatar.avatar_service import AvatarService
from .cache.memory_cache import MemoryCache
from .captcha.captcha_api import router as captcha_router
from .captcha.captcha_service import CaptchaService
from .config import AppConfig
from .images.images_api import router as images_router
from .images.images_service import ImageService
from .images.origin_saver import BackgroundImageSaver
from .images.watermark import ImageWatermarker
from .storage.local_storage import FileSystemImageStorage
from .storage.storage_base import ImageStorageProvider


def include_routers(
    app: FastAPI,
    config: AppConfig,
    *,
    storage: ImageStorageProvider | None = None,
    cache: MemoryCache | None = None,
) -> None:
    """Build services, attach them to ``app.state`` and mount routers."""
    if not config.session_secret.strip():
        raise RuntimeError("BLOGMEDIA_SESSION_SECRET is not configured")
    if storage is None:
        storage = FileSystemImageStorage(config.storage.root)
    if cache is None:
        cache = MemoryCache()
    origin_saver = BackgroundImageSaver(storage)
    watermarker = ImageWatermarker(
        skip_small_images=True,
        small_image_pixels_threshold=config.small_image_pixels_threshold,
    )

    app.state.config = config
    app.state.storage = storage
    app.state.cache = cache
    app.state.origin_saver = origin_saver
    app.state.image_service = ImageService(
        config=config,
        storage=storage,
        cache=cache,
        watermarker=watermarker,
        origin_saver=origin_saver,
    )
    app.state.avatar_service = AvatarService(settings=config.blog_owner, cache=cache)
    app.state.captcha_service = CaptchaService(settings=config.captcha)
    app.state.auth_service = AuthService.from_config(config)

    app.add_middleware(SessionMiddleware, secret_key=config.session_secret)

    app.include_router(auth_router)
    app.include_router(images_router)
    app.include_router(avatar_router)
    app.include_router(captcha_router)
