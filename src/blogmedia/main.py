"""FastAPI application entry point.

Run with ``uvicorn src.blogmedia.main:create_app --factory``.
"""

from __future__ import annotations

from fastapi import FastAPI

from .cache.memory_cache import MemoryCache
from .config import AppConfig, load_config
from .dependencies import include_routers
from .lifecycle import lifespan
from .logging import configure_logging
from .storage.storage_base import ImageStorageProvider


def create_app(
    config: AppConfig | None = None,
    *,
    storage: ImageStorageProvider | None = None,
    cache: MemoryCache | None = None,
) -> FastAPI:
    """Build FastAPI instance with configured dependencies."""
    configure_logging()
    cfg = config or load_config()
    app = FastAPI(title="Blog Media", lifespan=lifespan)
    include_routers(app, cfg, storage=storage, cache=cache)
    return app


def run() -> None:  # pragma: no cover - console entry point
    import uvicorn

    uvicorn.run("src.blogmedia.main:create_app", factory=True, host="0.0.0.0", port=8000)
