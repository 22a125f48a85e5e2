"""Lifespan hooks wiring background tasks for FastAPI startup."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from .images.origin_saver import BackgroundImageSaver

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Run the origin-image saver for as long as the application serves."""
    saver: BackgroundImageSaver | None = getattr(app.state, "origin_saver", None)
    if saver is None:
        logger.info("Origin saver startup skipped: not configured")
        yield
        return

    await saver.start()
    try:
        yield
    finally:
        await saver.stop()


__all__ = ["lifespan"]
