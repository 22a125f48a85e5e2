"""Background persistence of unmodified ("origin") uploads."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from dataclasses import dataclass

from ..storage.storage_base import ImageStorageProvider

logger = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class SaveRequest:
    name: str
    data: bytes


class BackgroundImageSaver:
    """Single worker draining a queue of storage inserts.

    ``submit`` never blocks and never raises on behalf of the storage call;
    outcomes are reported through the log only. The worker runs between
    :meth:`start` and :meth:`stop`; requests submitted earlier wait in the
    queue.
    """

    def __init__(self, storage: ImageStorageProvider) -> None:
        self._storage = storage
        self._queue: asyncio.Queue[SaveRequest] = asyncio.Queue()
        self._task: asyncio.Task[None] | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def pending(self) -> int:
        return self._queue.qsize()

    def submit(self, name: str, data: bytes) -> None:
        self._queue.put_nowait(SaveRequest(name=name, data=data))
        logger.debug("images.origin.queued", extra={"image_name": name})

    async def start(self) -> None:
        if self.running:
            return
        # A queue is bound to the loop it first waited on; rebuild it for this one.
        leftover: asyncio.Queue[SaveRequest] = asyncio.Queue()
        while not self._queue.empty():
            leftover.put_nowait(self._queue.get_nowait())
        self._queue = leftover
        self._task = asyncio.create_task(self._run(), name="blogmedia-origin-saver")
        logger.info("images.origin.worker_started")

    async def join(self) -> None:
        """Wait until every submitted request has been processed."""
        await self._queue.join()

    async def stop(self) -> None:
        task = self._task
        if task is None:
            return
        if not task.done():
            await self.join()
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task
        self._task = None
        logger.info("images.origin.worker_stopped")

    async def _run(self) -> None:
        while True:
            request = await self._queue.get()
            try:
                await self._save(request)
            finally:
                self._queue.task_done()

    async def _save(self, request: SaveRequest) -> None:
        try:
            result = await self._storage.insert(request.name, request.data)
        except Exception:
            logger.exception("images.origin.save_crashed", extra={"image_name": request.name})
            return
        if not result.success:
            logger.error(
                "images.origin.save_failed",
                extra={"image_name": request.name, "reason": result.message},
            )
            return
        logger.info(
            "images.origin.saved",
            extra={"image_name": request.name, "location": result.location},
        )


__all__ = ["BackgroundImageSaver", "SaveRequest"]
