from __future__ import annotations

import logging

import pytest

from src.blogmedia.images.origin_saver import BackgroundImageSaver
from tests.mocks.storage import InMemoryImageStorage


@pytest.mark.asyncio
async def test_submitted_images_are_persisted_by_worker() -> None:
    storage = InMemoryImageStorage()
    saver = BackgroundImageSaver(storage)
    await saver.start()

    saver.submit("a-origin.png", b"a")
    saver.submit("b-origin.png", b"b")
    await saver.join()
    await saver.stop()

    assert storage.images == {"a-origin.png": b"a", "b-origin.png": b"b"}
    assert not saver.running


@pytest.mark.asyncio
async def test_requests_submitted_before_start_are_kept() -> None:
    storage = InMemoryImageStorage()
    saver = BackgroundImageSaver(storage)

    saver.submit("early-origin.png", b"x")
    assert saver.pending == 1

    await saver.start()
    await saver.stop()

    assert storage.inserted_names() == ["early-origin.png"]


@pytest.mark.asyncio
async def test_failures_are_logged_and_worker_keeps_running(caplog: pytest.LogCaptureFixture) -> None:
    storage = InMemoryImageStorage()
    storage.failing_names.add("full-origin.png")
    storage.crashing_names.add("crash-origin.png")
    saver = BackgroundImageSaver(storage)
    await saver.start()

    with caplog.at_level(logging.INFO, logger="src.blogmedia.images.origin_saver"):
        saver.submit("full-origin.png", b"1")
        saver.submit("crash-origin.png", b"2")
        saver.submit("ok-origin.png", b"3")
        await saver.join()

    assert saver.running
    await saver.stop()

    messages = [record.getMessage() for record in caplog.records]
    assert "images.origin.save_failed" in messages
    assert "images.origin.save_crashed" in messages
    assert storage.images == {"ok-origin.png": b"3"}


@pytest.mark.asyncio
async def test_stop_without_start_is_noop() -> None:
    saver = BackgroundImageSaver(InMemoryImageStorage())

    await saver.stop()

    assert not saver.running
