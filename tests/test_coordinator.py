import asyncio

import pytest

from conftest import FakeRenderer
from src.feed.models import OverlayConfig
from src.overlay.coordinator import OverlayCoordinator
from src.overlay.renderer import OverlayClosingError

pytestmark = pytest.mark.asyncio


def cfg(url):
    return OverlayConfig(url=url)


def make(renderer, settle=0.02, close=0.0):
    return OverlayCoordinator(renderer, settle_delay=settle, close_delay=close)


async def test_show_displays_overlay(renderer):
    coordinator = make(renderer)
    assert await coordinator.request_show(cfg("a.test"))
    assert [c.url for c in renderer.shown] == ["a.test"]
    assert coordinator.current.config.url == "a.test"
    assert not coordinator.is_busy


async def test_show_replaces_previous_overlay(renderer):
    coordinator = make(renderer)
    await coordinator.request_show(cfg("a.test"))
    await coordinator.request_show(cfg("b.test"))
    assert renderer.calls == [("show", "a.test"), ("hide", None), ("show", "b.test")]
    assert coordinator.current.config.url == "b.test"


async def test_hide_clears_reference(renderer):
    coordinator = make(renderer)
    await coordinator.request_show(cfg("a.test"))
    assert await coordinator.request_hide()
    assert coordinator.current is None
    assert renderer.hidden == 1


async def test_hide_without_overlay_is_noop(renderer):
    coordinator = make(renderer)
    assert await coordinator.request_hide()
    assert renderer.calls == []


async def test_last_writer_wins(renderer):
    coordinator = make(renderer, settle=0.05)
    first = asyncio.create_task(coordinator.request_show(cfg("r1.test")))
    second = asyncio.create_task(coordinator.request_show(cfg("r2.test")))
    results = await asyncio.gather(first, second)
    assert results == [False, True]
    assert [c.url for c in renderer.shown] == ["r2.test"]
    assert coordinator.current.config.url == "r2.test"
    assert not coordinator.is_busy


async def test_hide_supersedes_pending_show(renderer):
    coordinator = make(renderer, settle=0.05)
    show = asyncio.create_task(coordinator.request_show(cfg("a.test")))
    await asyncio.sleep(0.01)
    hide = asyncio.create_task(coordinator.request_hide())
    assert await asyncio.gather(show, hide) == [False, True]
    assert renderer.shown == []
    assert coordinator.current is None


async def test_superseded_waiter_aborts_after_acquiring(renderer):
    coordinator = make(renderer, settle=0.05)
    tasks = [
        asyncio.create_task(coordinator.request_show(cfg(f"{i}.test")))
        for i in range(5)
    ]
    results = await asyncio.gather(*tasks)
    assert results == [False, False, False, False, True]
    assert [c.url for c in renderer.shown] == ["4.test"]


async def test_never_more_than_one_operation_at_a_time():
    renderer = FakeRenderer(show_delay=0.01)
    coordinator = make(renderer, settle=0.01)
    tasks = []
    for i in range(10):
        if i % 3 == 2:
            tasks.append(asyncio.create_task(coordinator.request_hide()))
        else:
            tasks.append(asyncio.create_task(coordinator.request_show(cfg(f"{i}.test"))))
        await asyncio.sleep(0.005)
    await asyncio.gather(*tasks)
    assert renderer.max_active == 1
    assert not coordinator.is_busy


async def test_lock_released_when_task_cancelled(renderer):
    coordinator = make(renderer, settle=1.0)
    task = asyncio.create_task(coordinator.request_show(cfg("a.test")))
    await asyncio.sleep(0.01)
    assert coordinator.is_busy
    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task
    assert not coordinator.is_busy
    coordinator.settle_delay = 0.01
    assert await coordinator.request_show(cfg("b.test"))


async def test_construction_failure_leaves_no_overlay():
    renderer = FakeRenderer(fail_urls={"bad.test"})
    coordinator = make(renderer)
    await coordinator.request_show(cfg("a.test"))
    assert await coordinator.request_show(cfg("bad.test")) is False
    assert coordinator.current is None
    assert not coordinator.is_busy
    assert await coordinator.request_show(cfg("c.test"))
    assert coordinator.current.config.url == "c.test"


async def test_teardown_already_in_progress_is_tolerated():
    class ClosingRenderer(FakeRenderer):
        async def on_hide(self):
            raise OverlayClosingError("already closing")

    renderer = ClosingRenderer()
    coordinator = make(renderer)
    await coordinator.request_show(cfg("a.test"))
    assert await coordinator.request_hide()
    assert coordinator.current is None


async def test_sync_renderer_is_supported():
    events = []

    class SyncRenderer:
        def on_show(self, config):
            events.append(("show", config.url))

        def on_hide(self):
            events.append(("hide", None))

    coordinator = make(SyncRenderer())
    await coordinator.request_show(cfg("a.test"))
    await coordinator.request_hide()
    assert events == [("show", "a.test"), ("hide", None)]


async def test_generation_increases_per_request(renderer):
    coordinator = make(renderer)
    await coordinator.request_show(cfg("a.test"))
    await coordinator.request_hide()
    await coordinator.request_show(cfg("b.test"))
    assert coordinator.generation == 3
    assert coordinator.current.generation == 3
