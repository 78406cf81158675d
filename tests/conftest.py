# tests/conftest.py
import asyncio
import json

import pytest


class FakeRenderer:
    """on_show/on_hide 호출을 기록하고 동시 실행 여부를 검사하는 렌더러."""

    def __init__(self, show_delay=0.0, fail_urls=()):
        self.calls = []
        self.shown = []
        self.hidden = 0
        self.active = 0
        self.max_active = 0
        self.show_delay = show_delay
        self.fail_urls = set(fail_urls)

    async def _enter(self):
        self.active += 1
        self.max_active = max(self.max_active, self.active)

    async def on_show(self, config):
        await self._enter()
        try:
            self.calls.append(("show", config.url))
            if self.show_delay:
                await asyncio.sleep(self.show_delay)
            if config.url in self.fail_urls:
                raise RuntimeError(f"cannot render {config.url}")
            self.shown.append(config)
        finally:
            self.active -= 1

    async def on_hide(self):
        await self._enter()
        try:
            self.calls.append(("hide", None))
            self.hidden += 1
        finally:
            self.active -= 1


@pytest.fixture
def renderer():
    return FakeRenderer()


def envelope_line(payload, event="message", **extra):
    """봉투 한 줄 생성. payload 가 dict/list 면 JSON 문자열로 한 번 더 감쌈."""
    if not isinstance(payload, str):
        payload = json.dumps(payload)
    data = {"id": "abc", "time": 1700000000, "event": event, "topic": "widgets", "message": payload}
    data.update(extra)
    return json.dumps(data)


@pytest.fixture
def make_line():
    return envelope_line
