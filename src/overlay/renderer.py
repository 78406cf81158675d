"""
오버레이 렌더러 인터페이스

코어는 렌더러를 통해서만 위젯을 띄우고 닫습니다.
on_show / on_hide 는 sync 함수나 coroutine 함수 모두 가능합니다.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Awaitable, Optional, Protocol, Union

from src.feed.models import OverlayConfig
from src.overlay.state import overlay_state

logger = logging.getLogger(__name__)


class OverlayClosingError(RuntimeError):
    """이미 닫히는 중인 위젯을 다시 닫으려 할 때"""


class OverlayRenderer(Protocol):
    def on_show(self, config: OverlayConfig) -> Union[None, Awaitable[None]]:
        ...

    def on_hide(self) -> Union[None, Awaitable[None]]:
        ...


class StateRenderer:
    """
    공유 상태(overlay_state)에 현재 위젯을 기록하는 렌더러.
    브라우저 소스 페이지(server.py)가 /api/state 를 폴링해 실제로 그립니다.
    """

    def __init__(self, state: Optional[dict[str, Any]] = None):
        self.state = overlay_state if state is None else state

    def on_show(self, config: OverlayConfig) -> None:
        if not config.url:
            raise ValueError("위젯 url 이 비어 있습니다")
        widget_id = self.state.get("_next_widget_id", 0) + 1
        self.state["_next_widget_id"] = widget_id
        self.state["widget"] = {
            "id": widget_id,
            "shown_at": time.time(),
            **config.to_dict(),
        }
        logger.info("Overlay 표시: id=%s url=%s", widget_id, config.url)

    def on_hide(self) -> None:
        widget = self.state.get("widget")
        if widget is None:
            raise OverlayClosingError("표시 중인 위젯 없음")
        self.state["widget"] = None
        logger.info("Overlay 숨김: id=%s", widget.get("id"))
