"""
스트림 이벤트 → 위젯 조정자 연결

- COMMAND: 중복 제거 후 표시/숨김 요청을 별도 태스크로 실행
- 연결 상태 이벤트: ConnectionStatusTracker 가 공유 상태에 기록
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Optional, Set

from src.feed.base_client import ConnectionState, FeedEvent, FeedEventType
from src.overlay.coordinator import OverlayCoordinator
from src.overlay.dedup import Deduplicator
from src.overlay.state import overlay_state

logger = logging.getLogger(__name__)


class CommandRouter:
    """
    FeedClient 리스너. 이벤트 디스패처(단일 소비자)에서만 호출되므로
    Deduplicator 상태는 한 곳에서만 바뀝니다.

    조정자 요청은 await 하지 않고 태스크로 띄웁니다. 그래야 새 명령이
    진행 중인 이전 요청을 바로 무효화할 수 있습니다.
    """

    def __init__(self, coordinator: OverlayCoordinator, deduplicator: Optional[Deduplicator] = None):
        self.coordinator = coordinator
        self.deduplicator = deduplicator or Deduplicator()
        self._tasks: Set[asyncio.Task] = set()

    def __call__(self, event: FeedEvent) -> None:
        if event.type != FeedEventType.COMMAND or event.command is None:
            return
        command = event.command

        if command.is_show:
            if command.overlay_config is None:
                logger.warning("표시 명령에 설정 없음, 무시")
                return
            if not self.deduplicator.accept(command):
                return
            logger.info(f"표시 명령: url={command.overlay_config.url}, createdAt={command.created_at}")
            self._spawn(self.coordinator.request_show(command.overlay_config))
        elif command.is_hide:
            self.deduplicator.accept(command)
            logger.info("숨김 명령")
            self._spawn(self.coordinator.request_hide())
        else:
            logger.debug(f"무시: ID={command.command_id}")

    def _spawn(self, coro) -> None:
        task = asyncio.create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._on_task_done)

    def _on_task_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error(f"위젯 요청 처리 오류: {exc}", exc_info=exc)

    async def drain(self) -> None:
        """진행 중인 표시/숨김 요청이 모두 끝날 때까지 대기"""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)


class ConnectionStatusTracker:
    """연결 상태를 공유 상태에 기록 (트레이 아이콘 툴팁에 해당)"""

    def __init__(self, state: Optional[dict[str, Any]] = None):
        self.state = overlay_state if state is None else state

    def __call__(self, event: FeedEvent) -> None:
        if event.type == FeedEventType.CONNECTED:
            self._set(ConnectionState.CONNECTED, "Connected")
        elif event.type == FeedEventType.DISCONNECTED:
            self._set(ConnectionState.DISCONNECTED, "Disconnected")
        elif event.type == FeedEventType.ERROR:
            self._set(ConnectionState.DISCONNECTED, f"Error: {event.error}")

    def _set(self, state: ConnectionState, text: str) -> None:
        self.state["connection"] = {"state": state.value, "text": text}
        logger.info("연결 상태: %s", text)
