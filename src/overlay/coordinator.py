"""
위젯 표시/숨김 조정자

한 번에 하나의 표시/숨김 작업만 실행되도록 직렬화하고, 새 요청이 오면
이전 요청을 무효화합니다 (마지막 요청만 끝까지 실행됨).

- 요청마다 세대(generation) 번호를 발급하고, 새 요청이 오면 이전 세대의
  취소 이벤트를 set 합니다.
- 각 체크포인트에서 자기 세대가 취소됐는지 확인하고 취소됐으면 조용히 중단합니다.
- 중단/실패 여부와 관계없이 잠금은 항상 해제됩니다.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from dataclasses import dataclass, field
from typing import Optional

from src.feed.models import OverlayConfig
from src.overlay.renderer import OverlayClosingError, OverlayRenderer

logger = logging.getLogger(__name__)

# 이전 위젯 리소스가 해제될 때까지 기다리는 시간 (경험값)
SETTLE_DELAY = 0.3
# 위젯을 닫은 뒤 기다리는 시간
CLOSE_DELAY = 0.1


@dataclass
class _Scope:
    """요청 하나의 취소 범위"""
    generation: int
    cancelled: asyncio.Event = field(default_factory=asyncio.Event)

    @property
    def is_cancelled(self) -> bool:
        return self.cancelled.is_set()

    def cancel(self) -> None:
        self.cancelled.set()


@dataclass(frozen=True)
class OverlayHandle:
    """현재 표시 중인 위젯 (만든 요청의 세대와 설정)"""
    generation: int
    config: OverlayConfig


class OverlayCoordinator:
    """단일 실행(single-flight) 위젯 수명주기 관리"""

    def __init__(
        self,
        renderer: OverlayRenderer,
        settle_delay: float = SETTLE_DELAY,
        close_delay: float = CLOSE_DELAY,
    ):
        """
        Args:
            renderer: 실제로 위젯을 띄우고 닫는 렌더러
            settle_delay: 이전 위젯을 닫은 후 새 위젯을 만들기 전 대기 (초)
            close_delay: 위젯을 닫은 후 대기 (초)
        """
        self.renderer = renderer
        self.settle_delay = settle_delay
        self.close_delay = close_delay

        self._lock = asyncio.Lock()
        self._generation = 0
        self._scope: Optional[_Scope] = None
        self._current: Optional[OverlayHandle] = None

    @property
    def current(self) -> Optional[OverlayHandle]:
        return self._current

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def is_busy(self) -> bool:
        """표시/숨김 작업이 잠금을 잡고 있는지"""
        return self._lock.locked()

    def _new_scope(self) -> _Scope:
        if self._scope is not None:
            self._scope.cancel()
        self._generation += 1
        self._scope = _Scope(self._generation)
        return self._scope

    async def _wait_or_cancelled(self, scope: _Scope, delay: float) -> bool:
        """
        delay 만큼 대기

        Returns:
            True: 대기 중 취소됨
        """
        if scope.is_cancelled:
            return True
        try:
            await asyncio.wait_for(scope.cancelled.wait(), timeout=delay)
        except asyncio.TimeoutError:
            return False
        return True

    async def request_show(self, config: OverlayConfig) -> bool:
        """
        기존 위젯을 닫고 새 위젯 표시

        Returns:
            True: 새 위젯이 표시됨
        """
        scope = self._new_scope()
        async with self._lock:
            if scope.is_cancelled:
                logger.debug(f"표시 요청 취소 (세대 {scope.generation}, 대기 중 새 요청 도착)")
                return False

            logger.debug(f"=== 위젯 표시 요청 (세대 {scope.generation}) ===")
            await self._hide_current()

            if scope.is_cancelled:
                logger.info(f"위젯 생성 취소 (세대 {scope.generation}, 새 요청 도착)")
                return False

            if await self._wait_or_cancelled(scope, self.settle_delay):
                logger.info(f"위젯 생성 취소 (세대 {scope.generation}, 새 요청 도착)")
                return False

            try:
                result = self.renderer.on_show(config)
                if inspect.isawaitable(result):
                    await result
            except asyncio.CancelledError:
                raise
            except Exception as e:
                logger.error(f"위젯 생성 오류: {e}", exc_info=True)
                self._current = None
                return False

            self._current = OverlayHandle(scope.generation, config)
            logger.info(f"위젯 표시 완료 (세대 {scope.generation}): {config.url}")
            return True

    async def request_hide(self) -> bool:
        """
        현재 위젯 숨김

        Returns:
            True: 숨김 처리가 실행됨 (표시 중인 위젯이 없었어도 True)
        """
        scope = self._new_scope()
        async with self._lock:
            if scope.is_cancelled:
                logger.debug(f"숨김 요청 취소 (세대 {scope.generation}, 대기 중 새 요청 도착)")
                return False
            await self._hide_current()
            return True

    async def _hide_current(self) -> None:
        """잠금을 잡은 상태에서만 호출"""
        handle = self._current
        if handle is None:
            return
        # 참조를 먼저 비워 다른 호출자가 즉시 '위젯 없음'을 보도록 함
        self._current = None
        logger.debug(f"기존 위젯 닫는 중 (세대 {handle.generation})")

        try:
            result = self.renderer.on_hide()
            if inspect.isawaitable(result):
                await result
        except asyncio.CancelledError:
            raise
        except OverlayClosingError as e:
            logger.info(f"위젯이 이미 닫히는 중: {e}")
            return
        except Exception as e:
            logger.warning(f"위젯 닫기 오류: {e}")
            return

        if self.close_delay > 0:
            await asyncio.sleep(self.close_delay)
        logger.debug("위젯 닫힘")

    async def close(self) -> None:
        """종료 시 정리 (진행 중 요청 무효화 후 위젯 숨김)"""
        await self.request_hide()
