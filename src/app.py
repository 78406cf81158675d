"""
ntfy 위젯 오버레이 앱 조립

ntfy 스트림 → CommandRouter(중복 제거) → OverlayCoordinator → 렌더러
연결 상태는 ConnectionStatusTracker 가 공유 상태에 기록합니다.
"""

from __future__ import annotations

import asyncio
import logging
import threading
from typing import Any, Optional

from src.feed.base_client import FeedClient, FeedConnectionError
from src.feed.ntfy_client import NtfyStreamClient
from src.overlay.coordinator import OverlayCoordinator
from src.overlay.renderer import OverlayRenderer, StateRenderer
from src.overlay.router import CommandRouter, ConnectionStatusTracker
from src.utils.config import AppSettings, load_settings

logger = logging.getLogger(__name__)


class OverlayApp:
    """스트림 클라이언트와 위젯 조정자를 묶어 실행"""

    def __init__(
        self,
        settings: AppSettings,
        renderer: Optional[OverlayRenderer] = None,
        client: Optional[FeedClient] = None,
        state: Optional[dict[str, Any]] = None,
    ):
        self.settings = settings
        self.coordinator = OverlayCoordinator(
            renderer or StateRenderer(state),
            settle_delay=settings.settle_delay,
            close_delay=settings.close_delay,
        )
        self.router = CommandRouter(self.coordinator)
        self.status = ConnectionStatusTracker(state)
        self.client = client or NtfyStreamClient(reconnect_delay=settings.reconnect_delay)
        self.client.add_listener(self.status)
        self.client.add_listener(self.router)
        self._stopped = asyncio.Event()

    async def run(self) -> None:
        """stop() 이 호출될 때까지 실행. NTFY_URL 이 없으면 연결 없이 대기."""
        url = self.settings.ntfy_url
        if not url:
            logger.warning("NTFY_URL 이 설정되지 않아 연결하지 않습니다")
            await self._stopped.wait()
            return

        if not await self._connect_first(url):
            return
        await self._stopped.wait()

    async def _connect_first(self, url: str) -> bool:
        """
        첫 연결. 실패하면 reconnect_delay 간격으로 계속 재시도.
        연결 이후의 재연결은 클라이언트가 담당.

        Returns:
            False: 연결 전에 stop() 된 경우
        """
        while not self._stopped.is_set():
            try:
                await self.client.connect(url)
                return True
            except FeedConnectionError as e:
                logger.error(f"ntfy 연결 실패, {self.settings.reconnect_delay}초 후 재시도: {e}")
            try:
                await asyncio.wait_for(self._stopped.wait(), timeout=self.settings.reconnect_delay)
            except asyncio.TimeoutError:
                continue
        return False

    async def stop(self) -> None:
        """연결 종료, 진행 중인 요청 정리, 표시 중인 위젯 닫기"""
        self._stopped.set()
        await self.client.stop()
        await self.router.drain()
        await self.coordinator.close()


def start_overlay_server(host: str, port: int) -> threading.Thread:
    """브라우저 소스 서버를 데몬 스레드로 실행 (같은 프로세스에서 state 공유)"""
    import uvicorn

    from src.overlay.server import app

    def run_overlay():
        uvicorn.run(app, host=host, port=port, log_level="warning")

    t = threading.Thread(target=run_overlay, name="overlay-server", daemon=True)
    t.start()
    logger.info("브라우저 소스 오버레이: http://%s:%s/", host, port)
    return t


async def main(settings: Optional[AppSettings] = None) -> None:
    settings = settings or load_settings()
    if settings.overlay_server:
        start_overlay_server(settings.overlay_host, settings.overlay_port)
        print(f"위젯 오버레이: http://{settings.overlay_host}:{settings.overlay_port}/ (OBS 브라우저 소스에 추가)")

    overlay_app = OverlayApp(settings)
    print(f"구독: {settings.ntfy_url or '(NTFY_URL 없음, 대기)'} (종료: Ctrl+C)\n")
    try:
        await overlay_app.run()
    finally:
        await overlay_app.stop()
