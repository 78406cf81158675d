"""
위젯 오버레이: 스트림 명령으로 위젯을 하나만 띄우고 닫음.

- OverlayCoordinator: 표시/숨김 직렬화, 이전 요청 무효화
- overlay_state: StateRenderer 가 갱신, 서버가 /api/state 로 반환.
- OBS에서 브라우저 소스 URL을 http://127.0.0.1:8765/ 로 설정.
"""

from src.overlay.coordinator import OverlayCoordinator
from src.overlay.dedup import Deduplicator
from src.overlay.renderer import OverlayClosingError, OverlayRenderer, StateRenderer
from src.overlay.router import CommandRouter, ConnectionStatusTracker
from src.overlay.state import overlay_state

__all__ = [
    "OverlayCoordinator",
    "Deduplicator",
    "OverlayClosingError",
    "OverlayRenderer",
    "StateRenderer",
    "CommandRouter",
    "ConnectionStatusTracker",
    "overlay_state",
]
