"""오버레이용 공유 상태. 현재 위젯 / 연결 상태."""

from typing import Any

# widget: StateRenderer 가 갱신, None 이면 표시 중인 위젯 없음
# { "id": int, "shown_at": float, "url": str, "opacity": float, ... OverlayConfig 필드 }
# connection: ConnectionStatusTracker 가 갱신 (트레이 아이콘 대신)
# { "state": "disconnected" | "connecting" | "connected", "text": str }
overlay_state: dict[str, Any] = {
    "widget": None,
    "_next_widget_id": 0,
    "connection": {"state": "disconnected", "text": "Connecting..."},
}
