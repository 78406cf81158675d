"""
위젯 명령 스트림 모듈
ntfy 토픽을 구독하여 위젯 표시/숨김 명령을 수신하는 모듈
"""

from .base_client import (
    ConnectionState,
    FeedClient,
    FeedConnectionError,
    FeedEvent,
    FeedEventType,
)
from .frame_parser import FrameDecoder
from .models import HIDE_ID, SHOW_ID, Command, Envelope, OverlayConfig
from .ntfy_client import NtfyStreamClient

__all__ = [
    "ConnectionState",
    "FeedClient",
    "FeedConnectionError",
    "FeedEvent",
    "FeedEventType",
    "FrameDecoder",
    "Command",
    "Envelope",
    "OverlayConfig",
    "SHOW_ID",
    "HIDE_ID",
    "NtfyStreamClient",
]
