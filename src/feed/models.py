"""
스트림 모듈 데이터 모델
ntfy 봉투(Envelope) → 위젯 명령(Command) → 오버레이 설정(OverlayConfig)
"""

from dataclasses import asdict, dataclass
from typing import Any, Mapping, Optional, Tuple

from .coercion import to_bool, to_float, to_int, to_optional_int

SHOW_ID = 100000  # 위젯 표시
HIDE_ID = 100001  # 위젯 숨김
VALID_COMMAND_IDS = frozenset({SHOW_ID, HIDE_ID})

# 오버레이 기본값
DEFAULT_SETUP_RESOLUTION = (2560, 1440)
DEFAULT_WIDTH = 800
DEFAULT_HEIGHT = 600
DEFAULT_OPACITY = 100.0  # %
DEFAULT_SCALE = 1.0
DEFAULT_VOLUME = 0.5


def lookup(data: Mapping[str, Any], key: str, default: Any = None) -> Any:
    """키 조회 (정확히 일치하는 키 우선, 없으면 대소문자 무시)"""
    if key in data:
        return data[key]
    lowered = key.lower()
    for k, v in data.items():
        if isinstance(k, str) and k.lower() == lowered:
            return v
    return default


def has_key(data: Mapping[str, Any], key: str) -> bool:
    if key in data:
        return True
    lowered = key.lower()
    return any(isinstance(k, str) and k.lower() == lowered for k in data)


@dataclass(frozen=True)
class Envelope:
    """ntfy 봉투. 실제 위젯 데이터는 message 필드에 JSON 문자열로 들어있음"""
    id: Optional[str] = None
    time: int = 0
    expires: Optional[int] = None
    event: Optional[str] = None
    topic: Optional[str] = None
    message: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Envelope":
        """
        Raises:
            ValueError: message 가 문자열이 아닌 경우
        """
        message = lookup(data, "message")
        if message is not None and not isinstance(message, str):
            raise ValueError(f"message 필드가 문자열이 아님: {type(message).__name__}")
        event = lookup(data, "event")
        envelope_id = lookup(data, "id")
        topic = lookup(data, "topic")
        expires = lookup(data, "expires")
        return cls(
            id=None if envelope_id is None else str(envelope_id),
            time=to_int(lookup(data, "time"), 0),
            expires=None if expires is None else to_int(expires, 0),
            event=event if isinstance(event, str) else None,
            topic=topic if isinstance(topic, str) else None,
            message=message,
        )

    @property
    def is_message(self) -> bool:
        """처리 대상 여부 (event == "message" 이고 본문이 비어있지 않음)"""
        return self.event == "message" and bool(self.message and self.message.strip())


@dataclass(frozen=True)
class OverlayConfig:
    """
    위젯 표시 설정 (명령의 extra 객체)

    코어는 이 값을 해석하지 않고 렌더러에 그대로 넘깁니다.
    """
    url: str = ""
    setup_resolution_x: int = DEFAULT_SETUP_RESOLUTION[0]
    setup_resolution_y: int = DEFAULT_SETUP_RESOLUTION[1]
    setup_x: int = 0
    setup_y: int = 0
    x: int = 0
    y: int = 0
    width: int = DEFAULT_WIDTH
    height: int = DEFAULT_HEIGHT
    opacity: float = DEFAULT_OPACITY  # 0~100 %
    scale: float = DEFAULT_SCALE
    content_zoom: float = DEFAULT_SCALE
    duration_ms: int = 0  # 0이면 자동 숨김 없음
    click_through: bool = False
    volume: float = DEFAULT_VOLUME

    @classmethod
    def from_extra(cls, extra: Mapping[str, Any]) -> "OverlayConfig":
        url = lookup(extra, "url")
        scale = to_float(lookup(extra, "scale"), DEFAULT_SCALE)

        # 0~1 사이 값은 비율로 보고 %로 환산 ("55" 와 "0.55" 모두 55%)
        opacity = to_float(lookup(extra, "opacity"), DEFAULT_OPACITY)
        if opacity <= 1.0:
            opacity *= 100.0

        # contentZoom 이 없거나 0이면 scale 사용 (zoom 0 은 허용하지 않음)
        content_zoom = scale
        if has_key(extra, "contentZoom"):
            zoom = to_float(lookup(extra, "contentZoom"), 0.0)
            if zoom != 0.0:
                content_zoom = zoom

        return cls(
            url=url if isinstance(url, str) else "",
            setup_resolution_x=to_int(lookup(extra, "setupResolutionX"), DEFAULT_SETUP_RESOLUTION[0]),
            setup_resolution_y=to_int(lookup(extra, "setupResolutionY"), DEFAULT_SETUP_RESOLUTION[1]),
            setup_x=to_int(lookup(extra, "setupX"), 0),
            setup_y=to_int(lookup(extra, "setupY"), 0),
            x=to_int(lookup(extra, "x"), 0),
            y=to_int(lookup(extra, "y"), 0),
            width=to_int(lookup(extra, "width"), DEFAULT_WIDTH),
            height=to_int(lookup(extra, "height"), DEFAULT_HEIGHT),
            opacity=opacity,
            scale=scale,
            content_zoom=content_zoom,
            duration_ms=to_int(lookup(extra, "durationMs"), 0),
            click_through=to_bool(lookup(extra, "clickThrough"), False),
            volume=to_float(lookup(extra, "volume"), DEFAULT_VOLUME),
        )

    def screen_position(self, screen_width: float, screen_height: float) -> Tuple[float, float]:
        """setupX/Y 를 기준 해상도에서 실제 화면 해상도로 환산한 좌상단 위치"""
        res_x = self.setup_resolution_x or DEFAULT_SETUP_RESOLUTION[0]
        res_y = self.setup_resolution_y or DEFAULT_SETUP_RESOLUTION[1]
        return (
            self.setup_x * (screen_width / res_x),
            self.setup_y * (screen_height / res_y),
        )

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class Command:
    """봉투 안쪽 JSON 에서 꺼낸 위젯 명령"""
    command_id: int = 0
    created_at: Optional[int] = None  # 중복 제거에만 사용
    overlay_config: Optional[OverlayConfig] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Command":
        extra = lookup(data, "extra")
        return cls(
            command_id=to_int(lookup(data, "id"), 0),
            created_at=to_optional_int(lookup(data, "createdAt")),
            overlay_config=OverlayConfig.from_extra(extra) if isinstance(extra, Mapping) else None,
        )

    @property
    def is_show(self) -> bool:
        return self.command_id == SHOW_ID

    @property
    def is_hide(self) -> bool:
        return self.command_id == HIDE_ID
