"""
실행 설정. 프로젝트 루트 .env + 환경변수에서 읽음.

- NTFY_URL: 구독할 ntfy 토픽 URL (없으면 연결하지 않고 대기)
- NTFY_RECONNECT_DELAY: 재연결 대기 (초, 기본 2)
- OVERLAY_SETTLE_DELAY_MS: 이전 위젯을 닫고 새 위젯을 띄우기 전 대기 (기본 300)
- OVERLAY_CLOSE_DELAY_MS: 위젯을 닫은 뒤 대기 (기본 100)
- OVERLAY_HOST / OVERLAY_PORT: 브라우저 소스 서버 주소 (기본 127.0.0.1:8765)
- OVERLAY_SERVER: 0 이면 브라우저 소스 서버를 띄우지 않음
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from dotenv import load_dotenv

from src.feed.coercion import parse_float, parse_int, to_bool

logger = logging.getLogger(__name__)

_PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent


@dataclass
class AppSettings:
    ntfy_url: Optional[str] = None
    reconnect_delay: float = 2.0
    settle_delay: float = 0.3
    close_delay: float = 0.1
    overlay_host: str = "127.0.0.1"
    overlay_port: int = 8765
    overlay_server: bool = True


def _env_number(name: str, default, parse):
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    value = parse(raw)
    if value is None:
        logger.warning("환경변수 %s 값이 올바르지 않음 (%r), 기본값 %s 사용", name, raw, default)
        return default
    return value


def load_settings(env_path: Optional[Union[Path, str]] = None) -> AppSettings:
    """.env 로드 후 AppSettings 생성. 이미 설정된 환경변수가 우선."""
    load_dotenv(Path(env_path) if env_path else _PROJECT_ROOT / ".env")

    ntfy_url = (os.getenv("NTFY_URL") or "").strip() or None
    settle_ms = _env_number("OVERLAY_SETTLE_DELAY_MS", 300.0, parse_float)
    close_ms = _env_number("OVERLAY_CLOSE_DELAY_MS", 100.0, parse_float)
    return AppSettings(
        ntfy_url=ntfy_url,
        reconnect_delay=_env_number("NTFY_RECONNECT_DELAY", 2.0, parse_float),
        settle_delay=settle_ms / 1000.0,
        close_delay=close_ms / 1000.0,
        overlay_host=(os.getenv("OVERLAY_HOST") or "127.0.0.1").strip(),
        overlay_port=_env_number("OVERLAY_PORT", 8765, parse_int),
        overlay_server=to_bool(os.getenv("OVERLAY_SERVER"), True),
    )
