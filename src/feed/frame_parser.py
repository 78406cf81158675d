"""
스트림 프레임 파싱 및 필터링

한 줄(JSON 봉투) → 봉투 안 message(JSON 문자열) → Command 순서로 두 번 풀어냅니다.
어느 단계에서든 실패하면 None 을 반환하고 로그만 남깁니다 (수신 루프는 계속).
"""

import json
import logging
from typing import Any, Optional

from .models import VALID_COMMAND_IDS, Command, Envelope

logger = logging.getLogger(__name__)


class FrameDecoder:
    """ntfy 프레임 디코더"""

    def parse_envelope(self, line: str) -> Optional[Envelope]:
        """
        한 줄을 봉투로 파싱

        Returns:
            Envelope 또는 None (JSON 오류 / 객체가 아님)
        """
        try:
            data = json.loads(line)
        except (ValueError, RecursionError) as e:
            logger.debug(f"봉투 JSON 파싱 오류: {e}, 원본: {line[:100]}")
            return None
        if not isinstance(data, dict):
            logger.debug(f"봉투가 JSON 객체가 아님: {line[:100]}")
            return None
        try:
            return Envelope.from_dict(data)
        except ValueError as e:
            logger.debug(f"봉투 형식 오류: {e}")
            return None

    def parse_command(self, payload: str) -> Optional[Command]:
        """
        봉투 message 안의 JSON 을 Command 로 파싱

        payload 가 '[' 로 시작하면 배열로 보고 첫 번째 요소만 사용합니다.
        """
        try:
            data: Any = json.loads(payload)
        except (ValueError, RecursionError) as e:
            logger.debug(f"명령 JSON 파싱 오류: {e}, 원본: {payload[:100]}")
            return None

        if payload.lstrip().startswith("["):
            if not isinstance(data, list) or not data:
                logger.debug("명령 배열이 비어 있음")
                return None
            logger.debug(f"명령 배열 수신 ({len(data)}개), 첫 요소만 사용")
            data = data[0]

        if not isinstance(data, dict):
            logger.debug(f"명령이 JSON 객체가 아님: {payload[:100]}")
            return None
        return Command.from_dict(data)

    def filter(self, command: Command) -> bool:
        """
        명령 필터링

        Returns:
            True: 통과 (표시/숨김 명령), False: 무시
        """
        if command.command_id not in VALID_COMMAND_IDS:
            logger.debug(f"무시: ID={command.command_id} (표시/숨김 명령 아님)")
            return False
        if command.is_show and command.overlay_config is None:
            logger.debug("무시: 표시 명령에 extra 없음")
            return False
        return True

    def decode(self, line: str) -> Optional[Command]:
        """
        봉투 파싱 + 명령 파싱 + 필터링을 한 번에 수행

        Returns:
            통과한 Command 또는 None
        """
        envelope = self.parse_envelope(line)
        if envelope is None:
            return None
        if not envelope.is_message:
            # keepalive, open 등 서비스 메시지
            return None

        command = self.parse_command(envelope.message)
        if command is None:
            return None
        if not self.filter(command):
            return None

        logger.debug(
            f"명령 수신: ID={command.command_id}, createdAt={command.created_at}, "
            f"extra={command.overlay_config is not None}"
        )
        return command
