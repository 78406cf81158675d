"""표시 명령 중복 제거 (직전에 수락한 createdAt 하나만 기억)"""

import logging

from src.feed.models import Command

logger = logging.getLogger(__name__)


class Deduplicator:
    """
    직전에 수락한 표시 명령과 createdAt 이 같으면 버립니다.

    createdAt 이 없거나 0 이하인 명령은 비교하지 않고 항상 통과시킵니다.
    바로 앞 명령만 비교하므로, 다른 명령을 사이에 둔 중복은 걸러지지 않습니다.
    """

    def __init__(self):
        self.last_created_at = 0

    def accept(self, command: Command) -> bool:
        if not command.is_show:
            return True

        created_at = command.created_at
        if created_at is not None and created_at > 0 and created_at == self.last_created_at:
            logger.debug(f"중복 명령 무시 (createdAt={created_at})")
            return False

        self.last_created_at = created_at or 0
        return True
