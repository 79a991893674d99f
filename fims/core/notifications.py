# fims/core/notifications.py

"""
사용자에게 노출되는 단일 알림 채널입니다.

저장소의 모든 변경 작업(add/update)은 성공 또는 실패를 정확히 한 번 이 채널에 기록합니다.
최근 알림은 제한된 크기의 deque에 보관되며 `/api/v1/notifications`로 조회할 수 있습니다.
"""

from collections import deque
from datetime import datetime, UTC
from enum import Enum
from typing import Deque, List
import logging

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)


class NotificationLevel(str, Enum):
    SUCCESS = "success"
    ERROR = "error"


class Notification(BaseModel):
    level: NotificationLevel
    message: str
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))


class NotificationCenter:
    def __init__(self, maxlen: int = 100):
        self._items: Deque[Notification] = deque(maxlen=maxlen)

    def success(self, message: str) -> Notification:
        return self._push(NotificationLevel.SUCCESS, message)

    def error(self, message: str) -> Notification:
        return self._push(NotificationLevel.ERROR, message)

    def _push(self, level: NotificationLevel, message: str) -> Notification:
        notification = Notification(level=level, message=message)
        self._items.append(notification)
        logger.debug(f"notification [{level.value}] {message}")
        return notification

    def recent(self, limit: int = 20) -> List[Notification]:
        """가장 최근 알림부터 반환합니다."""
        return list(reversed(self._items))[:limit]

    def clear(self) -> None:
        self._items.clear()
