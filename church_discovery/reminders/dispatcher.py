from __future__ import annotations

import logging
from datetime import datetime
from enum import Enum
from typing import Protocol

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)


class NotificationKind(str, Enum):
    service_reminder = "service_reminder"
    holiday_service = "holiday_service"


class Notification(BaseModel):
    fire_at: datetime
    venue_id: str = Field(..., min_length=1)
    title: str
    body: str
    kind: NotificationKind = NotificationKind.service_reminder


class NotificationDispatcher(Protocol):
    def dispatch(self, notification: Notification) -> None: ...


class InMemoryDispatcher:
    """Keeps dispatched notifications, one pending reminder per venue."""

    def __init__(self) -> None:
        self._pending: dict[str, Notification] = {}

    def dispatch(self, notification: Notification) -> None:
        if notification.venue_id in self._pending:
            logger.info("Replacing pending reminder for venue %s", notification.venue_id)
        self._pending[notification.venue_id] = notification
        logger.info(
            "Reminder for venue %s scheduled at %s",
            notification.venue_id,
            notification.fire_at.isoformat(),
        )

    def pending(self) -> list[Notification]:
        return sorted(self._pending.values(), key=lambda n: n.fire_at)

    def cancel(self, venue_id: str) -> bool:
        return self._pending.pop(venue_id, None) is not None

    def clear(self) -> None:
        self._pending.clear()
