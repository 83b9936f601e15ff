"""In-process notification outbox.

The booking workflow records the emails a change calls for by enqueuing
them here; the HTTP layer drains the outbox after the response has been
sent. Whether a notification is delivered never feeds back into the
request's status.
"""

import enum
import logging
from collections import deque
from dataclasses import dataclass

from app.models.battle_request import BattleRequest, BattleStatus
from app.services import notification_service

logger = logging.getLogger(__name__)


class NotificationKind(str, enum.Enum):
    new_request = "new_request"
    confirmed = "confirmed"
    rejected = "rejected"


STATUS_NOTIFICATIONS = {
    BattleStatus.confirmed: NotificationKind.confirmed,
    BattleStatus.rejected: NotificationKind.rejected,
}

_HANDLERS = {
    NotificationKind.new_request: "notify_new_request",
    NotificationKind.confirmed: "notify_request_confirmed",
    NotificationKind.rejected: "notify_request_rejected",
}


@dataclass
class Notification:
    kind: NotificationKind
    request: BattleRequest


class NotificationOutbox:
    def __init__(self) -> None:
        self._queue: deque[Notification] = deque()

    def __len__(self) -> int:
        return len(self._queue)

    @property
    def pending(self) -> list[Notification]:
        return list(self._queue)

    def enqueue(self, kind: NotificationKind, request: BattleRequest) -> None:
        self._queue.append(Notification(kind=kind, request=request))

    async def flush(self) -> int:
        """Dispatch every queued notification; return how many went out cleanly."""
        sent = 0
        while self._queue:
            notification = self._queue.popleft()
            handler = getattr(notification_service, _HANDLERS[notification.kind])
            try:
                await handler(notification.request)
            except Exception:
                logger.exception(
                    "Failed to dispatch %s notification for battle request %s",
                    notification.kind.value,
                    notification.request.id,
                )
                continue
            sent += 1
        return sent
