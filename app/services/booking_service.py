"""Battle request workflow: submission and the pending -> confirmed | rejected lifecycle.

A request is created ``pending`` and is moved to a terminal status by whoever
holds its token. Re-applying the status a request already has is accepted and
re-sends the matching email; switching between the two terminal statuses is
refused, and nothing ever returns a request to ``pending``.
"""

import logging

from app.data.slots import is_valid_slot
from app.models.battle_request import ACTIVE_STATUSES, TERMINAL_STATUSES, BattleRequest, BattleStatus
from app.schemas.battle_request import BattleRequestCreate
from app.services.availability_service import ensure_slot_available
from app.services.exceptions import InvalidSlot, InvalidStatus, InvalidTransition, RequestNotFound
from app.services.request_store import RequestStore
from app.services.token_service import issue_token, redact_token
from app.tasks.outbox import STATUS_NOTIFICATIONS, NotificationKind, NotificationOutbox

logger = logging.getLogger(__name__)


def parse_target_status(value: str | BattleStatus) -> BattleStatus:
    try:
        status = BattleStatus(value)
    except ValueError:
        raise InvalidStatus(f"Status must be one of: confirmed, rejected (got '{value}')") from None
    if status not in TERMINAL_STATUSES:
        raise InvalidStatus(f"Status must be one of: confirmed, rejected (got '{status.value}')")
    return status


async def submit_request(
    store: RequestStore, outbox: NotificationOutbox, data: BattleRequestCreate
) -> BattleRequest:
    if not is_valid_slot(data.requested_time):
        raise InvalidSlot(f"'{data.requested_time}' is not a bookable time slot")

    await ensure_slot_available(store, data.requested_date, data.requested_time)

    request = BattleRequest(
        name=data.name,
        email=str(data.email),
        twitch_username=data.twitch_username,
        game=data.game,
        notes=data.notes or None,
        requested_date=data.requested_date,
        requested_time=data.requested_time,
        status=BattleStatus.pending,
        token=issue_token(),
    )
    request = await store.add(request)
    logger.info(
        "Battle request %s created for %s %s by %s",
        request.id,
        request.requested_date,
        request.requested_time,
        request.twitch_username,
    )
    outbox.enqueue(NotificationKind.new_request, request)
    return request


async def update_status(
    store: RequestStore,
    outbox: NotificationOutbox,
    token: str,
    new_status: str | BattleStatus,
) -> BattleRequest:
    target = parse_target_status(new_status)

    request = await store.get_by_token(token)
    if request is None:
        logger.info("Status update for unknown token %s", redact_token(token))
        raise RequestNotFound("Battle request not found")

    if request.status != BattleStatus.pending and request.status != target:
        raise InvalidTransition(f"Battle request is already {request.status.value}")

    request = await store.save_status(request, target)
    logger.info("Battle request %s is now %s", request.id, target.value)
    outbox.enqueue(STATUS_NOTIFICATIONS[target], request)
    return request


async def update_status_by_id(
    store: RequestStore,
    outbox: NotificationOutbox,
    request_id: int,
    new_status: str | BattleStatus,
) -> BattleRequest:
    target = parse_target_status(new_status)
    request = await store.get_by_id(request_id)
    if request is None:
        raise RequestNotFound("Battle request not found")
    return await update_status(store, outbox, request.token, target)


async def list_scheduled(store: RequestStore) -> list[BattleRequest]:
    return [r for r in await store.list_all() if r.status in ACTIVE_STATUSES]
