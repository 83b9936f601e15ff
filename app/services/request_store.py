"""Persistence for battle requests.

``RequestStore`` is the single interface the booking workflow talks to.
``SqlRequestStore`` backs it with the database; ``InMemoryRequestStore`` is a
drop-in used by tests. Both enforce the same two uniqueness rules: one token
per request, and at most one pending or confirmed request per date/slot.
"""

import logging
from datetime import date, datetime, timezone
from typing import Protocol

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.battle_request import ACTIVE_SLOT_INDEX, BattleRequest, BattleStatus
from app.services.exceptions import SlotConflict

logger = logging.getLogger(__name__)


class RequestStore(Protocol):
    async def add(self, request: BattleRequest) -> BattleRequest: ...

    async def get_by_token(self, token: str) -> BattleRequest | None: ...

    async def get_by_id(self, request_id: int) -> BattleRequest | None: ...

    async def list_all(self) -> list[BattleRequest]: ...

    async def list_for_date(self, day: date) -> list[BattleRequest]: ...

    async def save_status(self, request: BattleRequest, status: BattleStatus) -> BattleRequest: ...


def _is_active_slot_violation(exc: IntegrityError) -> bool:
    # PostgreSQL names the index; SQLite lists the indexed columns.
    message = str(exc.orig)
    return ACTIVE_SLOT_INDEX in message or "battle_requests.requested_time" in message


class SqlRequestStore:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def add(self, request: BattleRequest) -> BattleRequest:
        self.db.add(request)
        try:
            await self.db.commit()
        except IntegrityError as exc:
            await self.db.rollback()
            if not _is_active_slot_violation(exc):
                logger.error("Insert of battle request rejected: %s", exc.orig)
                raise
            logger.warning(
                "Slot %s %s already held by an active request",
                request.requested_date,
                request.requested_time,
            )
            raise SlotConflict(
                f"{request.requested_time} on {request.requested_date.isoformat()} is already booked"
            ) from exc
        await self.db.refresh(request)
        return request

    async def get_by_token(self, token: str) -> BattleRequest | None:
        result = await self.db.execute(select(BattleRequest).where(BattleRequest.token == token))
        return result.scalar_one_or_none()

    async def get_by_id(self, request_id: int) -> BattleRequest | None:
        result = await self.db.execute(select(BattleRequest).where(BattleRequest.id == request_id))
        return result.scalar_one_or_none()

    async def list_all(self) -> list[BattleRequest]:
        result = await self.db.execute(
            select(BattleRequest).order_by(BattleRequest.requested_date, BattleRequest.id)
        )
        return list(result.scalars().all())

    async def list_for_date(self, day: date) -> list[BattleRequest]:
        result = await self.db.execute(
            select(BattleRequest)
            .where(BattleRequest.requested_date == day)
            .order_by(BattleRequest.id)
        )
        return list(result.scalars().all())

    async def save_status(self, request: BattleRequest, status: BattleStatus) -> BattleRequest:
        request.status = status
        await self.db.commit()
        await self.db.refresh(request)
        return request


class InMemoryRequestStore:
    def __init__(self) -> None:
        self._rows: dict[int, BattleRequest] = {}
        self._next_id = 1

    def __len__(self) -> int:
        return len(self._rows)

    async def add(self, request: BattleRequest) -> BattleRequest:
        if any(r.token == request.token for r in self._rows.values()):
            raise ValueError("Duplicate battle request token")
        status = request.status or BattleStatus.pending
        if status != BattleStatus.rejected and self._slot_taken(request.requested_date, request.requested_time):
            raise SlotConflict(
                f"{request.requested_time} on {request.requested_date.isoformat()} is already booked"
            )
        request.id = self._next_id
        request.status = status
        request.created_at = datetime.now(timezone.utc)
        self._rows[request.id] = request
        self._next_id += 1
        return request

    async def get_by_token(self, token: str) -> BattleRequest | None:
        return next((r for r in self._rows.values() if r.token == token), None)

    async def get_by_id(self, request_id: int) -> BattleRequest | None:
        return self._rows.get(request_id)

    async def list_all(self) -> list[BattleRequest]:
        return sorted(self._rows.values(), key=lambda r: (r.requested_date, r.id))

    async def list_for_date(self, day: date) -> list[BattleRequest]:
        return [r for r in self._rows.values() if r.requested_date == day]

    async def save_status(self, request: BattleRequest, status: BattleStatus) -> BattleRequest:
        request.status = status
        return request

    def _slot_taken(self, day: date, slot: str) -> bool:
        return any(
            r.requested_date == day and r.requested_time == slot and r.is_active
            for r in self._rows.values()
        )
