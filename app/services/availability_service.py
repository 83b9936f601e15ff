"""Slot availability for a calendar date.

A slot is free unless a pending or confirmed request holds the same date and
slot label. The result always lists the full catalog in catalog order.
"""

import logging
from dataclasses import dataclass
from datetime import date, datetime, timezone

from app.data.slots import TIME_SLOTS
from app.services.exceptions import SlotConflict
from app.services.request_store import RequestStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SlotAvailability:
    time: str
    available: bool


def parse_requested_date(value: str | None) -> date | None:
    """Parse ``YYYY-MM-DD`` or a full ISO timestamp into a date key.

    Timestamps with an offset are normalised to UTC before the date is taken.
    Returns ``None`` for a missing or unparseable value.
    """
    if not value:
        return None
    try:
        if "T" not in value:
            return date.fromisoformat(value)
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        logger.warning("Ignoring unparseable date %r", value)
        return None
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc)
    return parsed.date()


async def check_availability(store: RequestStore, day: date | None) -> list[SlotAvailability]:
    # No date: report every slot free. The listing only drives the booking form;
    # the store constraint is what actually prevents double-booking.
    if day is None:
        return [SlotAvailability(time=slot, available=True) for slot in TIME_SLOTS]

    taken = {r.requested_time for r in await store.list_for_date(day) if r.is_active}
    logger.debug("Availability for %s: %d of %d slots taken", day, len(taken), len(TIME_SLOTS))
    return [SlotAvailability(time=slot, available=slot not in taken) for slot in TIME_SLOTS]


async def ensure_slot_available(store: RequestStore, day: date, slot: str) -> None:
    for entry in await check_availability(store, day):
        if entry.time == slot and not entry.available:
            raise SlotConflict(f"{slot} on {day.isoformat()} is already booked")
