"""Workflow tests for submission, availability and status transitions.

Most tests run against the in-memory store; the race tests also run against
the SQLite-backed store to check the database constraint.
"""

from datetime import date

import pytest
from pydantic import ValidationError
from sqlalchemy.exc import IntegrityError

from app.data.slots import TIME_SLOTS
from app.models.battle_request import BattleStatus
from app.schemas.battle_request import BattleRequestCreate
from app.services import booking_service
from app.services.availability_service import check_availability
from app.services.booking_service import (
    list_scheduled,
    submit_request,
    update_status,
    update_status_by_id,
)
from app.services.exceptions import (
    InvalidSlot,
    InvalidStatus,
    InvalidTransition,
    RequestNotFound,
    SlotConflict,
)
from app.services.request_store import SqlRequestStore
from app.tasks.outbox import NotificationKind

BATTLE_DATE = date(2024, 6, 1)


def make_submission(**overrides) -> BattleRequestCreate:
    data = {
        "name": "Ash",
        "email": "ash@example.com",
        "twitchUsername": "ash_k",
        "game": "Pokemon Showdown",
        "requestedDate": "2024-06-01",
        "requestedTime": "5:00 PM",
    }
    data.update(overrides)
    return BattleRequestCreate(**data)


def availability_map(entries) -> dict[str, bool]:
    return {e.time: e.available for e in entries}


class TestSubmit:
    async def test_submit_creates_pending_request_with_token(self, memory_store, outbox):
        request = await submit_request(memory_store, outbox, make_submission())

        assert request.id is not None
        assert request.status == BattleStatus.pending
        assert len(request.token) == 64
        assert request.created_at is not None
        assert [n.kind for n in outbox.pending] == [NotificationKind.new_request]

    async def test_each_request_gets_its_own_token(self, memory_store, outbox):
        first = await submit_request(memory_store, outbox, make_submission(requestedTime="2:00 PM"))
        second = await submit_request(memory_store, outbox, make_submission(requestedTime="3:00 PM"))
        assert first.token != second.token

    async def test_empty_notes_stored_as_none(self, memory_store, outbox):
        request = await submit_request(memory_store, outbox, make_submission(notes=""))
        assert request.notes is None

    async def test_unknown_slot_rejected_by_schema(self):
        with pytest.raises(ValidationError):
            make_submission(requestedTime="4:30 PM")

    async def test_unknown_slot_rejected_by_service(self, memory_store, outbox):
        data = BattleRequestCreate.model_construct(
            name="Ash",
            email="ash@example.com",
            twitch_username="ash_k",
            game="Chess",
            notes=None,
            requested_date=BATTLE_DATE,
            requested_time="4:30 PM",
        )
        with pytest.raises(InvalidSlot):
            await submit_request(memory_store, outbox, data)
        assert len(memory_store) == 0
        assert len(outbox) == 0

    async def test_occupied_slot_raises_conflict(self, memory_store, outbox):
        await submit_request(memory_store, outbox, make_submission())
        with pytest.raises(SlotConflict):
            await submit_request(memory_store, outbox, make_submission(name="Misty"))
        assert len(memory_store) == 1


class TestAvailability:
    async def test_returns_full_catalog_in_order(self, memory_store, outbox):
        for slot in ("9:00 PM", "2:00 PM", "6:00 PM"):
            await submit_request(memory_store, outbox, make_submission(requestedTime=slot))

        entries = await check_availability(memory_store, BATTLE_DATE)
        assert [e.time for e in entries] == list(TIME_SLOTS)

    async def test_no_date_reports_everything_available(self, memory_store, outbox):
        await submit_request(memory_store, outbox, make_submission())
        entries = await check_availability(memory_store, None)
        assert len(entries) == 10
        assert all(e.available for e in entries)

    async def test_other_dates_do_not_block(self, memory_store, outbox):
        await submit_request(memory_store, outbox, make_submission(requestedDate="2024-06-02"))
        entries = await check_availability(memory_store, BATTLE_DATE)
        assert all(e.available for e in entries)

    async def test_timestamp_input_is_reduced_to_date(self, memory_store, outbox):
        await submit_request(memory_store, outbox, make_submission(requestedDate="2024-06-01T00:00:00.000Z"))
        slots = availability_map(await check_availability(memory_store, BATTLE_DATE))
        assert slots["5:00 PM"] is False

    async def test_confirmed_request_keeps_slot_taken(self, memory_store, outbox):
        request = await submit_request(memory_store, outbox, make_submission())
        await update_status(memory_store, outbox, request.token, "confirmed")
        slots = availability_map(await check_availability(memory_store, BATTLE_DATE))
        assert slots["5:00 PM"] is False


class TestScenarios:
    async def test_pending_request_blocks_only_its_slot(self, memory_store, outbox):
        request = await submit_request(memory_store, outbox, make_submission())
        assert request.status == BattleStatus.pending

        slots = availability_map(await check_availability(memory_store, BATTLE_DATE))
        assert slots["5:00 PM"] is False
        assert sum(slots.values()) == 9

    async def test_rejection_frees_the_slot(self, memory_store, outbox):
        request = await submit_request(memory_store, outbox, make_submission())
        await update_status(memory_store, outbox, request.token, "rejected")

        slots = availability_map(await check_availability(memory_store, BATTLE_DATE))
        assert slots["5:00 PM"] is True

        # And the freed slot can be booked again.
        again = await submit_request(memory_store, outbox, make_submission(name="Brock"))
        assert again.status == BattleStatus.pending

    async def test_unknown_token_is_not_found_and_mutates_nothing(self, memory_store, outbox):
        request = await submit_request(memory_store, outbox, make_submission())
        outbox_before = len(outbox)

        with pytest.raises(RequestNotFound):
            await update_status(memory_store, outbox, "nonexistent-token", "confirmed")

        assert request.status == BattleStatus.pending
        assert len(outbox) == outbox_before

    async def test_concurrent_submissions_cannot_double_book(self, memory_store, outbox, monkeypatch):
        async def slot_always_free(store, day, slot):
            return None

        # Both submissions pass the availability pre-check, as if interleaved.
        monkeypatch.setattr(booking_service, "ensure_slot_available", slot_always_free)

        await submit_request(memory_store, outbox, make_submission(name="First"))
        with pytest.raises(SlotConflict):
            await submit_request(memory_store, outbox, make_submission(name="Second"))

        active = [r for r in await memory_store.list_all() if r.is_active]
        assert len(active) == 1

    async def test_concurrent_submissions_cannot_double_book_in_database(
        self, db_session, outbox, monkeypatch
    ):
        async def slot_always_free(store, day, slot):
            return None

        monkeypatch.setattr(booking_service, "ensure_slot_available", slot_always_free)
        store = SqlRequestStore(db_session)

        await submit_request(store, outbox, make_submission(name="First"))
        with pytest.raises(SlotConflict):
            await submit_request(store, outbox, make_submission(name="Second"))

        requests = await store.list_all()
        assert [r.name for r in requests] == ["First"]


class TestSqlStoreErrors:
    async def test_token_collision_is_not_reported_as_slot_conflict(self, db_session, outbox, monkeypatch):
        monkeypatch.setattr(booking_service, "issue_token", lambda: "cd" * 32)
        store = SqlRequestStore(db_session)

        await submit_request(store, outbox, make_submission(requestedTime="2:00 PM"))
        with pytest.raises(IntegrityError):
            await submit_request(store, outbox, make_submission(requestedTime="3:00 PM"))

        requests = await store.list_all()
        assert [r.requested_time for r in requests] == ["2:00 PM"]


class TestStatusTransitions:
    async def test_confirm_pending_request(self, memory_store, outbox):
        request = await submit_request(memory_store, outbox, make_submission())
        updated = await update_status(memory_store, outbox, request.token, "confirmed")
        assert updated.status == BattleStatus.confirmed
        assert outbox.pending[-1].kind == NotificationKind.confirmed

    async def test_reject_pending_request(self, memory_store, outbox):
        request = await submit_request(memory_store, outbox, make_submission())
        updated = await update_status(memory_store, outbox, request.token, BattleStatus.rejected)
        assert updated.status == BattleStatus.rejected
        assert outbox.pending[-1].kind == NotificationKind.rejected

    async def test_confirm_twice_is_idempotent(self, memory_store, outbox):
        request = await submit_request(memory_store, outbox, make_submission())
        await update_status(memory_store, outbox, request.token, "confirmed")
        again = await update_status(memory_store, outbox, request.token, "confirmed")

        assert again.status == BattleStatus.confirmed
        kinds = [n.kind for n in outbox.pending]
        assert kinds.count(NotificationKind.confirmed) == 2

    async def test_reject_twice_is_idempotent(self, memory_store, outbox):
        request = await submit_request(memory_store, outbox, make_submission())
        await update_status(memory_store, outbox, request.token, "rejected")
        again = await update_status(memory_store, outbox, request.token, "rejected")
        assert again.status == BattleStatus.rejected

    async def test_cannot_switch_between_terminal_statuses(self, memory_store, outbox):
        request = await submit_request(memory_store, outbox, make_submission())
        await update_status(memory_store, outbox, request.token, "confirmed")
        queued = len(outbox)

        with pytest.raises(InvalidTransition):
            await update_status(memory_store, outbox, request.token, "rejected")
        assert request.status == BattleStatus.confirmed
        assert len(outbox) == queued

    @pytest.mark.parametrize("value", ["pending", "approved", "", "CONFIRMED"])
    async def test_invalid_status_rejected_before_lookup(self, memory_store, outbox, value):
        # Unknown token as well: validation must win over not-found.
        with pytest.raises(InvalidStatus):
            await update_status(memory_store, outbox, "nonexistent-token", value)

    async def test_update_by_id(self, memory_store, outbox):
        request = await submit_request(memory_store, outbox, make_submission())
        updated = await update_status_by_id(memory_store, outbox, request.id, "confirmed")
        assert updated.status == BattleStatus.confirmed

    async def test_update_by_unknown_id(self, memory_store, outbox):
        with pytest.raises(RequestNotFound):
            await update_status_by_id(memory_store, outbox, 999, "confirmed")


class TestScheduled:
    async def test_scheduled_lists_only_active_requests(self, memory_store, outbox):
        kept = await submit_request(memory_store, outbox, make_submission(requestedTime="2:00 PM"))
        dropped = await submit_request(memory_store, outbox, make_submission(requestedTime="3:00 PM"))
        await update_status(memory_store, outbox, dropped.token, "rejected")

        scheduled = await list_scheduled(memory_store)
        assert [r.id for r in scheduled] == [kept.id]
