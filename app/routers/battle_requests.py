from html import escape
from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Query, status
from fastapi.responses import HTMLResponse

from app.dependencies import get_outbox, get_request_store
from app.schemas.battle_request import (
    BattleRequestCreate,
    BattleRequestResponse,
    ScheduledBattleResponse,
    SlotAvailabilityResponse,
    StatusUpdate,
)
from app.services.availability_service import check_availability, parse_requested_date
from app.services.booking_service import list_scheduled, submit_request, update_status
from app.services.exceptions import (
    InvalidSlot,
    InvalidStatus,
    InvalidTransition,
    RequestNotFound,
    SlotConflict,
)
from app.services.notification_service import format_battle_date
from app.services.request_store import SqlRequestStore
from app.tasks.outbox import NotificationOutbox

router = APIRouter(prefix="/battle-requests", tags=["battle-requests"])

LINK_ACTIONS = {"accept": "confirmed", "confirm": "confirmed", "reject": "rejected"}


def _result_page(title: str, message: str, status_code: int = status.HTTP_200_OK) -> HTMLResponse:
    content = (
        "<!DOCTYPE html><html><head><meta charset='utf-8'>"
        f"<title>{escape(title)}</title></head>"
        "<body style='font-family: sans-serif; max-width: 600px; margin: 40px auto;'>"
        f"<h1>{escape(title)}</h1>{message}</body></html>"
    )
    return HTMLResponse(content=content, status_code=status_code)


@router.post("", response_model=BattleRequestResponse, status_code=status.HTTP_201_CREATED)
async def create_battle_request(
    body: BattleRequestCreate,
    background_tasks: BackgroundTasks,
    store: SqlRequestStore = Depends(get_request_store),
    outbox: NotificationOutbox = Depends(get_outbox),
):
    try:
        request = await submit_request(store, outbox, body)
    except InvalidSlot as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except SlotConflict as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    background_tasks.add_task(outbox.flush)
    return request


@router.get("/availability", response_model=list[SlotAvailabilityResponse])
async def get_availability(
    date: Optional[str] = Query(None, description="Calendar date, YYYY-MM-DD"),
    store: SqlRequestStore = Depends(get_request_store),
):
    return await check_availability(store, parse_requested_date(date))


@router.get("/scheduled", response_model=list[ScheduledBattleResponse])
async def get_scheduled_battles(store: SqlRequestStore = Depends(get_request_store)):
    return await list_scheduled(store)


@router.post("/update-status", response_model=BattleRequestResponse)
async def update_battle_request_status(
    body: StatusUpdate,
    background_tasks: BackgroundTasks,
    store: SqlRequestStore = Depends(get_request_store),
    outbox: NotificationOutbox = Depends(get_outbox),
):
    try:
        request = await update_status(store, outbox, body.token, body.status)
    except InvalidStatus as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except RequestNotFound as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except InvalidTransition as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    background_tasks.add_task(outbox.flush)
    return request


@router.get("/confirm", response_class=HTMLResponse)
async def confirm_from_link(
    background_tasks: BackgroundTasks,
    token: str = Query(""),
    action: str = Query(""),
    store: SqlRequestStore = Depends(get_request_store),
    outbox: NotificationOutbox = Depends(get_outbox),
):
    """Accept/decline link embedded in the admin notification email."""
    if not token:
        return _result_page("Invalid link", "<p>Missing token parameter.</p>", status.HTTP_400_BAD_REQUEST)
    if action not in LINK_ACTIONS:
        return _result_page(
            "Invalid link",
            "<p>Action must be 'accept', 'confirm' or 'reject'.</p>",
            status.HTTP_400_BAD_REQUEST,
        )

    try:
        request = await update_status(store, outbox, token, LINK_ACTIONS[action])
    except RequestNotFound:
        return _result_page("Not found", "<p>Battle request not found.</p>", status.HTTP_404_NOT_FOUND)
    except InvalidTransition as e:
        return _result_page("Already decided", f"<p>{escape(str(e))}.</p>", status.HTTP_409_CONFLICT)
    background_tasks.add_task(outbox.flush)

    verdict = "Confirmed" if LINK_ACTIONS[action] == "confirmed" else "Rejected"
    details = (
        f"<p><strong>Name:</strong> {escape(request.name)}</p>"
        f"<p><strong>Twitch:</strong> {escape(request.twitch_username)}</p>"
        f"<p><strong>Date:</strong> {escape(format_battle_date(request.requested_date))}</p>"
        f"<p><strong>Time:</strong> {escape(request.requested_time)}</p>"
        f"<p><strong>Game:</strong> {escape(request.game)}</p>"
        f"<p>An email has been sent to {escape(request.email)}.</p>"
    )
    return _result_page(f"Battle Request {verdict}", details)
