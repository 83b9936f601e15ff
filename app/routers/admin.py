from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, status

from app.dependencies import get_current_user, get_outbox, get_request_store
from app.schemas.battle_request import AdminStatusUpdate, BattleRequestResponse
from app.services.booking_service import update_status_by_id
from app.services.exceptions import InvalidStatus, InvalidTransition, RequestNotFound
from app.services.request_store import SqlRequestStore
from app.tasks.outbox import NotificationOutbox

router = APIRouter(prefix="/admin", tags=["admin"], dependencies=[Depends(get_current_user)])


@router.get("/battle-requests", response_model=list[BattleRequestResponse])
async def list_battle_requests(store: SqlRequestStore = Depends(get_request_store)):
    return await store.list_all()


@router.post("/battle-requests/{request_id}/status", response_model=BattleRequestResponse)
async def set_battle_request_status(
    request_id: int,
    body: AdminStatusUpdate,
    background_tasks: BackgroundTasks,
    store: SqlRequestStore = Depends(get_request_store),
    outbox: NotificationOutbox = Depends(get_outbox),
):
    try:
        request = await update_status_by_id(store, outbox, request_id, body.status)
    except InvalidStatus as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except RequestNotFound as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except InvalidTransition as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    background_tasks.add_task(outbox.flush)
    return request
