from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from app.config import settings
from app.dependencies import get_twitch_client
from app.schemas.twitch import ClipResponse, LiveStatusResponse
from app.services.twitch_service import ChannelNotFound, TwitchAPIError, TwitchClient, TwitchNotConfigured

router = APIRouter(prefix="/twitch", tags=["twitch"])


def _raise_for(exc: Exception) -> None:
    if isinstance(exc, TwitchNotConfigured):
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc))
    if isinstance(exc, ChannelNotFound):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
    raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc))


@router.get("/status", response_model=LiveStatusResponse)
async def live_status(
    channel: Optional[str] = Query(None),
    client: TwitchClient = Depends(get_twitch_client),
):
    try:
        return await client.get_live_status(channel or settings.twitch_channel)
    except (TwitchNotConfigured, TwitchAPIError) as e:
        _raise_for(e)


@router.get("/clips", response_model=list[ClipResponse])
async def clips(
    channel: Optional[str] = Query(None),
    first: int = Query(6, ge=1, le=100),
    client: TwitchClient = Depends(get_twitch_client),
):
    try:
        return await client.get_clips(channel or settings.twitch_channel, first=first)
    except (TwitchNotConfigured, TwitchAPIError, ChannelNotFound) as e:
        _raise_for(e)
