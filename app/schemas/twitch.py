from typing import Any, Optional

from app.schemas.battle_request import CamelModel


class LiveStatusResponse(CamelModel):
    channel: str
    is_live: bool
    stream: Optional[dict[str, Any]] = None


class ClipResponse(CamelModel):
    id: str
    title: str
    url: str
    thumbnail_url: str
    view_count: int
    duration: float
    created_at: str
