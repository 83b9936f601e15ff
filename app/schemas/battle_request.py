from datetime import date, datetime, timezone
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from pydantic.alias_generators import to_camel

from app.data.slots import TIME_SLOTS, is_valid_slot
from app.models.battle_request import BattleStatus


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class BattleRequestCreate(CamelModel):
    name: str = Field(min_length=1, max_length=255)
    email: EmailStr
    twitch_username: str = Field(min_length=1, max_length=100)
    game: str = Field(min_length=1, max_length=255)
    notes: Optional[str] = None
    requested_date: date
    requested_time: str

    @field_validator("requested_date", mode="before")
    @classmethod
    def date_only(cls, v: Any) -> Any:
        # Browsers send the picked day as a full ISO timestamp; keep only the UTC date.
        if isinstance(v, datetime):
            return v.astimezone(timezone.utc).date() if v.tzinfo else v.date()
        if isinstance(v, str) and "T" in v:
            parsed = datetime.fromisoformat(v.replace("Z", "+00:00"))
            if parsed.tzinfo is not None:
                parsed = parsed.astimezone(timezone.utc)
            return parsed.date()
        return v

    @field_validator("requested_time")
    @classmethod
    def validate_slot(cls, v: str) -> str:
        if not is_valid_slot(v):
            raise ValueError(f"requestedTime must be one of: {', '.join(TIME_SLOTS)}")
        return v


class BattleRequestResponse(CamelModel):
    id: int
    name: str
    email: str
    twitch_username: str
    game: str
    notes: Optional[str]
    requested_date: date
    requested_time: str
    status: BattleStatus
    token: str
    created_at: datetime


class ScheduledBattleResponse(CamelModel):
    id: int
    name: str
    twitch_username: str
    game: str
    requested_date: date
    requested_time: str
    status: BattleStatus


class SlotAvailabilityResponse(CamelModel):
    time: str
    available: bool


class StatusUpdate(CamelModel):
    token: str = Field(min_length=1)
    status: str


class AdminStatusUpdate(CamelModel):
    status: str
