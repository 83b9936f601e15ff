import enum
from datetime import date, datetime

from sqlalchemy import Date, DateTime, Enum, Index, String, Text, func, text
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base


class BattleStatus(str, enum.Enum):
    pending = "pending"
    confirmed = "confirmed"
    rejected = "rejected"


# Statuses that occupy a slot. A rejected request frees its slot.
ACTIVE_STATUSES = (BattleStatus.pending, BattleStatus.confirmed)
TERMINAL_STATUSES = (BattleStatus.confirmed, BattleStatus.rejected)

ACTIVE_SLOT_INDEX = "uq_battle_requests_active_slot"
_ACTIVE_SLOT_WHERE = text("status IN ('pending', 'confirmed')")


class BattleRequest(Base):
    __tablename__ = "battle_requests"
    __table_args__ = (
        Index(
            ACTIVE_SLOT_INDEX,
            "requested_date",
            "requested_time",
            unique=True,
            postgresql_where=_ACTIVE_SLOT_WHERE,
            sqlite_where=_ACTIVE_SLOT_WHERE,
        ),
    )

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    twitch_username: Mapped[str] = mapped_column(String(100), nullable=False)
    game: Mapped[str] = mapped_column(String(255), nullable=False)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True, default=None)
    requested_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    requested_time: Mapped[str] = mapped_column(String(16), nullable=False)
    status: Mapped[BattleStatus] = mapped_column(
        Enum(BattleStatus), nullable=False, default=BattleStatus.pending
    )
    token: Mapped[str] = mapped_column(String(64), unique=True, nullable=False, index=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    @property
    def is_active(self) -> bool:
        return self.status in ACTIVE_STATUSES
