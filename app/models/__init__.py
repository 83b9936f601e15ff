from app.models.base import Base  # noqa: F401
from app.models.battle_request import ACTIVE_STATUSES, BattleRequest, BattleStatus  # noqa: F401
from app.models.user import User  # noqa: F401
