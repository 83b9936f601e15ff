from fastapi import Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.models.user import User
from app.services.auth_service import decode_access_token, get_user_by_id
from app.services.request_store import SqlRequestStore
from app.services.twitch_service import TwitchClient
from app.tasks.outbox import NotificationOutbox

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/login")


async def get_current_user(
    token: str = Depends(oauth2_scheme),
    db: AsyncSession = Depends(get_db),
) -> User:
    credentials_error = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    user_id = decode_access_token(token)
    if user_id is None:
        raise credentials_error
    user = await get_user_by_id(db, user_id)
    if user is None:
        raise credentials_error
    return user


def get_request_store(db: AsyncSession = Depends(get_db)) -> SqlRequestStore:
    return SqlRequestStore(db)


def get_outbox() -> NotificationOutbox:
    return NotificationOutbox()


def get_twitch_client(request: Request) -> TwitchClient:
    # Created and closed by the app lifespan.
    client = getattr(request.app.state, "twitch_client", None)
    if client is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Twitch client is not available",
        )
    return client
