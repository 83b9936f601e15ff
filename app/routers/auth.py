import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.database import get_db
from app.dependencies import get_current_user
from app.models.user import User
from app.schemas.auth import AdminLogin, AdminRegister, AdminResponse, TokenResponse
from app.services.auth_service import (
    authenticate_admin,
    create_access_token,
    create_admin,
    get_user_by_email,
    get_user_by_username,
    is_registration_allowed,
)

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register", response_model=AdminResponse, status_code=status.HTTP_201_CREATED)
async def register(body: AdminRegister, db: AsyncSession = Depends(get_db)):
    if not is_registration_allowed(str(body.email)):
        logger.warning("Refused admin registration for %s", body.email)
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Registration not allowed")
    if await get_user_by_email(db, str(body.email)):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Email already registered")
    if await get_user_by_username(db, body.username):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Username already taken")
    user = await create_admin(db, email=str(body.email), username=body.username, password=body.password)
    logger.info("Admin account %s registered", user.id)
    return user


@router.post("/login", response_model=TokenResponse)
async def login(body: AdminLogin, db: AsyncSession = Depends(get_db)):
    user = await authenticate_admin(db, email=str(body.email), password=body.password)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
        )
    return TokenResponse(
        access_token=create_access_token(user.id),
        expires_in=settings.access_token_expire_minutes * 60,
    )


@router.get("/me", response_model=AdminResponse)
async def me(current_user: User = Depends(get_current_user)):
    return current_user


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
async def logout(current_user: User = Depends(get_current_user)):
    # Tokens are not tracked server-side; the client drops its copy.
    return None
