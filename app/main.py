import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exception_handlers import request_validation_exception_handler
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.config import settings
from app.database import create_tables
from app.routers import admin, auth, battle_requests, twitch
from app.services.twitch_service import TwitchClient

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    if settings.database_url.startswith("sqlite"):
        await create_tables()
    app.state.twitch_client = TwitchClient(settings.twitch_client_id, settings.twitch_client_secret)
    yield
    await app.state.twitch_client.aclose()


app = FastAPI(
    title="Battle Requests",
    description="Public battle scheduling form with a token-link approval workflow",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins.split(","),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth.router)
app.include_router(battle_requests.router)
app.include_router(admin.router)
app.include_router(twitch.router)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    # The booking form expects 400 with per-field errors.
    if request.url.path.startswith("/battle-requests"):
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"detail": jsonable_encoder(exc.errors())},
        )
    return await request_validation_exception_handler(request, exc)


@app.get("/health")
async def health_check():
    return {"status": "ok"}
