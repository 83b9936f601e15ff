"""Client for the Twitch Helix API.

Requests are authorised with an app access token from the client-credentials
grant. The token lives in a ``TwitchCredential`` owned by the client, which
fetches a new one when the current one has expired or been revoked.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any

import httpx

logger = logging.getLogger(__name__)

TWITCH_API_BASE = "https://api.twitch.tv/helix"
TWITCH_TOKEN_URL = "https://id.twitch.tv/oauth2/token"  # noqa: S105 - OAuth endpoint URL


class TwitchError(Exception):
    pass


class TwitchNotConfigured(TwitchError):
    pass


class TwitchAPIError(TwitchError):
    pass


class ChannelNotFound(TwitchError):
    pass


@dataclass(frozen=True)
class TwitchCredential:
    access_token: str
    expires_at: datetime

    def is_expired(self, now: datetime | None = None, leeway: timedelta = timedelta(seconds=60)) -> bool:
        now = now or datetime.now(timezone.utc)
        return now + leeway >= self.expires_at


class TwitchClient:
    def __init__(
        self,
        client_id: str,
        client_secret: str,
        http: httpx.AsyncClient | None = None,
    ):
        self.client_id = client_id
        self.client_secret = client_secret
        self._http = http or httpx.AsyncClient(timeout=10.0)
        self._credential: TwitchCredential | None = None

    @property
    def configured(self) -> bool:
        return bool(self.client_id and self.client_secret)

    async def aclose(self) -> None:
        await self._http.aclose()

    async def credential(self) -> TwitchCredential:
        if self._credential is None or self._credential.is_expired():
            self._credential = await self._request_credential()
        return self._credential

    async def _request_credential(self) -> TwitchCredential:
        if not self.configured:
            raise TwitchNotConfigured("Twitch API credentials not configured")

        try:
            response = await self._http.post(
                TWITCH_TOKEN_URL,
                params={
                    "client_id": self.client_id,
                    "client_secret": self.client_secret,
                    "grant_type": "client_credentials",
                },
            )
        except httpx.HTTPError as exc:
            raise TwitchAPIError(f"Twitch token request failed: {exc}") from exc
        if response.status_code != 200:
            logger.error("Twitch token request failed: %s %s", response.status_code, response.text)
            raise TwitchAPIError("Failed to authenticate with Twitch")

        data = response.json()
        expires_at = datetime.now(timezone.utc) + timedelta(seconds=int(data.get("expires_in", 0)))
        logger.info("Obtained Twitch app token valid until %s", expires_at.isoformat())
        return TwitchCredential(access_token=data["access_token"], expires_at=expires_at)

    async def _get(self, credential: TwitchCredential, path: str, params: dict[str, Any]) -> dict[str, Any]:
        try:
            return await self._get_with(credential, path, params)
        except _CredentialRejected:
            # Token revoked before its advertised expiry: fetch a new one and retry once.
            self._credential = None
            try:
                return await self._get_with(await self.credential(), path, params)
            except _CredentialRejected:
                logger.error("Twitch rejected a freshly issued app token on %s", path)
                raise TwitchAPIError("Twitch rejected a freshly issued app token") from None

    async def _get_with(self, credential: TwitchCredential, path: str, params: dict[str, Any]) -> dict[str, Any]:
        try:
            response = await self._http.get(
                f"{TWITCH_API_BASE}{path}",
                params=params,
                headers={
                    "Client-ID": self.client_id,
                    "Authorization": f"Bearer {credential.access_token}",
                },
            )
        except httpx.HTTPError as exc:
            raise TwitchAPIError(f"Twitch request to {path} failed: {exc}") from exc
        if response.status_code == 401:
            raise _CredentialRejected()
        if response.status_code != 200:
            logger.error("Twitch %s returned %s: %s", path, response.status_code, response.text)
            raise TwitchAPIError(f"Twitch request to {path} failed with {response.status_code}")
        return response.json()

    async def get_user(self, login: str) -> dict[str, Any]:
        data = await self._get(await self.credential(), "/users", {"login": login})
        users = data.get("data") or []
        if not users:
            raise ChannelNotFound(f"Twitch channel '{login}' not found")
        return users[0]

    async def get_live_status(self, channel: str) -> dict[str, Any]:
        data = await self._get(await self.credential(), "/streams", {"user_login": channel})
        streams = data.get("data") or []
        return {"channel": channel, "is_live": bool(streams), "stream": streams[0] if streams else None}

    async def get_clips(self, channel: str, first: int = 6) -> list[dict[str, Any]]:
        user = await self.get_user(channel)
        data = await self._get(
            await self.credential(), "/clips", {"broadcaster_id": user["id"], "first": first}
        )
        return [
            {
                "id": clip["id"],
                "title": clip.get("title", ""),
                "url": clip["url"],
                "thumbnail_url": clip.get("thumbnail_url", ""),
                "view_count": clip.get("view_count", 0),
                "duration": clip.get("duration", 0),
                "created_at": clip.get("created_at", ""),
            }
            for clip in data.get("data") or []
        ]


class _CredentialRejected(Exception):
    pass
