"""
Google OAuth token holder for the spreadsheet backend.

Owns the access token, refresh token, expiry and the signed-in email.
The consent flow itself happens outside this service; it only receives the
resulting tokens (from config or a callback) and keeps them fresh.
"""
import aiohttp
import asyncio
import logging
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional, Tuple

from landlord.errors import ConnectivityError, ReauthenticationRequiredError

TOKEN_URL = "https://oauth2.googleapis.com/token"
USERINFO_URL = "https://www.googleapis.com/oauth2/v2/userinfo"

# Refresh a little early so a request never starts with a token about to expire
EXPIRY_BUFFER = timedelta(minutes=5)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class GoogleTokenHolder:
    """Access/refresh token pair with transparent refresh.

    Usage:
        auth = GoogleTokenHolder.from_config(config)
        token = await auth.get_valid_token()
    """

    def __init__(
        self,
        client_id: Optional[str],
        client_secret: Optional[str] = None,
        access_token: Optional[str] = None,
        refresh_token: Optional[str] = None,
        expires_at: Optional[datetime] = None,
        user_email: Optional[str] = None,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.client_id = client_id
        self.client_secret = client_secret
        self.access_token = access_token
        self.refresh_token = refresh_token
        self.expires_at = expires_at
        self.user_email = user_email
        self.connected = bool(access_token or refresh_token)
        self._clock = clock

    @classmethod
    def from_config(cls, config) -> "GoogleTokenHolder":
        # Tokens from the environment carry no expiry: the first call refreshes
        return cls(
            client_id=config.GOOGLE_CLIENT_ID,
            client_secret=config.GOOGLE_CLIENT_SECRET,
            access_token=config.GOOGLE_ACCESS_TOKEN,
            refresh_token=config.GOOGLE_REFRESH_TOKEN,
            user_email=config.GOOGLE_USER_EMAIL,
        )

    def is_token_valid(self) -> bool:
        if not self.access_token or not self.expires_at:
            return False
        return self._clock() < self.expires_at - EXPIRY_BUFFER

    def is_connected(self) -> bool:
        if not self.connected:
            return False
        # An expired token still counts while a refresh token can renew it
        return self.is_token_valid() or bool(self.refresh_token)

    def user_info(self) -> dict:
        return {"email": self.user_email, "connected": self.is_connected()}

    def store_tokens(self, access_token: str, expires_in: int, refresh_token: Optional[str] = None) -> None:
        """Record a token response (consent callback or refresh)."""
        self.access_token = access_token
        self.expires_at = self._clock() + timedelta(seconds=int(expires_in))
        # Google omits the refresh token on refresh responses; keep the old one
        if refresh_token:
            self.refresh_token = refresh_token
        self.connected = True

    async def refresh_access_token(self) -> None:
        if not self.refresh_token:
            raise ReauthenticationRequiredError("No refresh token available. Please sign in again.")

        logging.info("Refreshing Google access token...")
        data = {
            "client_id": self.client_id or "",
            "refresh_token": self.refresh_token,
            "grant_type": "refresh_token",
        }
        if self.client_secret:
            data["client_secret"] = self.client_secret

        status, payload = await self._post_token(data)

        if status == 400 and payload.get("error") == "invalid_grant":
            logging.warning("Refresh token rejected, clearing stored auth")
            self.disconnect()
            raise ReauthenticationRequiredError("Session expired. Please sign in again.")

        if status != 200:
            reason = payload.get("error_description") or payload.get("error") or f"HTTP {status}"
            logging.error(f"Token refresh failed: {reason}")
            raise ConnectivityError(f"Token refresh failed: {reason}", status=status)

        self.store_tokens(
            payload["access_token"],
            payload.get("expires_in", 3600),
            payload.get("refresh_token"),
        )
        logging.info("Access token refreshed successfully")

    async def get_valid_token(self) -> str:
        """Current access token, refreshed first when it is expired or about to expire."""
        if not self.connected:
            raise ReauthenticationRequiredError("Not signed in to Google. Please authenticate first.")

        if not self.is_token_valid():
            await self.refresh_access_token()

        return self.access_token

    async def fetch_user_email(self) -> Optional[str]:
        token = await self.get_valid_token()
        try:
            async with aiohttp.ClientSession() as session:
                async with session.get(
                    USERINFO_URL,
                    headers={"Authorization": f"Bearer {token}"},
                    timeout=aiohttp.ClientTimeout(total=10)
                ) as resp:
                    if resp.status != 200:
                        logging.warning(f"Userinfo request failed: {resp.status}")
                        return None
                    data = await resp.json()
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise ConnectivityError(f"Userinfo request failed: {e!r}") from e

        self.user_email = data.get("email")
        return self.user_email

    def soft_disconnect(self) -> None:
        """Sign out but keep the refresh token for a quick reconnect."""
        self.connected = False
        self.access_token = None
        self.expires_at = None
        logging.info("Soft disconnect completed - refresh token preserved")

    def disconnect(self) -> None:
        self.connected = False
        self.access_token = None
        self.refresh_token = None
        self.expires_at = None
        self.user_email = None
        logging.info("Disconnected from Google")

    def can_auto_reconnect(self) -> bool:
        return bool(self.refresh_token) and not self.connected

    async def attempt_auto_reconnect(self) -> bool:
        if not self.can_auto_reconnect():
            return False
        try:
            await self.refresh_access_token()
        except (ReauthenticationRequiredError, ConnectivityError) as e:
            logging.error(f"Auto-reconnect failed: {e}")
            return False
        logging.info("Auto-reconnect successful")
        return True

    async def _post_token(self, data: dict) -> Tuple[int, dict]:
        try:
            async with aiohttp.ClientSession() as session:
                async with session.post(
                    TOKEN_URL,
                    data=data,
                    timeout=aiohttp.ClientTimeout(total=10)
                ) as resp:
                    try:
                        payload = await resp.json(content_type=None)
                    except ValueError:
                        payload = {}
                    return resp.status, payload or {}
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise ConnectivityError(f"Token endpoint unreachable: {e!r}") from e
