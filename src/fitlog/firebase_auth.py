"""Email/password identity provider backed by the Firebase Auth REST API."""

from __future__ import annotations

import logging
import time
from typing import Any

import httpx

from .errors import AuthError
from .identity import CurrentUser, IdentityCell, Listener, Unsubscribe

logger = logging.getLogger(__name__)

IDENTITY_TOOLKIT_URL = "https://identitytoolkit.googleapis.com/v1"
SECURE_TOKEN_URL = "https://securetoken.googleapis.com/v1/token"

# refresh this many seconds before the provider-reported expiry
_EXPIRY_SLACK_SECONDS = 60


class FirebaseIdentityProvider:
    def __init__(self, api_key: str, *, client: httpx.AsyncClient | None = None) -> None:
        self.api_key = api_key
        self._client = client or httpx.AsyncClient()
        self._owns_client = client is None
        self._cell = IdentityCell()
        self._id_token: str | None = None
        self._refresh_token: str | None = None
        self._expires_at = 0.0
        # no persisted session: the provider starts settled and signed out
        self._cell.set(None)

    @property
    def current(self) -> CurrentUser | None:
        return self._cell.current

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    def on_change(self, listener: Listener) -> Unsubscribe:
        """Subscribe and immediately deliver the current user (or None)."""
        unsubscribe = self._cell.subscribe(listener)
        listener(self._cell.current)
        return unsubscribe

    async def sign_in(self, email: str, password: str) -> None:
        body = await self._post_account("signInWithPassword", email, password)
        self._establish(body)

    async def sign_up(self, email: str, password: str) -> None:
        body = await self._post_account("signUp", email, password)
        self._establish(body)

    async def sign_out(self) -> None:
        self._id_token = None
        self._refresh_token = None
        self._expires_at = 0.0
        self._cell.set(None)

    async def _post_account(self, action: str, email: str, password: str) -> dict[str, Any]:
        resp = await self._client.post(
            f"{IDENTITY_TOOLKIT_URL}/accounts:{action}",
            params={"key": self.api_key},
            json={"email": email, "password": password, "returnSecureToken": True},
        )
        if not resp.is_success:
            raise _auth_error(resp)
        return resp.json()

    def _establish(self, body: dict[str, Any]) -> None:
        self._id_token = body["idToken"]
        self._refresh_token = body.get("refreshToken")
        self._expires_at = time.monotonic() + float(body.get("expiresIn", 3600))
        user = CurrentUser(uid=body["localId"], fetch_token=self._fetch_token, email=body.get("email"))
        logger.info("Signed in", extra={"fitlog_user_id": user.uid})
        self._cell.set(user)

    async def _fetch_token(self, force_refresh: bool = False) -> str:
        if self._id_token is None:
            raise AuthError("Not signed in")
        fresh = time.monotonic() < self._expires_at - _EXPIRY_SLACK_SECONDS
        if fresh and not force_refresh:
            return self._id_token
        if not self._refresh_token:
            return self._id_token

        resp = await self._client.post(
            SECURE_TOKEN_URL,
            params={"key": self.api_key},
            data={"grant_type": "refresh_token", "refresh_token": self._refresh_token},
        )
        if not resp.is_success:
            raise _auth_error(resp)
        body = resp.json()
        self._id_token = body["id_token"]
        self._refresh_token = body.get("refresh_token", self._refresh_token)
        self._expires_at = time.monotonic() + float(body.get("expires_in", 3600))
        return self._id_token


def _auth_error(resp: httpx.Response) -> AuthError:
    try:
        error = resp.json().get("error") or {}
    except ValueError:
        error = {}
    message = error.get("message") if isinstance(error, dict) else None
    if not message:
        return AuthError(f"Authentication failed ({resp.status_code})")
    # e.g. "WEAK_PASSWORD : Password should be at least 6 characters"
    code = message.split(":", 1)[0].strip()
    return AuthError(message, code=code)
