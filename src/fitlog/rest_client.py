"""PostgREST client for the `sessions` and `profiles` tables.

Every operation is one HTTP round trip filtered by owner:

    GET    /sessions?user_id=eq.<uid>&select=*
    GET    /sessions?id=eq.<id>&user_id=eq.<uid>&select=*
    POST   /sessions                      Prefer: return=representation
    PATCH  /sessions?id=eq.<id>&user_id=eq.<uid>
    DELETE /sessions?id=eq.<id>&user_id=eq.<uid>
    GET    /profiles?user_id=eq.<uid>&select=*
    POST   /profiles                      Prefer: return=representation,resolution=merge-duplicates

No retries and no caching: a non-2xx status surfaces immediately as
RequestError and the caller decides what to show.
"""

from __future__ import annotations

import logging
import time
from typing import Any

import httpx

from .config import Config
from .errors import RequestError
from .models import Profile, ProfileInput, Session, SessionInput

logger = logging.getLogger(__name__)

SESSIONS_TABLE = "sessions"
PROFILES_TABLE = "profiles"

_RETURN_REPRESENTATION = "return=representation"
_MERGE_DUPLICATES = "return=representation,resolution=merge-duplicates"


def eq(value: str) -> str:
    """PostgREST equality predicate for a query parameter."""
    return f"eq.{value}"


def owner_filter(uid: str, record_id: str | None = None) -> dict[str, str]:
    params: dict[str, str] = {}
    if record_id is not None:
        params["id"] = eq(record_id)
    params["user_id"] = eq(uid)
    return params


class SessionStore:
    """Owner-scoped CRUD over the REST persistence endpoint.

    `token` is the signed-in user's bearer credential. It is only read, never
    refreshed here; when absent the API key doubles as the bearer.
    """

    def __init__(
        self,
        config: Config,
        *,
        token: str | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.config = config
        self._token = token
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            base_url=config.rest_base,
            timeout=config.request_timeout_seconds,
        )

    async def __aenter__(self) -> "SessionStore":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    def _headers(self, uid: str, prefer: str | None = None) -> dict[str, str]:
        headers = {
            "Content-Type": "application/json",
            "apikey": self.config.api_key,
            "Authorization": f"Bearer {self._token or self.config.api_key}",
            "X-User-Id": uid,
        }
        if prefer:
            headers["Prefer"] = prefer
        return headers

    async def _request(
        self,
        operation: str,
        method: str,
        table: str,
        uid: str,
        *,
        params: dict[str, str] | None = None,
        payload: dict[str, Any] | None = None,
        prefer: str | None = None,
    ) -> httpx.Response:
        started = time.monotonic()
        resp = await self._client.request(
            method,
            f"/{table}",
            params=params,
            json=payload,
            headers=self._headers(uid, prefer),
        )
        duration_ms = round((time.monotonic() - started) * 1000, 1)
        extra = {
            "fitlog_operation": operation,
            "fitlog_status": resp.status_code,
            "fitlog_duration_ms": duration_ms,
            "fitlog_user_id": uid,
        }
        if not resp.is_success:
            logger.warning("%s %s failed with HTTP %d", method, table, resp.status_code, extra=extra)
            raise RequestError(resp.status_code, operation)
        logger.debug("%s %s -> %d", method, table, resp.status_code, extra=extra)
        return resp

    @staticmethod
    def _rows(resp: httpx.Response) -> list[dict[str, Any]]:
        body = resp.json() if resp.content else []
        if isinstance(body, dict):
            return [body]
        return list(body or [])

    # --- sessions ---

    async def list_sessions(self, uid: str) -> list[Session]:
        resp = await self._request(
            "List", "GET", SESSIONS_TABLE, uid,
            params={**owner_filter(uid), "select": "*"},
        )
        return [Session.model_validate(row) for row in self._rows(resp)]

    async def get_session(self, uid: str, session_id: str) -> Session | None:
        resp = await self._request(
            "Get", "GET", SESSIONS_TABLE, uid,
            params={**owner_filter(uid, session_id), "select": "*"},
        )
        rows = self._rows(resp)
        return Session.model_validate(rows[0]) if rows else None

    async def create_session(self, uid: str, data: SessionInput) -> Session:
        resp = await self._request(
            "Create", "POST", SESSIONS_TABLE, uid,
            payload={**data.to_payload(), "user_id": uid},
            prefer=_RETURN_REPRESENTATION,
        )
        rows = self._rows(resp)
        if not rows:
            raise RequestError(resp.status_code, "Create")
        return Session.model_validate(rows[0])

    async def update_session(self, uid: str, session_id: str, data: SessionInput) -> Session | None:
        """PATCH the owner's row. Returns None when the filter matched nothing."""
        resp = await self._request(
            "Update", "PATCH", SESSIONS_TABLE, uid,
            params=owner_filter(uid, session_id),
            payload=data.to_payload(),
            prefer=_RETURN_REPRESENTATION,
        )
        rows = self._rows(resp)
        if not rows:
            logger.info("Update matched no rows for session %s", session_id, extra={"fitlog_user_id": uid})
            return None
        return Session.model_validate(rows[0])

    async def delete_session(self, uid: str, session_id: str) -> None:
        await self._request(
            "Delete", "DELETE", SESSIONS_TABLE, uid,
            params=owner_filter(uid, session_id),
        )

    # --- profiles ---

    async def get_profile(self, uid: str) -> Profile | None:
        resp = await self._request(
            "Profile load", "GET", PROFILES_TABLE, uid,
            params={**owner_filter(uid), "select": "*"},
        )
        rows = self._rows(resp)
        return Profile.model_validate(rows[0]) if rows else None

    async def upsert_profile(self, uid: str, data: ProfileInput) -> Profile:
        resp = await self._request(
            "Profile save", "POST", PROFILES_TABLE, uid,
            payload={**data.to_payload(), "user_id": uid},
            prefer=_MERGE_DUPLICATES,
        )
        rows = self._rows(resp)
        if not rows:
            raise RequestError(resp.status_code, "Profile save")
        return Profile.model_validate(rows[0])
