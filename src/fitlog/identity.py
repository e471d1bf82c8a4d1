"""Signed-in identity shared across the process.

The identity provider pushes the current user (or None) into an
IdentityCell; consumers subscribe and must call the returned unsubscribe
function on teardown so no callback fires into a view that is gone.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Mapping, Protocol

logger = logging.getLogger(__name__)

TOKEN_COOKIE = "fb_token"
UID_COOKIE = "uid"
COOKIE_MAX_AGE = 3600

PROTECTED_PREFIX = "/sessions"
LOGIN_PATH = "/login"
HOME_PATH = "/sessions"


@dataclass(frozen=True)
class CurrentUser:
    uid: str
    fetch_token: Callable[[bool], Awaitable[str]]
    email: str | None = None

    async def get_token(self, force_refresh: bool = False) -> str:
        return await self.fetch_token(force_refresh)


Listener = Callable[["CurrentUser | None"], None]
Unsubscribe = Callable[[], None]


class IdentityProvider(Protocol):
    """External identity service. Bad credentials raise AuthError."""

    async def sign_in(self, email: str, password: str) -> None: ...

    async def sign_up(self, email: str, password: str) -> None: ...

    async def sign_out(self) -> None: ...

    def on_change(self, listener: Listener) -> Unsubscribe:
        """Subscribe to identity changes; the listener first receives the current user."""
        ...


class IdentityCell:
    """Observable holder of the current user.

    `loading` stays True until the first value arrives. Listeners are called
    synchronously, in subscription order, on every `set()`.
    """

    def __init__(self) -> None:
        self._user: CurrentUser | None = None
        self._loading = True
        self._listeners: dict[int, Listener] = {}
        self._next_id = 0

    @property
    def current(self) -> CurrentUser | None:
        return self._user

    @property
    def loading(self) -> bool:
        return self._loading

    @property
    def listener_count(self) -> int:
        """Live subscriptions; lets a host check that its views detached."""
        return len(self._listeners)

    def subscribe(self, listener: Listener) -> Unsubscribe:
        token = self._next_id
        self._next_id += 1
        self._listeners[token] = listener

        def unsubscribe() -> None:
            self._listeners.pop(token, None)

        return unsubscribe

    def set(self, user: CurrentUser | None) -> None:
        self._user = user
        self._loading = False
        logger.debug("Identity changed", extra={"fitlog_user_id": user.uid if user else None})
        # snapshot: a listener may unsubscribe itself or others while we iterate
        for token, listener in list(self._listeners.items()):
            if token in self._listeners:
                listener(user)

    def bind(self, provider: IdentityProvider) -> Unsubscribe:
        """Feed provider change notifications into this cell.

        Hook for an embedding app that keeps one process-wide cell; the CLI
        reads the provider directly.
        """
        return provider.on_change(self.set)


def credential_cookies(user: CurrentUser | None, token: str | None = None) -> dict[str, tuple[str, int]]:
    """Cookies that mirror the signed-in state for the request gate.

    Maps cookie name -> (value, max_age); signed-out clears both with max_age 0.
    """
    if user is None or not token:
        return {TOKEN_COOKIE: ("", 0), UID_COOKIE: ("", 0)}
    return {TOKEN_COOKIE: (token, COOKIE_MAX_AGE), UID_COOKIE: (user.uid, COOKIE_MAX_AGE)}


def is_protected(path: str) -> bool:
    return path.startswith(PROTECTED_PREFIX)


def gate_request(path: str, cookies: Mapping[str, str]) -> str | None:
    """Redirect target for an unauthenticated request to a protected path, else None."""
    if is_protected(path) and not cookies.get(TOKEN_COOKIE):
        return LOGIN_PATH
    return None


def landing_path(user: CurrentUser | None) -> str:
    """Where the site root sends a visitor; used by an embedding web app."""
    return HOME_PATH if user else LOGIN_PATH
