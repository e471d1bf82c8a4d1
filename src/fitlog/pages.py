"""Page-level load/submit handlers.

These are the immediate callers of SessionStore: each one awaits a single
round trip, turns a RequestError (or a rejected form) into a user-visible
message and never retries. Re-running a load handler is how a view
refreshes after a write.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Generic, TypeVar

from pydantic import ValidationError

from .errors import RequestError
from .forms import ProfileForm, SessionForm
from .models import Profile, Session
from .rest_client import SessionStore
from .stats import SessionStats, session_stats

logger = logging.getLogger(__name__)

T = TypeVar("T")

LIST_FAILED = "Failed to load sessions"
LOAD_FAILED = "Failed to load session"
CREATE_FAILED = "Could not save session"
UPDATE_FAILED = "Update failed"
DELETE_FAILED = "Delete failed"
NOT_FOUND = "Session not found"
PROFILE_LOAD_FAILED = "Failed to load profile"
PROFILE_SAVE_FAILED = "Save failed"
PROFILE_SAVED = "Profile saved"


@dataclass
class PageResult(Generic[T]):
    value: T | None = None
    error: str | None = None
    message: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class SessionsPage:
    items: list[Session] = field(default_factory=list)
    stats: SessionStats = field(default_factory=SessionStats)
    error: str | None = None


def _request_message(exc: RequestError, fallback: str) -> str:
    return str(exc) or fallback


def _validation_message(exc: ValidationError, fallback: str) -> str:
    errors = exc.errors()
    if not errors:
        return fallback
    first = errors[0]
    location = ".".join(str(part) for part in first.get("loc", ()))
    text = first.get("msg", fallback)
    return f"{location}: {text}" if location else text


async def load_sessions(store: SessionStore, uid: str, today: date | None = None) -> SessionsPage:
    try:
        items = await store.list_sessions(uid)
    except RequestError as exc:
        logger.warning("Session list failed: %s", exc, extra={"fitlog_user_id": uid})
        return SessionsPage(error=_request_message(exc, LIST_FAILED))
    return SessionsPage(items=items, stats=session_stats(items, today))


async def load_session(store: SessionStore, uid: str, session_id: str) -> PageResult[Session]:
    """Detail view. `value` is None with no error when the session does not exist."""
    try:
        return PageResult(value=await store.get_session(uid, session_id))
    except RequestError as exc:
        logger.warning("Session load failed: %s", exc, extra={"fitlog_user_id": uid})
        return PageResult(error=_request_message(exc, LOAD_FAILED))


async def submit_new_session(store: SessionStore, uid: str, form: SessionForm) -> PageResult[Session]:
    try:
        row = await store.create_session(uid, form.to_input())
    except ValidationError as exc:
        return PageResult(error=_validation_message(exc, CREATE_FAILED))
    except RequestError as exc:
        logger.warning("Session create failed: %s", exc, extra={"fitlog_user_id": uid})
        return PageResult(error=_request_message(exc, CREATE_FAILED))
    logger.info("Session %s created", row.id, extra={"fitlog_user_id": uid})
    return PageResult(value=row)


async def load_edit_form(store: SessionStore, uid: str, session_id: str) -> PageResult[SessionForm]:
    result = await load_session(store, uid, session_id)
    if not result.ok:
        return PageResult(error=result.error)
    if result.value is None:
        return PageResult(error=NOT_FOUND)
    return PageResult(value=SessionForm.from_session(result.value))


async def submit_session_edit(
    store: SessionStore,
    uid: str,
    session_id: str,
    form: SessionForm,
) -> PageResult[Session]:
    try:
        row = await store.update_session(uid, session_id, form.to_input())
    except ValidationError as exc:
        return PageResult(error=_validation_message(exc, UPDATE_FAILED))
    except RequestError as exc:
        logger.warning("Session update failed: %s", exc, extra={"fitlog_user_id": uid})
        return PageResult(error=_request_message(exc, UPDATE_FAILED))
    if row is None:
        return PageResult(error=NOT_FOUND)
    return PageResult(value=row)


async def remove_session(store: SessionStore, uid: str, session_id: str) -> PageResult[None]:
    try:
        await store.delete_session(uid, session_id)
    except RequestError as exc:
        logger.warning("Session delete failed: %s", exc, extra={"fitlog_user_id": uid})
        return PageResult(error=_request_message(exc, DELETE_FAILED))
    logger.info("Session %s deleted", session_id, extra={"fitlog_user_id": uid})
    return PageResult()


async def load_profile_form(store: SessionStore, uid: str) -> PageResult[ProfileForm]:
    """Profile editor state; on failure the form keeps its defaults alongside the error."""
    try:
        profile = await store.get_profile(uid)
    except RequestError as exc:
        logger.warning("Profile load failed: %s", exc, extra={"fitlog_user_id": uid})
        return PageResult(value=ProfileForm(), error=_request_message(exc, PROFILE_LOAD_FAILED))
    return PageResult(value=ProfileForm.from_profile(profile))


async def submit_profile(store: SessionStore, uid: str, form: ProfileForm) -> PageResult[Profile]:
    try:
        row = await store.upsert_profile(uid, form.to_input())
    except ValidationError as exc:
        return PageResult(error=_validation_message(exc, PROFILE_SAVE_FAILED))
    except RequestError as exc:
        logger.warning("Profile save failed: %s", exc, extra={"fitlog_user_id": uid})
        return PageResult(error=_request_message(exc, PROFILE_SAVE_FAILED))
    return PageResult(value=row, message=PROFILE_SAVED)
