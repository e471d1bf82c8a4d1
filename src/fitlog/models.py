"""Persisted records for the `sessions` and `profiles` tables.

Read models (`Session`, `Profile`) accept rows as the backend stores them;
write models (`SessionInput`, `ProfileInput`) enforce the record invariants
before anything goes over the wire.
"""

from __future__ import annotations

from datetime import date as Date
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

INTENSITIES: tuple[str, ...] = ("Light", "Moderate", "Intense")
DEFAULT_INTENSITY = "Moderate"

Intensity = Literal["Light", "Moderate", "Intense"]
Number = int | float


def _normalize_non_empty(value: str, *, field_name: str) -> str:
    normalized = value.strip()
    if not normalized:
        raise ValueError(f"{field_name} must not be empty")
    return normalized


def _blank_to_none(value: str | None) -> str | None:
    if value is None or not value.strip():
        return None
    return value


def _coerce_identifier(value: Any) -> Any:
    # bigint / uuid primary keys both come back as JSON scalars
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return value


class Session(BaseModel):
    """A stored workout session, owned by `user_id`."""

    model_config = ConfigDict(extra="ignore")

    id: str
    user_id: str
    title: str
    date: str
    duration: int
    description: str | None = None
    calories_burned: Number | None = None
    intensity: str | None = None
    source: str | None = None
    created_at: str | None = None

    @field_validator("id", "user_id", mode="before")
    @classmethod
    def coerce_identifiers(cls, value: Any) -> Any:
        return _coerce_identifier(value)

    @property
    def session_date(self) -> Date | None:
        """Calendar date of the session, or None when the stored value is unparseable."""
        try:
            return Date.fromisoformat(self.date[:10])
        except (TypeError, ValueError):
            return None


class SessionInput(BaseModel):
    title: str
    date: Date
    duration: int = Field(gt=0)
    description: str = ""
    calories_burned: Number | None = Field(default=None, ge=0)
    intensity: Intensity = DEFAULT_INTENSITY
    source: str | None = None

    @field_validator("title")
    @classmethod
    def validate_title(cls, value: str) -> str:
        return _normalize_non_empty(value, field_name="title")

    @field_validator("intensity", mode="before")
    @classmethod
    def normalize_intensity(cls, value: Any) -> Any:
        if value is None or (isinstance(value, str) and not value.strip()):
            return DEFAULT_INTENSITY
        if isinstance(value, str):
            lowered = value.strip().lower()
            for known in INTENSITIES:
                if known.lower() == lowered:
                    return known
        return value

    @field_validator("source")
    @classmethod
    def normalize_source(cls, value: str | None) -> str | None:
        return _blank_to_none(value)

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(mode="json")


class Profile(BaseModel):
    """One row per user; `user_id` is the primary key."""

    model_config = ConfigDict(extra="ignore")

    user_id: str
    height_cm: Number | None = None
    weight_kg: Number | None = None
    goal: str | None = None
    updated_at: str | None = None

    @field_validator("user_id", mode="before")
    @classmethod
    def coerce_user_id(cls, value: Any) -> Any:
        return _coerce_identifier(value)


class ProfileInput(BaseModel):
    height_cm: Number | None = Field(default=None, ge=0)
    weight_kg: Number | None = Field(default=None, ge=0)
    goal: str | None = None

    @field_validator("goal")
    @classmethod
    def normalize_goal(cls, value: str | None) -> str | None:
        return _blank_to_none(value)

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(mode="json")
