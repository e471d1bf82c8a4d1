"""Editable form state and its reconciliation with persisted records.

Form fields are strings (numeric inputs included) plus selector/companion
pairs for option sets with a free-text escape ("Other" for source, "Custom"
for goal). Two directions:

    load:   Session / Profile  -> SessionForm / ProfileForm
    submit: SessionForm / ProfileForm -> SessionInput / ProfileInput

At the boundary a raw input is in one of three states: absent (None),
empty (blank string) or a value. Absent and empty both persist as null,
never as zero or an empty string.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Literal, Sequence

from .models import DEFAULT_INTENSITY, Profile, ProfileInput, Session, SessionInput
from .presets import SessionPreset, find_preset, match_preset_for_session
from .stats import BmiReading, bmi, to_number

OTHER_SOURCE = "Other"
DEFAULT_SOURCE = "Manual entry"
SOURCE_OPTIONS: tuple[str, ...] = (
    "Manual entry",
    "Apple Health",
    "Fitbit",
    "Garmin",
    "Trainer plan",
    "Coach program",
    "Gym template",
    "Conditioning board",
    OTHER_SOURCE,
)

CUSTOM_GOAL = "Custom"
DEFAULT_GOAL = "Maintain fitness"
GOAL_OPTIONS: tuple[str, ...] = (
    "Lose weight",
    "Build muscle",
    "Improve endurance",
    "Increase flexibility",
    "Maintain fitness",
    "Rehab / recovery",
    CUSTOM_GOAL,
)

CUSTOM_ENTRY = "custom"
DEFAULT_DURATION = 60
DURATION_QUICK_PICKS: tuple[int, ...] = (30, 45, 60, 75, 90)
CALORIE_QUICK_PICKS: tuple[int, ...] = (250, 350, 450, 550, 650)

FieldState = Literal["absent", "empty", "value"]


def field_state(raw: str | None) -> FieldState:
    if raw is None:
        return "absent"
    if not raw.strip():
        return "empty"
    return "value"


def parse_optional_number(raw: str | None) -> int | float | None:
    """Parse a numeric text input for storage.

    Absent, blank and non-numeric input become None. Negative numbers clamp
    to zero. Integral values come back as int so they serialize as `350`,
    not `350.0`.
    """
    if field_state(raw) != "value":
        return None
    number = to_number(raw)
    if number is None:
        return None
    number = max(0.0, number)
    return int(number) if number.is_integer() else number


def format_number(value: int | float | None) -> str:
    """Render a stored number back into a text input ("" for null)."""
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def resolve_choice(choice: str, free_text: str, escape: str) -> str | None:
    """Selector + companion text -> stored value (None when it resolves empty)."""
    resolved = free_text if choice == escape else choice
    return resolved or None


def decompose_choice(
    value: str | None,
    options: Sequence[str],
    escape: str,
    default: str,
) -> tuple[str, str]:
    """Stored value -> (selector, companion text)."""
    if value and value in options:
        return value, ""
    if value:
        return escape, value
    return default, ""


@dataclass
class SessionForm:
    """Editable state of the new/edit session form."""

    date: str
    title: str = ""
    duration: int = DEFAULT_DURATION
    description: str = ""
    calories: str = ""
    intensity: str = DEFAULT_INTENSITY
    source: str = DEFAULT_SOURCE
    other_source: str = ""
    selected_preset: str = ""

    @classmethod
    def blank(cls, today: date | None = None) -> SessionForm:
        return cls(date=(today or date.today()).isoformat())

    @classmethod
    def from_session(cls, session: Session) -> SessionForm:
        source, other_source = decompose_choice(
            session.source, SOURCE_OPTIONS, OTHER_SOURCE, DEFAULT_SOURCE,
        )
        matched = match_preset_for_session(session.title, session.duration, session.intensity)
        # timestamp-style dates edit as their calendar day
        day = session.session_date
        return cls(
            date=day.isoformat() if day else session.date,
            title=session.title,
            duration=session.duration,
            description=session.description or "",
            calories=format_number(session.calories_burned),
            intensity=session.intensity or DEFAULT_INTENSITY,
            source=source,
            other_source=other_source,
            selected_preset=matched.id if matched else "",
        )

    @property
    def preset(self) -> SessionPreset | None:
        return find_preset(self.selected_preset)

    def apply_preset(self, preset_id: str) -> SessionPreset | None:
        """Overwrite every preset-backed field at once.

        The selection is recorded even when the id is unknown, in which case
        the rest of the form is left untouched.
        """
        self.selected_preset = preset_id
        preset = find_preset(preset_id)
        if preset is None:
            return None
        self.title = preset.title
        self.duration = preset.duration
        self.calories = str(preset.calories)
        self.intensity = preset.intensity
        self.description = preset.description
        self.source, self.other_source = decompose_choice(
            preset.source, SOURCE_OPTIONS, OTHER_SOURCE, DEFAULT_SOURCE,
        )
        return preset

    def reset_to_custom(self) -> None:
        """Custom entry starts from schema defaults, not from whatever was typed."""
        self.selected_preset = CUSTOM_ENTRY
        self.title = ""
        self.duration = DEFAULT_DURATION
        self.calories = ""
        self.intensity = DEFAULT_INTENSITY
        self.description = ""
        self.source = DEFAULT_SOURCE
        self.other_source = ""

    def select(self, value: str) -> None:
        """Handle a change of the session-type selector."""
        if value == CUSTOM_ENTRY:
            self.reset_to_custom()
        else:
            self.apply_preset(value)

    @property
    def resolved_source(self) -> str | None:
        return resolve_choice(self.source, self.other_source, OTHER_SOURCE)

    def to_input(self) -> SessionInput:
        """Normalize the form into a write record.

        Raises pydantic.ValidationError when a required field is unusable.
        """
        return SessionInput(
            title=self.title,
            date=self.date,
            duration=self.duration,
            description=self.description,
            calories_burned=parse_optional_number(self.calories),
            intensity=self.intensity,
            source=self.resolved_source,
        )


@dataclass
class ProfileForm:
    height: str = ""
    weight: str = ""
    goal_choice: str = DEFAULT_GOAL
    custom_goal: str = ""

    @classmethod
    def from_profile(cls, profile: Profile | None) -> ProfileForm:
        if profile is None:
            return cls()
        goal_choice, custom_goal = decompose_choice(
            profile.goal, GOAL_OPTIONS, CUSTOM_GOAL, DEFAULT_GOAL,
        )
        return cls(
            height=format_number(profile.height_cm),
            weight=format_number(profile.weight_kg),
            goal_choice=goal_choice,
            custom_goal=custom_goal,
        )

    @property
    def resolved_goal(self) -> str | None:
        return resolve_choice(self.goal_choice, self.custom_goal, CUSTOM_GOAL)

    def bmi(self) -> BmiReading | None:
        return bmi(self.height, self.weight)

    def to_input(self) -> ProfileInput:
        return ProfileInput(
            height_cm=parse_optional_number(self.height),
            weight_kg=parse_optional_number(self.weight),
            goal=self.resolved_goal,
        )

