"""Built-in session templates for quick entry."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class SessionPreset:
    """Immutable bundle of session attributes applied to a new or edited form."""

    id: str
    label: str
    title: str
    duration: int  # minutes
    calories: int
    intensity: str  # Light, Moderate, Intense
    description: str
    source: str


HIIT_30 = SessionPreset(
    id="hiit30",
    label="HIIT 30 — intense intervals",
    title="HIIT Group Blast",
    duration=30,
    calories=350,
    intensity="Intense",
    description=(
        "Explosive intervals with minimal rest. Ideal for small group classes "
        "focused on speed and power."
    ),
    source="Coach program",
)

STRENGTH_45 = SessionPreset(
    id="strength45",
    label="Strength 45 — barbell circuit",
    title="Strength Circuit",
    duration=45,
    calories=420,
    intensity="Moderate",
    description=(
        "Partner-based lifts covering push, pull, and core. Includes timed "
        "stations and finisher."
    ),
    source="Gym template",
)

CONDITIONING_60 = SessionPreset(
    id="conditioning60",
    label="Conditioning 60 — endurance team",
    title="Conditioning Crew",
    duration=60,
    calories=500,
    intensity="Moderate",
    description=(
        "Mixed cardio blocks with sled pushes, rowers, and agility ladders for "
        "the whole squad."
    ),
    source="Conditioning board",
)

SESSION_PRESETS: tuple[SessionPreset, ...] = (HIIT_30, STRENGTH_45, CONDITIONING_60)


def find_preset(preset_id: str | None) -> SessionPreset | None:
    for preset in SESSION_PRESETS:
        if preset.id == preset_id:
            return preset
    return None


def match_preset_for_session(
    title: str,
    duration: int,
    intensity: str | None = None,
) -> SessionPreset | None:
    """Reverse-lookup the preset a stored session was most likely created from.

    Title and intensity compare case-insensitively, duration exactly. An empty
    intensity matches any preset intensity. The result only highlights the
    preset selector; it carries no authority over the stored record.
    """
    wanted_title = (title or "").lower()
    wanted_intensity = (intensity or "").lower()
    for preset in SESSION_PRESETS:
        if preset.title.lower() != wanted_title:
            continue
        if preset.duration != duration:
            continue
        if wanted_intensity and preset.intensity.lower() != wanted_intensity:
            continue
        return preset
    return None
