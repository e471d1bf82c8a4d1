"""Derived read-only metrics: BMI and session aggregates."""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Iterable

from .models import Session

WEEK_WINDOW_DAYS = 7

BMI_UNDERWEIGHT = 18.5
BMI_NORMAL = 25.0
BMI_OVERWEIGHT = 30.0


@dataclass(frozen=True)
class BmiReading:
    value: float
    category: str

    @property
    def display(self) -> str:
        return f"{self.value:.1f}"

    @property
    def rounded(self) -> float:
        return round(self.value, 1)


@dataclass(frozen=True)
class SessionStats:
    total_sessions: int = 0
    total_minutes: int = 0
    weekly_calories: float = 0


def to_number(raw: object) -> float | None:
    """Best-effort numeric parse; None for missing, blank or non-numeric input."""
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, (int, float)):
        number = float(raw)
    else:
        text = str(raw).strip()
        if not text:
            return None
        try:
            number = float(text)
        except ValueError:
            return None
    if not math.isfinite(number):
        return None
    return number


def bmi_category(value: float) -> str:
    # lower bound inclusive, upper bound exclusive
    if value < BMI_UNDERWEIGHT:
        return "Underweight"
    if value < BMI_NORMAL:
        return "Normal"
    if value < BMI_OVERWEIGHT:
        return "Overweight"
    return "Obese"


def bmi(height_cm: object, weight_kg: object) -> BmiReading | None:
    """Body-mass index from height in centimeters and weight in kilograms.

    Accepts numbers or the raw strings typed into the profile form. Returns
    None unless both inputs are numeric and strictly positive.
    """
    height = to_number(height_cm)
    weight = to_number(weight_kg)
    if height is None or weight is None or height <= 0 or weight <= 0:
        return None
    meters = height / 100
    value = weight / (meters * meters)
    return BmiReading(value=value, category=bmi_category(value))


def week_start(today: date) -> date:
    """First day of the trailing 7-day window ending on (and including) today."""
    return today - timedelta(days=WEEK_WINDOW_DAYS - 1)


def session_stats(sessions: Iterable[Session], today: date | None = None) -> SessionStats:
    """Count, total minutes and trailing-week calories over a session list.

    Sessions without calories or with an unparseable date still count toward
    the totals, they are only left out of the weekly calorie sum.
    """
    items = list(sessions)
    if not items:
        return SessionStats()

    today = today or date.today()
    start = week_start(today)

    total_minutes = 0
    weekly_calories: float = 0
    for session in items:
        total_minutes += session.duration
        if session.calories_burned is None:
            continue
        day = session.session_date
        if day is None:
            continue
        if start <= day <= today:
            weekly_calories += session.calories_burned

    return SessionStats(
        total_sessions=len(items),
        total_minutes=total_minutes,
        weekly_calories=weekly_calories,
    )
