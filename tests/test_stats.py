"""Tests for BMI and session aggregates."""

from datetime import date, timedelta

import pytest
from hypothesis import given
from hypothesis import strategies as st

from fitlog.models import Session
from fitlog.stats import SessionStats, bmi, bmi_category, session_stats, week_start

TODAY = date(2025, 3, 10)


def _session(**overrides) -> Session:
    defaults = dict(
        id="s1",
        user_id="u1",
        title="Session",
        date=TODAY.isoformat(),
        duration=30,
    )
    defaults.update(overrides)
    return Session(**defaults)


class TestBmi:
    def test_normal_reading(self):
        reading = bmi(175, 70)
        assert reading is not None
        assert reading.display == "22.9"
        assert reading.rounded == 22.9
        assert reading.category == "Normal"

    def test_accepts_form_strings(self):
        reading = bmi("180", " 100 ")
        assert reading is not None
        assert reading.display == "30.9"
        assert reading.category == "Obese"

    @pytest.mark.parametrize(
        "height, weight",
        [
            (None, 70),
            (175, None),
            ("", "70"),
            ("175", ""),
            ("abc", "70"),
            ("175", "heavy"),
            (0, 70),
            (-170, 70),
            ("0", "70"),
            (175, 0),
            ("nan", "70"),
        ],
    )
    def test_absent_for_unusable_input(self, height, weight):
        assert bmi(height, weight) is None

    @pytest.mark.parametrize(
        "value, category",
        [
            (10.0, "Underweight"),
            (18.49, "Underweight"),
            (18.5, "Normal"),
            (24.99, "Normal"),
            (25.0, "Overweight"),
            (29.99, "Overweight"),
            (30.0, "Obese"),
            (45.0, "Obese"),
        ],
    )
    def test_category_boundaries(self, value, category):
        assert bmi_category(value) == category

    @given(
        height=st.floats(min_value=50, max_value=250, allow_nan=False),
        weight=st.floats(min_value=20, max_value=300, allow_nan=False),
    )
    def test_formula(self, height, weight):
        reading = bmi(height, weight)
        expected = weight / ((height / 100) * (height / 100))
        assert reading is not None
        assert reading.value == pytest.approx(expected)
        assert reading.rounded == round(reading.value, 1)
        assert reading.category == bmi_category(reading.value)


class TestSessionStats:
    def test_empty_input_is_all_zero(self):
        assert session_stats([], today=TODAY) == SessionStats(0, 0, 0)

    def test_weekly_calories_exclude_older_sessions(self):
        sessions = [
            _session(id="a", date=TODAY.isoformat(), duration=30, calories_burned=100),
            _session(id="b", date=(TODAY - timedelta(days=3)).isoformat(), duration=45, calories_burned=200),
            _session(id="c", date=(TODAY - timedelta(days=10)).isoformat(), duration=60, calories_burned=300),
        ]
        stats = session_stats(sessions, today=TODAY)
        assert stats.total_sessions == 3
        assert stats.total_minutes == 135
        assert stats.weekly_calories == 300

    def test_window_is_inclusive_of_six_days_back(self):
        sessions = [
            _session(id="edge", date=(TODAY - timedelta(days=6)).isoformat(), calories_burned=50),
            _session(id="outside", date=(TODAY - timedelta(days=7)).isoformat(), calories_burned=70),
            _session(id="future", date=(TODAY + timedelta(days=1)).isoformat(), calories_burned=90),
        ]
        assert session_stats(sessions, today=TODAY).weekly_calories == 50

    def test_missing_calories_and_bad_dates_still_counted(self):
        sessions = [
            _session(id="a", duration=20, calories_burned=None),
            _session(id="b", date="not-a-date", duration=40, calories_burned=400),
            _session(id="c", duration=10, calories_burned=12.5),
        ]
        stats = session_stats(sessions, today=TODAY)
        assert stats.total_sessions == 3
        assert stats.total_minutes == 70
        assert stats.weekly_calories == 12.5

    def test_timestamp_dates_use_calendar_day(self):
        sessions = [_session(date=f"{TODAY.isoformat()}T18:30:00+00:00", calories_burned=80)]
        assert session_stats(sessions, today=TODAY).weekly_calories == 80

    def test_week_start(self):
        assert week_start(TODAY) == date(2025, 3, 4)
