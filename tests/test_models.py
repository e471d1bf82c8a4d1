"""Tests for persisted record models."""

from datetime import date

import pytest
from pydantic import ValidationError

from fitlog.models import Profile, ProfileInput, Session, SessionInput


def _input(**overrides) -> SessionInput:
    defaults = dict(title="Evening lift", date="2025-03-10", duration=45)
    defaults.update(overrides)
    return SessionInput(**defaults)


class TestSessionInput:
    def test_defaults(self):
        data = _input()
        assert data.intensity == "Moderate"
        assert data.description == ""
        assert data.calories_burned is None
        assert data.source is None
        assert data.date == date(2025, 3, 10)

    def test_payload_is_json_ready(self):
        payload = _input(calories_burned=350, source="Garmin").to_payload()
        assert payload == {
            "title": "Evening lift",
            "date": "2025-03-10",
            "duration": 45,
            "description": "",
            "calories_burned": 350,
            "intensity": "Moderate",
            "source": "Garmin",
        }

    @pytest.mark.parametrize("duration", [0, -5])
    def test_duration_must_be_positive(self, duration):
        with pytest.raises(ValidationError):
            _input(duration=duration)

    def test_negative_calories_rejected(self):
        with pytest.raises(ValidationError):
            _input(calories_burned=-1)

    def test_blank_title_rejected(self):
        with pytest.raises(ValidationError, match="title must not be empty"):
            _input(title="   ")

    def test_intensity_normalized(self):
        assert _input(intensity="intense").intensity == "Intense"
        assert _input(intensity=None).intensity == "Moderate"

    def test_unknown_intensity_rejected(self):
        with pytest.raises(ValidationError):
            _input(intensity="Extreme")

    def test_blank_source_becomes_none(self):
        assert _input(source="").source is None

    def test_bad_date_rejected(self):
        with pytest.raises(ValidationError):
            _input(date="")


class TestSession:
    def test_numeric_id_is_coerced(self):
        session = Session(id=42, user_id="u1", title="t", date="2025-03-10", duration=30)
        assert session.id == "42"

    def test_extra_columns_ignored(self):
        session = Session(
            id="s1", user_id="u1", title="t", date="2025-03-10", duration=30, mood="great",
        )
        assert not hasattr(session, "mood")

    def test_integral_calories_keep_int(self):
        session = Session(
            id="s1", user_id="u1", title="t", date="2025-03-10", duration=30, calories_burned=350,
        )
        assert session.calories_burned == 350
        assert isinstance(session.calories_burned, int)

    def test_session_date(self):
        good = Session(id="s1", user_id="u1", title="t", date="2025-03-10", duration=30)
        bad = Session(id="s2", user_id="u1", title="t", date="yesterday", duration=30)
        assert good.session_date == date(2025, 3, 10)
        assert bad.session_date is None


class TestProfileModels:
    def test_profile_defaults(self):
        profile = Profile(user_id="u1")
        assert profile.height_cm is None
        assert profile.weight_kg is None
        assert profile.goal is None

    def test_profile_input_rejects_negative(self):
        with pytest.raises(ValidationError):
            ProfileInput(height_cm=-1)

    def test_profile_input_payload(self):
        payload = ProfileInput(height_cm=180, weight_kg=82.5, goal="Build muscle").to_payload()
        assert payload == {"height_cm": 180, "weight_kg": 82.5, "goal": "Build muscle"}

    def test_blank_goal_becomes_none(self):
        assert ProfileInput(goal="").goal is None
