"""Tests for calendar_engine/config_models.py

Config is read from args/calendar.yaml and validated with pydantic.
An invalid file falls back to defaults rather than crashing.
"""

import pytest
from pydantic import ValidationError

from calendar_engine import config_models
from calendar_engine.config_models import (
    CalendarConfig,
    PolicyConfig,
    StorageConfig,
    WorkingHoursConfig,
    load_and_validate,
)


class TestDefaults:
    def test_policy_defaults(self):
        policy = CalendarConfig().policy

        assert policy.off_days == ["friday", "saturday"]
        assert policy.off_weekdays == frozenset({4, 5})
        assert policy.grace_minutes == 15

    def test_working_hours_defaults(self):
        hours = CalendarConfig().working_hours

        assert (hours.start_hour, hours.end_hour, hours.slot_step_minutes) == (9, 17, 30)

    def test_suggestion_defaults(self):
        suggestions = CalendarConfig().suggestions

        assert suggestions.max_results == 5
        assert suggestions.horizon_days == 7
        assert suggestions.scoring.morning_bonus == 20

    def test_shipped_yaml_matches_defaults(self):
        assert load_and_validate("calendar").model_dump() == CalendarConfig().model_dump()


class TestValidation:
    def test_weekday_names_normalized(self):
        policy = PolicyConfig(off_days=[" Sunday "])

        assert policy.off_days == ["sunday"]
        assert policy.off_weekdays == frozenset({6})

    def test_unknown_weekday_rejected(self):
        with pytest.raises(ValidationError):
            PolicyConfig(off_days=["funday"])

    def test_empty_working_window_rejected(self):
        with pytest.raises(ValidationError):
            WorkingHoursConfig(start_hour=17, end_hour=9)

    def test_unknown_backend_rejected(self):
        with pytest.raises(ValidationError):
            StorageConfig(backend="postgres")

    def test_nested_override(self):
        config = CalendarConfig.model_validate({"suggestions": {"scoring": {"late_penalty": 30}}})

        assert config.suggestions.scoring.late_penalty == 30
        assert config.suggestions.scoring.base == 100


class TestLoadAndValidate:
    """YAML loading with fallback to defaults."""

    def test_reads_yaml(self, tmp_path, monkeypatch):
        (tmp_path / "calendar.yaml").write_text("policy:\n  grace_minutes: 30\n")
        monkeypatch.setattr(config_models, "ARGS_DIR", tmp_path)

        assert load_and_validate("calendar").policy.grace_minutes == 30

    def test_missing_file_gives_defaults(self, tmp_path, monkeypatch):
        monkeypatch.setattr(config_models, "ARGS_DIR", tmp_path)

        assert load_and_validate("calendar") == CalendarConfig()

    def test_invalid_file_falls_back(self, tmp_path, monkeypatch):
        (tmp_path / "calendar.yaml").write_text("policy:\n  off_days: [funday]\n")
        monkeypatch.setattr(config_models, "ARGS_DIR", tmp_path)

        assert load_and_validate("calendar").policy.off_days == ["friday", "saturday"]

    def test_unknown_config_name(self):
        with pytest.raises(ValueError):
            load_and_validate("nonexistent")
