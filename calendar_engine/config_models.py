from __future__ import annotations

import logging
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from calendar_engine import ARGS_DIR

logger = logging.getLogger(__name__)

WEEKDAYS = ["monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday"]


# =============================================================================
# CalendarConfig (args/calendar.yaml)
# =============================================================================

class PolicyConfig(BaseModel):
    model_config = ConfigDict(extra="allow")
    off_days: list[str] = Field(default_factory=lambda: ["friday", "saturday"])
    grace_minutes: int = Field(default=15, ge=0, le=240)

    @field_validator("off_days")
    @classmethod
    def _known_weekdays(cls, value: list[str]) -> list[str]:
        normalized = [day.strip().lower() for day in value]
        unknown = [day for day in normalized if day not in WEEKDAYS]
        if unknown:
            raise ValueError(f"Unknown weekday(s): {unknown}")
        return normalized

    @property
    def off_weekdays(self) -> frozenset[int]:
        """Off-days as ``date.weekday()`` numbers (Monday is 0)."""
        return frozenset(WEEKDAYS.index(day) for day in self.off_days)


class WorkingHoursConfig(BaseModel):
    model_config = ConfigDict(extra="allow")
    start_hour: int = Field(default=9, ge=0, le=23)
    end_hour: int = Field(default=17, ge=1, le=23)
    slot_step_minutes: int = Field(default=30, ge=5, le=240)

    @model_validator(mode="after")
    def _window_not_empty(self) -> "WorkingHoursConfig":
        if self.end_hour <= self.start_hour:
            raise ValueError("working_hours.end_hour must be after start_hour")
        return self


class ScoringConfig(BaseModel):
    model_config = ConfigDict(extra="allow")
    base: int = Field(default=100)
    morning_before_hour: int = Field(default=11, ge=0, le=24)
    morning_bonus: int = Field(default=20)
    afternoon_start_hour: int = Field(default=14, ge=0, le=24)
    afternoon_end_hour: int = Field(default=16, ge=0, le=24)
    afternoon_bonus: int = Field(default=10)
    late_penalty: int = Field(default=10)
    today_bonus: int = Field(default=10)
    tomorrow_bonus: int = Field(default=5)


class SuggestionsConfig(BaseModel):
    model_config = ConfigDict(extra="allow")
    max_results: int = Field(default=5, ge=1)
    default_duration_minutes: int = Field(default=60, ge=5)
    horizon_days: int = Field(default=7, ge=1, le=366)
    skip_off_days: bool = Field(default=True)
    scoring: ScoringConfig = Field(default_factory=ScoringConfig)


class StorageConfig(BaseModel):
    model_config = ConfigDict(extra="allow")
    backend: str = Field(default="sqlite")
    db_path: str | None = None

    @field_validator("backend")
    @classmethod
    def _known_backend(cls, value: str) -> str:
        if value not in ("memory", "sqlite"):
            raise ValueError(f"Unknown storage backend: {value}")
        return value


class CalendarConfig(BaseModel):
    model_config = ConfigDict(extra="allow")
    policy: PolicyConfig = Field(default_factory=PolicyConfig)
    working_hours: WorkingHoursConfig = Field(default_factory=WorkingHoursConfig)
    suggestions: SuggestionsConfig = Field(default_factory=SuggestionsConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)


# =============================================================================
# load_and_validate
# =============================================================================

_CONFIG_MAP: dict[str, type[BaseModel]] = {
    "calendar": CalendarConfig,
}


def load_and_validate(config_name: str, model_class: type[BaseModel] | None = None) -> Any:
    if model_class is None:
        model_class = _CONFIG_MAP.get(config_name)
        if model_class is None:
            raise ValueError(f"Unknown config: {config_name}. Available: {list(_CONFIG_MAP.keys())}")

    yaml_path = ARGS_DIR / f"{config_name}.yaml"

    try:
        if yaml_path.exists():
            with open(yaml_path) as f:
                raw = yaml.safe_load(f) or {}
        else:
            raw = {}

        return model_class.model_validate(raw)
    except Exception as e:
        logger.warning(f"Config validation failed for {config_name}: {e}, using defaults")
        return model_class()
