from __future__ import annotations

import re

from pydantic import BaseModel, Field, computed_field

from timegrid.core.config import Settings

TIME_PATTERN = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")


def parse_time_to_minutes(value: str) -> int:
    if not TIME_PATTERN.match(value):
        raise ValueError("Time must be in HH:MM 24-hour format")
    hours, minutes = value.split(":")
    return int(hours) * 60 + int(minutes)


def format_minutes(value: int) -> str:
    hours, minutes = divmod(value, 60)
    return f"{hours:02d}:{minutes:02d}"


def intervals_overlap(start_a: int, end_a: int, start_b: int, end_b: int) -> bool:
    return start_a < end_b and start_b < end_a


class TimeSlotConfig(BaseModel):
    # Only shapes are checked here; build_slots owns the semantic checks so that
    # a malformed day surfaces as ConfigurationError rather than a 422.
    start_time: str = Field(alias="startTime")
    end_time: str = Field(alias="endTime")
    session_duration_minutes: int = Field(alias="sessionDurationMinutes")
    short_break_minutes: int = Field(default=0, alias="shortBreakMinutes")
    lunch_break_start: str | None = Field(default=None, alias="lunchBreakStart")
    lunch_break_minutes: int = Field(default=0, alias="lunchBreakMinutes")

    model_config = {
        "populate_by_name": True,
    }

    @classmethod
    def from_settings(cls, settings: Settings) -> "TimeSlotConfig":
        return cls(
            start_time=settings.default_day_start,
            end_time=settings.default_day_end,
            session_duration_minutes=settings.default_session_minutes,
            short_break_minutes=settings.default_short_break_minutes,
            lunch_break_start=settings.default_lunch_start,
            lunch_break_minutes=settings.default_lunch_minutes,
        )


class TimeSlot(BaseModel):
    index: int = Field(ge=0)
    start_minutes: int = Field(alias="startMinutes", ge=0, le=24 * 60)
    end_minutes: int = Field(alias="endMinutes", ge=0, le=24 * 60)

    model_config = {
        "populate_by_name": True,
        "frozen": True,
    }

    @computed_field(alias="startTime")
    @property
    def start_time(self) -> str:
        return format_minutes(self.start_minutes)

    @computed_field(alias="endTime")
    @property
    def end_time(self) -> str:
        return format_minutes(self.end_minutes)

    @property
    def label(self) -> str:
        return f"{self.start_time}-{self.end_time}"

    @property
    def duration_minutes(self) -> int:
        return self.end_minutes - self.start_minutes
