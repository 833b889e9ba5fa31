from __future__ import annotations

from collections import Counter
from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field, field_validator, model_validator

from timegrid.schemas.catalog import CoursePayload, FacultyPayload
from timegrid.schemas.time_grid import TIME_PATTERN, TimeSlot, TimeSlotConfig, parse_time_to_minutes

DAY_VALUES = {
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
    "Sunday",
}

DAY_SHORT_MAP = {
    "Mon": "Monday",
    "Tue": "Tuesday",
    "Wed": "Wednesday",
    "Thu": "Thursday",
    "Fri": "Friday",
    "Sat": "Saturday",
    "Sun": "Sunday",
}


def normalize_day(value: str) -> str:
    day = value.strip()
    day = DAY_SHORT_MAP.get(day, day)
    if day not in DAY_VALUES:
        raise ValueError("Invalid day value")
    return day


ConflictType = Literal["teacher", "room", "preference"]
Severity = Literal["high", "medium", "low"]


class TimetableEntry(BaseModel):
    id: str = Field(min_length=1, max_length=160)
    subject_id: str = Field(alias="subjectId", min_length=1, max_length=36)
    subject_name: str = Field(alias="subjectName", min_length=1, max_length=200)
    faculty_id: str = Field(alias="facultyId", min_length=1, max_length=36)
    faculty_name: str = Field(alias="facultyName", min_length=1, max_length=200)
    class_name: str = Field(alias="class", min_length=1, max_length=50)
    department: str = Field(min_length=1, max_length=200)
    room: str = Field(min_length=1, max_length=100)
    day: str
    slot_index: int | None = Field(default=None, alias="timeSlot", ge=0)
    start_time: str = Field(alias="startTime")
    end_time: str = Field(alias="endTime")
    type: Literal["lecture", "lab"] = "lecture"

    model_config = {
        "populate_by_name": True,
        "from_attributes": True,
    }

    @field_validator("day")
    @classmethod
    def validate_day(cls, value: str) -> str:
        return normalize_day(value)

    @field_validator("start_time", "end_time")
    @classmethod
    def validate_time_format(cls, value: str) -> str:
        if not TIME_PATTERN.match(value):
            raise ValueError("Time must be in HH:MM 24-hour format")
        return value

    @model_validator(mode="after")
    def validate_time_order(self) -> "TimetableEntry":
        if self.end_minutes <= self.start_minutes:
            raise ValueError("End time must be after start time")
        return self

    @property
    def start_minutes(self) -> int:
        return parse_time_to_minutes(self.start_time)

    @property
    def end_minutes(self) -> int:
        return parse_time_to_minutes(self.end_time)

    def to_document(self) -> dict:
        return self.model_dump(by_alias=True)


class Conflict(BaseModel):
    type: ConflictType
    severity: Severity
    description: str
    resolved: bool = False
    session_id: str | None = Field(default=None, alias="sessionId")

    model_config = {
        "populate_by_name": True,
        "from_attributes": True,
    }

    def to_document(self) -> dict:
        return self.model_dump(by_alias=True)


class ConflictSummary(BaseModel):
    total: int = 0
    high: int = 0
    medium: int = 0
    low: int = 0

    @classmethod
    def from_conflicts(cls, conflicts: list[Conflict]) -> "ConflictSummary":
        counts = Counter(conflict.severity for conflict in conflicts if not conflict.resolved)
        return cls(
            total=sum(counts.values()),
            high=counts.get("high", 0),
            medium=counts.get("medium", 0),
            low=counts.get("low", 0),
        )


class GenerateTimetableRequest(BaseModel):
    class_name: str = Field(alias="class", min_length=1, max_length=50)
    department: str = Field(min_length=1, max_length=200)
    semester: str = Field(min_length=1, max_length=20)
    academic_year: str = Field(default="", alias="academicYear", max_length=20)
    time_slot_config: TimeSlotConfig | None = Field(default=None, alias="timeSlotConfig")
    days: list[str] | None = None
    rooms: list[str] | None = None
    # Inline catalog data; omitted lists are read from the catalog store.
    faculty: list[FacultyPayload] | None = None
    courses: list[CoursePayload] | None = None
    respect_existing_bookings: bool = Field(default=False, alias="respectExistingBookings")

    model_config = {
        "populate_by_name": True,
    }

    @field_validator("days")
    @classmethod
    def validate_days(cls, value: list[str] | None) -> list[str] | None:
        if value is None:
            return None
        days: list[str] = []
        for item in value:
            day = normalize_day(item)
            if day not in days:
                days.append(day)
        return days

    @field_validator("rooms")
    @classmethod
    def validate_rooms(cls, value: list[str] | None) -> list[str] | None:
        if value is None:
            return None
        rooms: list[str] = []
        for item in value:
            name = item.strip()
            if name and name not in rooms:
                rooms.append(name)
        return rooms


class GenerateTimetableResponse(BaseModel):
    entries: list[TimetableEntry] = Field(default_factory=list)
    conflicts: list[Conflict] = Field(default_factory=list)
    slots: list[TimeSlot] = Field(default_factory=list)
    summary: ConflictSummary = Field(default_factory=ConflictSummary)


class TimetableCreate(BaseModel):
    class_name: str = Field(alias="class", min_length=1, max_length=50)
    department: str = Field(min_length=1, max_length=200)
    semester: str = Field(min_length=1, max_length=20)
    academic_year: str = Field(default="", alias="academicYear", max_length=20)
    entries: list[TimetableEntry] = Field(default_factory=list)
    conflicts: list[Conflict] = Field(default_factory=list)

    model_config = {
        "populate_by_name": True,
    }

    @model_validator(mode="after")
    def validate_unique_entry_ids(self) -> "TimetableCreate":
        ensure_unique_entry_ids(self.entries)
        return self


class TimetableEntriesUpdate(BaseModel):
    entries: list[TimetableEntry] = Field(default_factory=list)

    @model_validator(mode="after")
    def validate_unique_entry_ids(self) -> "TimetableEntriesUpdate":
        ensure_unique_entry_ids(self.entries)
        return self


def ensure_unique_entry_ids(entries: list[TimetableEntry]) -> None:
    seen: set[str] = set()
    duplicates: set[str] = set()
    for entry in entries:
        if entry.id in seen:
            duplicates.add(entry.id)
        else:
            seen.add(entry.id)
    if duplicates:
        raise ValueError(f"Duplicate entry id(s): {', '.join(sorted(duplicates))}")


class TimetableCreated(BaseModel):
    id: str


class TimetableOut(BaseModel):
    id: str
    institute_id: str = Field(alias="instituteId")
    class_name: str = Field(alias="class")
    department: str
    semester: str
    academic_year: str = Field(alias="academicYear")
    entries: list[TimetableEntry] = Field(default_factory=list)
    conflicts: list[Conflict] = Field(default_factory=list)
    generated_at: datetime | None = Field(default=None, alias="generatedAt")
    updated_at: datetime | None = Field(default=None, alias="updatedAt")
    superseded_by_id: str | None = Field(default=None, alias="supersededById")

    model_config = {
        "populate_by_name": True,
        "from_attributes": True,
    }
