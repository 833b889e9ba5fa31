from __future__ import annotations

from pydantic import BaseModel, Field, field_validator, model_validator

from timegrid.schemas.timetable import Conflict, ConflictSummary, TimetableEntry, normalize_day


class ConflictProbe(BaseModel):
    institute_id: str | None = Field(default=None, alias="instituteId", max_length=36)
    faculty_id: str | None = Field(default=None, alias="facultyId", max_length=36)
    room: str | None = Field(default=None, max_length=100)
    day: str
    start_minutes: int = Field(alias="startMinutes", ge=0, le=24 * 60)
    end_minutes: int = Field(alias="endMinutes", ge=0, le=24 * 60)
    class_name: str = Field(alias="class", min_length=1, max_length=50)

    model_config = {
        "populate_by_name": True,
    }

    @field_validator("day")
    @classmethod
    def validate_day(cls, value: str) -> str:
        return normalize_day(value)

    @model_validator(mode="after")
    def validate_probe(self) -> "ConflictProbe":
        if self.end_minutes <= self.start_minutes:
            raise ValueError("endMinutes must be after startMinutes")
        if not self.faculty_id and not self.room:
            raise ValueError("A probe needs a facultyId or a room")
        return self

    @classmethod
    def for_entry(cls, entry: TimetableEntry, institute_id: str) -> "ConflictProbe":
        return cls(
            institute_id=institute_id,
            faculty_id=entry.faculty_id,
            room=entry.room,
            day=entry.day,
            start_minutes=entry.start_minutes,
            end_minutes=entry.end_minutes,
            class_name=entry.class_name,
        )


class SessionIndexEntry(BaseModel):
    id: str
    timetable_id: str = Field(alias="timetableId")
    entry_id: str = Field(alias="entryId")
    institute_id: str = Field(alias="instituteId")
    department: str
    class_name: str = Field(alias="class")
    day: str
    start_minutes: int = Field(alias="startMinutes")
    end_minutes: int = Field(alias="endMinutes")
    faculty_id: str = Field(alias="facultyId")
    room: str

    model_config = {
        "populate_by_name": True,
        "from_attributes": True,
    }


class ConflictDetectRequest(BaseModel):
    entries: list[TimetableEntry] = Field(default_factory=list)
    include_history: bool = Field(default=True, alias="includeHistory")
    exclude_timetable_id: str | None = Field(default=None, alias="excludeTimetableId", max_length=36)

    model_config = {
        "populate_by_name": True,
    }


class ConflictReport(BaseModel):
    conflicts: list[Conflict] = Field(default_factory=list)
    summary: ConflictSummary = Field(default_factory=ConflictSummary)


class IndexWriteResult(BaseModel):
    written: int = 0
    failed: int = 0

    def merge(self, other: "IndexWriteResult") -> "IndexWriteResult":
        return IndexWriteResult(written=self.written + other.written, failed=self.failed + other.failed)


class ReindexResult(BaseModel):
    timetables: int = 0
    written: int = 0
    failed: int = 0
