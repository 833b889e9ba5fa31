from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, EmailStr, Field, field_validator


class FacultyPayload(BaseModel):
    id: str = Field(min_length=1, max_length=36)
    name: str = Field(min_length=1, max_length=200)
    department: str = Field(min_length=1, max_length=200)
    email: EmailStr | None = None
    classes: set[str] = Field(default_factory=set)
    subjects: set[str] = Field(default_factory=set)

    model_config = {
        "populate_by_name": True,
        "from_attributes": True,
    }

    @field_validator("classes", "subjects", mode="before")
    @classmethod
    def strip_blank_values(cls, value):
        if value is None:
            return set()
        return {str(item).strip() for item in value if str(item).strip()}

    def may_teach(self, class_name: str) -> bool:
        return class_name in self.classes


class CoursePayload(BaseModel):
    id: str = Field(min_length=1, max_length=36)
    name: str = Field(min_length=1, max_length=200)
    code: str = Field(min_length=1, max_length=50)
    department: str = Field(min_length=1, max_length=200)
    credits: int = Field(ge=0, le=40)
    faculty_id: str | None = Field(default=None, alias="facultyId", max_length=36)
    type: Literal["lecture", "lab"] = "lecture"
    duration_minutes: int | None = Field(default=None, alias="durationMinutes", ge=1, le=600)
    sessions_per_week: int | None = Field(default=None, alias="sessionsPerWeek", ge=1, le=40)
    semester: int | None = Field(default=None, ge=1, le=20)

    model_config = {
        "populate_by_name": True,
        "from_attributes": True,
    }

    @field_validator("type", mode="before")
    @classmethod
    def unwrap_enum(cls, value):
        return getattr(value, "value", value)

    @field_validator("faculty_id")
    @classmethod
    def blank_faculty_is_unassigned(cls, value: str | None) -> str | None:
        if value is None:
            return None
        trimmed = value.strip()
        return trimmed or None

    @property
    def weekly_quota(self) -> int:
        if self.sessions_per_week is not None:
            return self.sessions_per_week
        return max(self.credits, 1)
