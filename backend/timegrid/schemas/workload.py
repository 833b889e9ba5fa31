from __future__ import annotations

from pydantic import BaseModel, Field


class FacultyWorkloadOut(BaseModel):
    faculty_id: str = Field(alias="facultyId")
    faculty_name: str | None = Field(default=None, alias="facultyName")
    total_sessions: int = Field(default=0, alias="totalSessions")
    total_minutes: int = Field(default=0, alias="totalMinutes")
    daily_sessions: dict[str, int] = Field(default_factory=dict, alias="dailySessions")
    daily_minutes: dict[str, int] = Field(default_factory=dict, alias="dailyMinutes")
    subjects: list[str] = Field(default_factory=list)

    model_config = {
        "populate_by_name": True,
    }
