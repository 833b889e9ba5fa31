from __future__ import annotations

from collections import defaultdict

from timegrid.schemas.timetable import TimetableEntry
from timegrid.schemas.workload import FacultyWorkloadOut


def faculty_workload(entries: list[TimetableEntry], faculty_id: str) -> FacultyWorkloadOut:
    daily_sessions: dict[str, int] = defaultdict(int)
    daily_minutes: dict[str, int] = defaultdict(int)
    subjects: list[str] = []
    faculty_name: str | None = None
    total_minutes = 0
    total_sessions = 0

    for entry in entries:
        if entry.faculty_id != faculty_id:
            continue
        faculty_name = faculty_name or entry.faculty_name
        minutes = entry.end_minutes - entry.start_minutes
        total_sessions += 1
        total_minutes += minutes
        daily_sessions[entry.day] += 1
        daily_minutes[entry.day] += minutes
        if entry.subject_name not in subjects:
            subjects.append(entry.subject_name)

    return FacultyWorkloadOut(
        faculty_id=faculty_id,
        faculty_name=faculty_name,
        total_sessions=total_sessions,
        total_minutes=total_minutes,
        daily_sessions=dict(daily_sessions),
        daily_minutes=dict(daily_minutes),
        subjects=subjects,
    )
