from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.orm import Session

from timegrid.models.course import Course
from timegrid.models.faculty import Faculty
from timegrid.models.room import Room
from timegrid.models.timetable import Timetable
from timegrid.schemas.catalog import CoursePayload, FacultyPayload
from timegrid.schemas.timetable import TimetableEntry


def list_faculty_by_department(db: Session, institute_id: str, department: str) -> list[FacultyPayload]:
    stmt = (
        select(Faculty)
        .where(Faculty.institute_id == institute_id, Faculty.department == department)
        .order_by(Faculty.name, Faculty.id)
    )
    return [FacultyPayload.model_validate(item) for item in db.execute(stmt).scalars()]


def list_courses_by_department(db: Session, institute_id: str, department: str) -> list[CoursePayload]:
    stmt = (
        select(Course)
        .where(Course.institute_id == institute_id, Course.department == department)
        .order_by(Course.code, Course.id)
    )
    return [CoursePayload.model_validate(item) for item in db.execute(stmt).scalars()]


def list_room_names(db: Session, institute_id: str) -> list[str]:
    stmt = select(Room.name).where(Room.institute_id == institute_id).order_by(Room.name)
    return list(db.execute(stmt).scalars())


def active_timetables(db: Session, institute_id: str) -> list[Timetable]:
    stmt = (
        select(Timetable)
        .where(Timetable.institute_id == institute_id, Timetable.superseded_by_id.is_(None))
        .order_by(Timetable.generated_at.desc(), Timetable.id)
    )
    return list(db.execute(stmt).scalars())


def list_historical_entries(
    db: Session,
    institute_id: str,
    exclude_timetable_id: str | None = None,
) -> list[TimetableEntry]:
    entries: list[TimetableEntry] = []
    for record in active_timetables(db, institute_id):
        if record.id == exclude_timetable_id:
            continue
        entries.extend(TimetableEntry.model_validate(item) for item in record.entries or [])
    return entries
