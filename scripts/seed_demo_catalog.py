"""Seed a small demo catalog (faculty, courses, rooms) for one institute.

Run:
  PYTHONPATH=backend python scripts/seed_demo_catalog.py
"""

from __future__ import annotations

import os
from dataclasses import dataclass

from sqlalchemy import func, select

from timegrid.core.config import get_settings
from timegrid.db.bootstrap import ensure_runtime_schema_compatibility
from timegrid.db.session import SessionLocal
from timegrid.models.course import Course, SessionType
from timegrid.models.faculty import Faculty
from timegrid.models.room import Room

INSTITUTE_ID = os.getenv("SEED_INSTITUTE_ID", "").strip() or get_settings().default_institute_id
DEPARTMENT = "Computer Science and Engineering"
CLASSES = ["CSE-A (3rd Year)", "CSE-B (3rd Year)", "CSE-A (2nd Year)", "CSE-B (2nd Year)"]
ROOMS = [
    ("Room 301", "Main Block", 60),
    ("Room 302", "Main Block", 60),
    ("Room 501", "Main Block", 45),
    ("Lab 1", "Lab Block", 30),
]


@dataclass(frozen=True)
class CourseSeed:
    code: str
    name: str
    credits: int
    faculty_email: str
    session_type: SessionType = SessionType.lecture
    duration_minutes: int | None = None
    sessions_per_week: int | None = None


FACULTY = [
    ("Dr. Johnson", "johnson@university.edu", ["CSE-A (3rd Year)", "CSE-B (3rd Year)"]),
    ("Dr. Williams", "williams@university.edu", ["CSE-A (3rd Year)", "CSE-A (2nd Year)"]),
    ("Dr. Brown", "brown@university.edu", ["CSE-A (3rd Year)", "CSE-B (3rd Year)", "CSE-B (2nd Year)"]),
    ("Dr. Anderson", "anderson@university.edu", ["CSE-A (3rd Year)", "CSE-B (3rd Year)"]),
]

COURSES = [
    CourseSeed("CSE301", "Data Structures", 4, "johnson@university.edu"),
    CourseSeed(
        "CSE302",
        "Database Systems Lab",
        2,
        "williams@university.edu",
        session_type=SessionType.lab,
        duration_minutes=120,
        sessions_per_week=1,
    ),
    CourseSeed("CSE303", "Software Engineering", 3, "brown@university.edu"),
    CourseSeed("CSE304", "Machine Learning", 3, "anderson@university.edu"),
]


def upsert_faculty(session, name: str, email: str, classes: list[str]) -> Faculty:
    faculty = session.execute(
        select(Faculty).where(Faculty.institute_id == INSTITUTE_ID, Faculty.email == email)
    ).scalar_one_or_none()
    if faculty is None:
        faculty = Faculty(institute_id=INSTITUTE_ID, name=name, email=email, department=DEPARTMENT)
        session.add(faculty)
    faculty.name = name
    faculty.department = DEPARTMENT
    faculty.classes = list(classes)
    session.flush()
    return faculty


def upsert_rooms(session) -> None:
    for name, building, capacity in ROOMS:
        room = session.execute(
            select(Room).where(Room.institute_id == INSTITUTE_ID, Room.name == name)
        ).scalar_one_or_none()
        if room is None:
            room = Room(institute_id=INSTITUTE_ID, name=name)
            session.add(room)
        room.building = building
        room.capacity = capacity


def upsert_courses(session, faculty_by_email: dict[str, Faculty]) -> None:
    for item in COURSES:
        course = session.execute(
            select(Course).where(Course.institute_id == INSTITUTE_ID, Course.code == item.code)
        ).scalar_one_or_none()
        if course is None:
            course = Course(institute_id=INSTITUTE_ID, code=item.code, name=item.name, department=DEPARTMENT)
            session.add(course)
        course.name = item.name
        course.department = DEPARTMENT
        course.type = item.session_type
        course.credits = item.credits
        course.duration_minutes = item.duration_minutes
        course.sessions_per_week = item.sessions_per_week
        course.semester = 5
        course.faculty_id = faculty_by_email[item.faculty_email].id


def main() -> None:
    ensure_runtime_schema_compatibility()
    with SessionLocal() as session:
        faculty_by_email = {
            email: upsert_faculty(session, name, email, classes) for name, email, classes in FACULTY
        }
        upsert_rooms(session)
        upsert_courses(session, faculty_by_email)
        session.commit()

        faculty_count = session.execute(
            select(func.count(Faculty.id)).where(Faculty.institute_id == INSTITUTE_ID)
        ).scalar_one()
        course_count = session.execute(
            select(func.count(Course.id)).where(Course.institute_id == INSTITUTE_ID)
        ).scalar_one()
        room_count = session.execute(
            select(func.count(Room.id)).where(Room.institute_id == INSTITUTE_ID)
        ).scalar_one()

    print("Demo catalog seeded successfully.")
    print("")
    print(f"Institute: {INSTITUTE_ID}")
    print(f"Department: {DEPARTMENT}")
    print(f"Faculty records: {faculty_count}")
    print(f"Course records: {course_count}")
    print(f"Rooms: {room_count}")
    print(f"Classes: {', '.join(CLASSES)}")


if __name__ == "__main__":
    main()
