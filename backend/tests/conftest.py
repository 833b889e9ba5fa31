import os
import tempfile
from pathlib import Path

# Point the app's own engine at a throwaway file before anything imports timegrid.
_RUNTIME_DB = Path(tempfile.mkdtemp(prefix="timegrid-tests-")) / "runtime.db"
os.environ.setdefault("DATABASE_URL", f"sqlite+pysqlite:///{_RUNTIME_DB}")

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from timegrid.api.deps import get_db  # noqa: E402
from timegrid.db.base import Base  # noqa: E402
from timegrid.main import app  # noqa: E402
from timegrid.schemas.catalog import CoursePayload, FacultyPayload  # noqa: E402
from timegrid.schemas.timetable import TimetableEntry  # noqa: E402

INSTITUTE_ID = "inst-1"


@pytest.fixture()
def session_factory():
    engine = create_engine(  # isolated in-memory DB shared by every session of one test
        "sqlite+pysqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    engine.dispose()


@pytest.fixture()
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def client(session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app, headers={"X-Institute-Id": INSTITUTE_ID}) as test_client:
        yield test_client

    app.dependency_overrides.clear()


def make_entry(
    entry_id: str,
    *,
    faculty_id: str = "f1",
    faculty_name: str = "Dr. Johnson",
    class_name: str = "CSE-A",
    room: str = "Room 301",
    day: str = "Monday",
    start: str = "09:00",
    end: str = "10:00",
    subject_id: str = "c1",
    subject_name: str = "Data Structures",
    department: str = "CSE",
) -> TimetableEntry:
    return TimetableEntry(
        id=entry_id,
        subject_id=subject_id,
        subject_name=subject_name,
        faculty_id=faculty_id,
        faculty_name=faculty_name,
        class_name=class_name,
        department=department,
        room=room,
        day=day,
        start_time=start,
        end_time=end,
    )


def make_faculty(faculty_id: str = "f1", name: str = "Dr. Johnson", classes=("CSE-A",)) -> FacultyPayload:
    return FacultyPayload(id=faculty_id, name=name, department="CSE", classes=set(classes))


def make_course(course_id: str = "c1", faculty_id: str | None = "f1", credits: int = 3, **extra) -> CoursePayload:
    return CoursePayload(
        id=course_id,
        name=extra.pop("name", f"Course {course_id}"),
        code=extra.pop("code", course_id.upper()),
        department=extra.pop("department", "CSE"),
        credits=credits,
        faculty_id=faculty_id,
        **extra,
    )
