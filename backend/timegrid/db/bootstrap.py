from __future__ import annotations

import logging

from sqlalchemy import inspect, text

import timegrid.models  # noqa: F401
from timegrid.db.base import Base
from timegrid.db.session import engine

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS: dict[str, set[str]] = {
    "faculty": {"id", "institute_id", "department", "classes", "subjects"},
    "courses": {"id", "institute_id", "department", "credits", "faculty_id", "duration_minutes", "sessions_per_week"},
    "rooms": {"id", "institute_id", "name"},
    "timetables": {"id", "institute_id", "class_name", "semester", "entries", "conflicts", "superseded_by_id"},
    "session_index": {
        "id",
        "timetable_id",
        "institute_id",
        "day",
        "start_minutes",
        "end_minutes",
        "faculty_id",
        "room",
        "class_name",
    },
}


def _ensure_timetable_superseded_column() -> None:
    with engine.begin() as connection:
        inspector = inspect(connection)
        if "timetables" not in set(inspector.get_table_names()):
            return
        column_names = {item["name"] for item in inspector.get_columns("timetables")}
        if "superseded_by_id" in column_names:
            return
        connection.execute(text("ALTER TABLE timetables ADD COLUMN superseded_by_id VARCHAR(36)"))


def _ensure_course_session_shape_columns() -> None:
    with engine.begin() as connection:
        inspector = inspect(connection)
        if "courses" not in set(inspector.get_table_names()):
            return
        column_names = {item["name"] for item in inspector.get_columns("courses")}
        if "duration_minutes" not in column_names:
            connection.execute(text("ALTER TABLE courses ADD COLUMN duration_minutes INTEGER"))
        if "sessions_per_week" not in column_names:
            connection.execute(text("ALTER TABLE courses ADD COLUMN sessions_per_week INTEGER"))


def _assert_required_columns() -> None:
    with engine.begin() as connection:
        inspector = inspect(connection)
        table_names = set(inspector.get_table_names())
        missing_tables = [name for name in REQUIRED_COLUMNS if name not in table_names]
        if missing_tables:
            raise RuntimeError(f"Missing required tables: {', '.join(sorted(missing_tables))}")

        missing_columns: list[str] = []
        for table_name, required in REQUIRED_COLUMNS.items():
            existing = {item["name"] for item in inspector.get_columns(table_name)}
            for column_name in sorted(required - existing):
                missing_columns.append(f"{table_name}.{column_name}")
        if missing_columns:
            raise RuntimeError(f"Missing required columns: {', '.join(missing_columns)}")


def ensure_runtime_schema_compatibility() -> None:
    try:
        # Ensure missing tables are present before additive compatibility patches.
        Base.metadata.create_all(bind=engine)
        _ensure_timetable_superseded_column()
        _ensure_course_session_shape_columns()
        _assert_required_columns()
    except Exception as exc:  # pragma: no cover - runtime environment dependent
        logger.exception("Runtime schema compatibility bootstrap failed")
        raise RuntimeError("Runtime schema compatibility bootstrap failed") from exc
