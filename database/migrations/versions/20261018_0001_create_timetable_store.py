"""create timetable store

Revision ID: 20261018_0001
Revises: None
Create Date: 2026-10-18 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

revision = "20261018_0001"
down_revision = None
branch_labels = None
depends_on = None


session_type_enum = sa.Enum("lecture", "lab", name="session_type")


def upgrade() -> None:
    op.create_table(
        "faculty",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("institute_id", sa.String(length=36), nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=True),
        sa.Column("department", sa.String(length=200), nullable=False),
        sa.Column("classes", sa.JSON(), nullable=False),
        sa.Column("subjects", sa.JSON(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_faculty_institute_id", "faculty", ["institute_id"])
    op.create_index("ix_faculty_department", "faculty", ["department"])

    op.create_table(
        "courses",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("institute_id", sa.String(length=36), nullable=False),
        sa.Column("code", sa.String(length=50), nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("department", sa.String(length=200), nullable=False),
        sa.Column("type", session_type_enum, nullable=False),
        sa.Column("credits", sa.Integer(), nullable=False),
        sa.Column("duration_minutes", sa.Integer(), nullable=True),
        sa.Column("sessions_per_week", sa.Integer(), nullable=True),
        sa.Column("semester", sa.Integer(), nullable=False),
        sa.Column("faculty_id", sa.String(length=36), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_courses_institute_id", "courses", ["institute_id"])
    op.create_index("ix_courses_code", "courses", ["code"])
    op.create_index("ix_courses_department", "courses", ["department"])

    op.create_table(
        "rooms",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("institute_id", sa.String(length=36), nullable=False),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("building", sa.String(length=200), nullable=True),
        sa.Column("capacity", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint("institute_id", "name", name="uq_rooms_institute_name"),
    )
    op.create_index("ix_rooms_institute_id", "rooms", ["institute_id"])

    op.create_table(
        "timetables",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("institute_id", sa.String(length=36), nullable=False),
        sa.Column("class_name", sa.String(length=50), nullable=False),
        sa.Column("department", sa.String(length=200), nullable=False),
        sa.Column("semester", sa.String(length=20), nullable=False),
        sa.Column("academic_year", sa.String(length=20), nullable=False),
        sa.Column("entries", sa.JSON(), nullable=False),
        sa.Column("conflicts", sa.JSON(), nullable=False),
        sa.Column("generated_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("superseded_by_id", sa.String(length=36), nullable=True),
    )
    op.create_index("ix_timetables_institute_id", "timetables", ["institute_id"])
    op.create_index("ix_timetables_superseded_by_id", "timetables", ["superseded_by_id"])
    op.create_index(
        "ix_timetables_institute_class_semester",
        "timetables",
        ["institute_id", "class_name", "semester"],
    )

    op.create_table(
        "session_index",
        sa.Column("id", sa.String(length=200), primary_key=True, nullable=False),
        sa.Column("timetable_id", sa.String(length=36), nullable=False),
        sa.Column("entry_id", sa.String(length=160), nullable=False),
        sa.Column("institute_id", sa.String(length=36), nullable=False),
        sa.Column("department", sa.String(length=200), nullable=False),
        sa.Column("class_name", sa.String(length=50), nullable=False),
        sa.Column("day", sa.String(length=10), nullable=False),
        sa.Column("start_minutes", sa.Integer(), nullable=False),
        sa.Column("end_minutes", sa.Integer(), nullable=False),
        sa.Column("faculty_id", sa.String(length=36), nullable=False),
        sa.Column("room", sa.String(length=100), nullable=False),
    )
    op.create_index("ix_session_index_timetable_id", "session_index", ["timetable_id"])
    op.create_index("ix_session_index_faculty_lookup", "session_index", ["institute_id", "day", "faculty_id"])
    op.create_index("ix_session_index_room_lookup", "session_index", ["institute_id", "day", "room"])


def downgrade() -> None:
    op.drop_index("ix_session_index_room_lookup", table_name="session_index")
    op.drop_index("ix_session_index_faculty_lookup", table_name="session_index")
    op.drop_index("ix_session_index_timetable_id", table_name="session_index")
    op.drop_table("session_index")

    op.drop_index("ix_timetables_institute_class_semester", table_name="timetables")
    op.drop_index("ix_timetables_superseded_by_id", table_name="timetables")
    op.drop_index("ix_timetables_institute_id", table_name="timetables")
    op.drop_table("timetables")

    op.drop_index("ix_rooms_institute_id", table_name="rooms")
    op.drop_table("rooms")

    op.drop_index("ix_courses_department", table_name="courses")
    op.drop_index("ix_courses_code", table_name="courses")
    op.drop_index("ix_courses_institute_id", table_name="courses")
    op.drop_table("courses")
    session_type_enum.drop(op.get_bind(), checkfirst=True)

    op.drop_index("ix_faculty_department", table_name="faculty")
    op.drop_index("ix_faculty_institute_id", table_name="faculty")
    op.drop_table("faculty")
