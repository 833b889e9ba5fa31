from sqlalchemy import Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from timegrid.db.base import Base


class SessionIndexRow(Base):
    __tablename__ = "session_index"
    __table_args__ = (
        Index("ix_session_index_faculty_lookup", "institute_id", "day", "faculty_id"),
        Index("ix_session_index_room_lookup", "institute_id", "day", "room"),
    )

    # "{timetable_id}-{entry_id}"
    id: Mapped[str] = mapped_column(String(200), primary_key=True)
    timetable_id: Mapped[str] = mapped_column(String(36), index=True, nullable=False)
    entry_id: Mapped[str] = mapped_column(String(160), nullable=False)
    institute_id: Mapped[str] = mapped_column(String(36), nullable=False)
    department: Mapped[str] = mapped_column(String(200), nullable=False)
    class_name: Mapped[str] = mapped_column(String(50), nullable=False)
    day: Mapped[str] = mapped_column(String(10), nullable=False)
    start_minutes: Mapped[int] = mapped_column(Integer, nullable=False)
    end_minutes: Mapped[int] = mapped_column(Integer, nullable=False)
    faculty_id: Mapped[str] = mapped_column(String(36), nullable=False)
    room: Mapped[str] = mapped_column(String(100), nullable=False)
