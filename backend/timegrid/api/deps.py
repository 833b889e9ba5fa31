from collections.abc import Generator

from fastapi import Depends, Header
from sqlalchemy.orm import Session

from timegrid.core.config import Settings, get_settings
from timegrid.db.session import SessionLocal
from timegrid.services.timetable_service import TimetableService


def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_institute_id(
    x_institute_id: str | None = Header(default=None, max_length=36),
    settings: Settings = Depends(get_settings),
) -> str:
    institute_id = (x_institute_id or "").strip()
    return institute_id or settings.default_institute_id


def get_timetable_service(
    db: Session = Depends(get_db),
    institute_id: str = Depends(get_institute_id),
    settings: Settings = Depends(get_settings),
) -> TimetableService:
    return TimetableService(db, institute_id, settings)
