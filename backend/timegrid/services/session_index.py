"""Flattened per-entry booking rows used for fast overlap lookups.

The index is derived state: every row can be recomputed from the owning
Timetable record, so writes here are best effort. A row that fails to write is
logged and skipped; `rebuild` (or a full reindex) is the repair path. Nothing in
this module commits; the caller owns the transaction.
"""

from __future__ import annotations

import logging

from sqlalchemy import delete, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from timegrid.models.session_index import SessionIndexRow
from timegrid.schemas.conflict import ConflictProbe, IndexWriteResult, SessionIndexEntry
from timegrid.schemas.timetable import TimetableEntry

logger = logging.getLogger(__name__)


def index_row_id(timetable_id: str, entry_id: str) -> str:
    return f"{timetable_id}-{entry_id}"


class SessionIndex:
    def __init__(self, db: Session):
        self.db = db

    def upsert(
        self,
        timetable_id: str,
        entries: list[TimetableEntry],
        institute_id: str,
        department: str,
    ) -> IndexWriteResult:
        written = 0
        failed = 0
        for entry in entries:
            row = SessionIndexRow(
                id=index_row_id(timetable_id, entry.id),
                timetable_id=timetable_id,
                entry_id=entry.id,
                institute_id=institute_id,
                department=department or entry.department,
                class_name=entry.class_name,
                day=entry.day,
                start_minutes=entry.start_minutes,
                end_minutes=entry.end_minutes,
                faculty_id=entry.faculty_id,
                room=entry.room,
            )
            try:
                with self.db.begin_nested():
                    self.db.merge(row)
            except SQLAlchemyError:
                failed += 1
                logger.warning(
                    "Session index write failed for timetable %s entry %s",
                    timetable_id,
                    entry.id,
                    exc_info=True,
                )
                continue
            written += 1
        return IndexWriteResult(written=written, failed=failed)

    def remove(self, timetable_id: str) -> int:
        result = self.db.execute(delete(SessionIndexRow).where(SessionIndexRow.timetable_id == timetable_id))
        return result.rowcount or 0

    def rebuild(
        self,
        timetable_id: str,
        entries: list[TimetableEntry],
        institute_id: str,
        department: str,
    ) -> IndexWriteResult:
        removed = self.remove(timetable_id)
        logger.debug("Removed %d index rows for timetable %s before rebuild", removed, timetable_id)
        return self.upsert(timetable_id, entries, institute_id, department)

    def find_conflicting(self, probe: ConflictProbe, institute_id: str | None = None) -> list[SessionIndexEntry]:
        scope = probe.institute_id or institute_id
        matchers = []
        if probe.faculty_id:
            matchers.append(SessionIndexRow.faculty_id == probe.faculty_id)
        if probe.room:
            matchers.append(SessionIndexRow.room == probe.room)
        if scope is None or not matchers:
            return []

        stmt = (
            select(SessionIndexRow)
            .where(
                SessionIndexRow.institute_id == scope,
                SessionIndexRow.day == probe.day,
                or_(*matchers),
                SessionIndexRow.start_minutes < probe.end_minutes,
                SessionIndexRow.end_minutes > probe.start_minutes,
                SessionIndexRow.class_name != probe.class_name,
            )
            .order_by(SessionIndexRow.start_minutes, SessionIndexRow.id)
        )
        return [SessionIndexEntry.model_validate(row) for row in self.db.execute(stmt).scalars()]

    def rows_for(self, timetable_id: str) -> list[SessionIndexEntry]:
        stmt = (
            select(SessionIndexRow)
            .where(SessionIndexRow.timetable_id == timetable_id)
            .order_by(SessionIndexRow.day, SessionIndexRow.start_minutes, SessionIndexRow.id)
        )
        return [SessionIndexEntry.model_validate(row) for row in self.db.execute(stmt).scalars()]

    def bookings_for(self, institute_id: str, exclude_class: str | None = None) -> list[SessionIndexEntry]:
        stmt = select(SessionIndexRow).where(SessionIndexRow.institute_id == institute_id)
        if exclude_class is not None:
            stmt = stmt.where(SessionIndexRow.class_name != exclude_class)
        stmt = stmt.order_by(SessionIndexRow.day, SessionIndexRow.start_minutes, SessionIndexRow.id)
        return [SessionIndexEntry.model_validate(row) for row in self.db.execute(stmt).scalars()]

    def remove_orphans(self, institute_id: str, active_timetable_ids: set[str]) -> int:
        stmt = delete(SessionIndexRow).where(SessionIndexRow.institute_id == institute_id)
        if active_timetable_ids:
            stmt = stmt.where(SessionIndexRow.timetable_id.not_in(sorted(active_timetable_ids)))
        result = self.db.execute(stmt)
        return result.rowcount or 0
