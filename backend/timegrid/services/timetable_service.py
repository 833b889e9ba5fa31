from __future__ import annotations

from collections.abc import Callable
import logging

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from timegrid.core.config import Settings, get_settings
from timegrid.core.exceptions import PersistenceError, ResourceNotFoundError
from timegrid.models.timetable import Timetable
from timegrid.schemas.conflict import ConflictProbe, IndexWriteResult, ReindexResult, SessionIndexEntry
from timegrid.schemas.time_grid import TimeSlot, TimeSlotConfig
from timegrid.schemas.timetable import (
    Conflict,
    ConflictSummary,
    GenerateTimetableRequest,
    GenerateTimetableResponse,
    TimetableCreate,
    TimetableEntry,
)
from timegrid.schemas.workload import FacultyWorkloadOut
from timegrid.services.assignment import AssignmentEngine, GenerationRequest
from timegrid.services.catalog import (
    active_timetables,
    list_courses_by_department,
    list_faculty_by_department,
    list_historical_entries,
    list_room_names,
)
from timegrid.services.conflict_service import ConflictAnalyzer, conflicts_from_index_rows
from timegrid.services.session_index import SessionIndex
from timegrid.services.time_grid import build_slots, resolve_lunch_window
from timegrid.services.workload import faculty_workload

logger = logging.getLogger(__name__)


def entries_of(record: Timetable) -> list[TimetableEntry]:
    return [TimetableEntry.model_validate(item) for item in record.entries or []]


class TimetableService:
    """Generation and the accept/update/discard lifecycle for one institute.

    `generate` never writes. The Timetable record is the durable source of
    truth: a failed write to it raises PersistenceError, while index
    maintenance after it is best effort and only logged.
    """

    def __init__(self, db: Session, institute_id: str, settings: Settings | None = None):
        self.db = db
        self.institute_id = institute_id
        self.settings = settings or get_settings()
        self.index = SessionIndex(db)

    # -- generation --------------------------------------------------------

    def preview_slots(self, config: TimeSlotConfig | None = None) -> list[TimeSlot]:
        return build_slots(config or TimeSlotConfig.from_settings(self.settings))

    def generate(self, request: GenerateTimetableRequest) -> GenerateTimetableResponse:
        config = request.time_slot_config or TimeSlotConfig.from_settings(self.settings)
        slots = build_slots(config)

        faculty = request.faculty
        if faculty is None:
            faculty = list_faculty_by_department(self.db, self.institute_id, request.department)
        courses = request.courses
        if courses is None:
            courses = list_courses_by_department(self.db, self.institute_id, request.department)
        rooms = request.rooms
        if rooms is None:
            rooms = list_room_names(self.db, self.institute_id) or list(self.settings.default_rooms)

        bookings: list[SessionIndexEntry] = []
        if request.respect_existing_bookings:
            bookings = self.index.bookings_for(self.institute_id, exclude_class=request.class_name)

        engine = AssignmentEngine(
            GenerationRequest(
                class_name=request.class_name,
                department=request.department,
                semester=request.semester,
                courses=courses,
                faculty=faculty,
                rooms=rooms,
                grid=slots,
                days=request.days or list(self.settings.working_days),
                block_gap_minutes=config.short_break_minutes,
                lunch_window=resolve_lunch_window(config),
                existing_bookings=bookings,
            )
        )
        result = engine.generate()
        conflicts = result.conflicts + self.analyze(result.entries)
        return GenerateTimetableResponse(
            entries=result.entries,
            conflicts=conflicts,
            slots=slots,
            summary=ConflictSummary.from_conflicts(conflicts),
        )

    def analyze(
        self,
        entries: list[TimetableEntry],
        include_history: bool = True,
        exclude_timetable_id: str | None = None,
    ) -> list[Conflict]:
        analyzer = ConflictAnalyzer(entries)
        conflicts = analyzer.detect_intra_conflicts()
        if not include_history or not entries:
            return conflicts

        if self.settings.conflict_lookup == "scan":
            history = list_historical_entries(self.db, self.institute_id, exclude_timetable_id)
            conflicts.extend(analyzer.detect_history_conflicts(history))
            return conflicts

        for entry in entries:
            rows = self.index.find_conflicting(ConflictProbe.for_entry(entry, self.institute_id))
            if exclude_timetable_id is not None:
                rows = [row for row in rows if row.timetable_id != exclude_timetable_id]
            conflicts.extend(conflicts_from_index_rows(entry, rows))
        return conflicts

    # -- lifecycle ---------------------------------------------------------

    def accept(self, payload: TimetableCreate) -> str:
        previous = self._active_for_class(payload.class_name, payload.semester)
        record = Timetable(
            institute_id=self.institute_id,
            class_name=payload.class_name,
            department=payload.department,
            semester=payload.semester,
            academic_year=payload.academic_year,
            entries=[entry.to_document() for entry in payload.entries],
            conflicts=[conflict.to_document() for conflict in payload.conflicts],
        )
        try:
            self.db.add(record)
            self.db.flush()
            for old in previous:
                old.superseded_by_id = record.id
            self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.exception("Failed to save timetable for class %s", payload.class_name)
            raise PersistenceError("Unable to save timetable", operation="accept") from exc

        timetable_id = record.id
        logger.info(
            "Accepted timetable %s for class %s with %d entries (superseded %d)",
            timetable_id,
            payload.class_name,
            len(payload.entries),
            len(previous),
        )

        def maintain(index: SessionIndex) -> IndexWriteResult:
            for old in previous:
                index.remove(old.id)
            return index.upsert(timetable_id, payload.entries, self.institute_id, payload.department)

        self._maintain_index(timetable_id, len(payload.entries), maintain)
        return timetable_id

    def update(self, timetable_id: str, entries: list[TimetableEntry]) -> None:
        record = self.get(timetable_id)
        conflicts = self.analyze(entries, exclude_timetable_id=timetable_id)
        department = record.department
        active = record.superseded_by_id is None
        try:
            record.entries = [entry.to_document() for entry in entries]
            record.conflicts = [conflict.to_document() for conflict in conflicts]
            self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.exception("Failed to update timetable %s", timetable_id)
            raise PersistenceError("Unable to update timetable", operation="update") from exc

        logger.info("Updated timetable %s with %d entries", timetable_id, len(entries))

        def maintain(index: SessionIndex) -> IndexWriteResult:
            if not active:
                index.remove(timetable_id)
                return IndexWriteResult()
            return index.rebuild(timetable_id, entries, self.institute_id, department)

        self._maintain_index(timetable_id, len(entries), maintain)

    def discard(self, timetable_id: str) -> None:
        record = self.get(timetable_id)
        try:
            self.db.delete(record)
            self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.exception("Failed to delete timetable %s", timetable_id)
            raise PersistenceError("Unable to delete timetable", operation="discard") from exc

        logger.info("Discarded timetable %s", timetable_id)

        def maintain(index: SessionIndex) -> IndexWriteResult:
            index.remove(timetable_id)
            return IndexWriteResult()

        self._maintain_index(timetable_id, 0, maintain)

    def reindex(self) -> ReindexResult:
        """Rebuild every index row of the institute from the Timetable records."""

        records = active_timetables(self.db, self.institute_id)
        written = IndexWriteResult()
        try:
            self.index.remove_orphans(self.institute_id, {record.id for record in records})
            for record in records:
                written = written.merge(
                    self.index.rebuild(record.id, entries_of(record), self.institute_id, record.department)
                )
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            logger.warning("Reindex failed for institute %s", self.institute_id, exc_info=True)
            return ReindexResult(timetables=len(records), failed=sum(len(record.entries or []) for record in records))

        result = ReindexResult(timetables=len(records), written=written.written, failed=written.failed)

        logger.info(
            "Reindexed %d timetables for institute %s (%d rows, %d failed)",
            result.timetables,
            self.institute_id,
            result.written,
            result.failed,
        )
        return result

    def _maintain_index(
        self,
        timetable_id: str,
        expected_rows: int,
        operation: Callable[[SessionIndex], IndexWriteResult],
    ) -> IndexWriteResult:
        try:
            result = operation(self.index)
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            logger.warning(
                "Session index maintenance failed for timetable %s; reindex to repair",
                timetable_id,
                exc_info=True,
            )
            return IndexWriteResult(failed=expected_rows)
        if result.failed:
            logger.warning(
                "Session index for timetable %s is missing %d of %d rows",
                timetable_id,
                result.failed,
                expected_rows,
            )
        return result

    # -- reads -------------------------------------------------------------

    def get(self, timetable_id: str) -> Timetable:
        record = self.db.get(Timetable, timetable_id)
        if record is None or record.institute_id != self.institute_id:
            raise ResourceNotFoundError("Timetable", timetable_id)
        return record

    def list_timetables(
        self,
        class_name: str | None = None,
        semester: str | None = None,
        include_superseded: bool = False,
    ) -> list[Timetable]:
        stmt = select(Timetable).where(Timetable.institute_id == self.institute_id)
        if class_name is not None:
            stmt = stmt.where(Timetable.class_name == class_name)
        if semester is not None:
            stmt = stmt.where(Timetable.semester == semester)
        if not include_superseded:
            stmt = stmt.where(Timetable.superseded_by_id.is_(None))
        stmt = stmt.order_by(Timetable.generated_at.desc(), Timetable.id)
        return list(self.db.execute(stmt).scalars())

    def latest_for_class(self, class_name: str, semester: str) -> Timetable | None:
        records = self.list_timetables(class_name=class_name, semester=semester)
        return records[0] if records else None

    def workload(self, timetable_id: str, faculty_id: str) -> FacultyWorkloadOut:
        return faculty_workload(entries_of(self.get(timetable_id)), faculty_id)

    def _active_for_class(self, class_name: str, semester: str) -> list[Timetable]:
        return self.list_timetables(class_name=class_name, semester=semester)
