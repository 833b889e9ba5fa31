import logging

import pytest
from sqlalchemy import delete, func, select
from sqlalchemy.exc import SQLAlchemyError

from conftest import INSTITUTE_ID, make_course, make_entry, make_faculty
from timegrid.core.config import Settings
from timegrid.core.exceptions import PersistenceError, ResourceNotFoundError
from timegrid.models.course import Course
from timegrid.models.faculty import Faculty
from timegrid.models.room import Room
from timegrid.models.session_index import SessionIndexRow
from timegrid.models.timetable import Timetable
from timegrid.schemas.timetable import GenerateTimetableRequest, TimetableCreate
from timegrid.services.session_index import SessionIndex
from timegrid.services.timetable_service import TimetableService


def _service(db, lookup: str = "index") -> TimetableService:
    return TimetableService(db, INSTITUTE_ID, Settings(conflict_lookup=lookup))


def _payload(class_name: str = "CSE-A", semester: str = "5", entries=None) -> TimetableCreate:
    if entries is None:
        entries = [
            make_entry("e1", class_name=class_name),
            make_entry("e2", class_name=class_name, start="10:10", end="11:10"),
        ]
    return TimetableCreate(
        class_name=class_name,
        department="CSE",
        semester=semester,
        academic_year="2026-2027",
        entries=entries,
    )


def _index_count(db, timetable_id: str) -> int:
    return db.execute(
        select(func.count(SessionIndexRow.id)).where(SessionIndexRow.timetable_id == timetable_id)
    ).scalar_one()


def test_accept_persists_record_and_index_rows(db):
    service = _service(db)

    timetable_id = service.accept(_payload())

    record = service.get(timetable_id)
    assert record.class_name == "CSE-A"
    assert [item["id"] for item in record.entries] == ["e1", "e2"]
    assert record.entries[0]["facultyId"] == "f1"
    assert record.superseded_by_id is None
    assert _index_count(db, timetable_id) == 2


def test_accept_supersedes_earlier_timetable_for_same_class(db):
    service = _service(db)
    first_id = service.accept(_payload())
    other_class_id = service.accept(_payload(class_name="CSE-B", entries=[make_entry("b1", class_name="CSE-B", day="Friday")]))

    second_id = service.accept(_payload())

    assert service.get(first_id).superseded_by_id == second_id
    assert service.get(other_class_id).superseded_by_id is None
    assert _index_count(db, first_id) == 0
    assert _index_count(db, second_id) == 2
    assert [record.id for record in service.list_timetables(class_name="CSE-A")] == [second_id]
    assert len(service.list_timetables(class_name="CSE-A", include_superseded=True)) == 2
    assert service.latest_for_class("CSE-A", "5").id == second_id
    assert service.latest_for_class("CSE-A", "6") is None


def test_update_replaces_entries_and_rebuilds_index(db):
    service = _service(db)
    timetable_id = service.accept(_payload())

    service.update(timetable_id, [make_entry("e9", day="Thursday", start="13:00", end="14:00")])

    record = service.get(timetable_id)
    assert [item["id"] for item in record.entries] == ["e9"]
    rows = service.index.rows_for(timetable_id)
    assert [(row.entry_id, row.day) for row in rows] == [("e9", "Thursday")]


def test_update_recomputes_conflicts(db):
    service = _service(db)
    service.accept(_payload(class_name="CSE-B", entries=[make_entry("b1", class_name="CSE-B", room="Room 999")]))
    timetable_id = service.accept(_payload(entries=[make_entry("a1", day="Friday")]))

    service.update(timetable_id, [make_entry("a1"), make_entry("a2", room="Room 302")])

    descriptions = [item["description"] for item in service.get(timetable_id).conflicts]
    assert "Dr. Johnson is double-booked on Monday at 09:00" in descriptions
    assert "Dr. Johnson is already teaching class CSE-B on Monday at 09:00-10:00" in descriptions


def test_discard_removes_record_and_index_rows(db):
    service = _service(db)
    timetable_id = service.accept(_payload())

    service.discard(timetable_id)

    assert db.get(Timetable, timetable_id) is None
    assert _index_count(db, timetable_id) == 0
    with pytest.raises(ResourceNotFoundError):
        service.discard(timetable_id)


def test_timetables_are_scoped_to_institute(db):
    timetable_id = _service(db).accept(_payload())

    other = TimetableService(db, "inst-2", Settings())

    with pytest.raises(ResourceNotFoundError) as exc_info:
        other.get(timetable_id)
    assert exc_info.value.status_code == 404
    assert other.list_timetables() == []


def test_primary_write_failure_raises_persistence_error(db, monkeypatch):
    service = _service(db)

    def failing_commit():
        raise SQLAlchemyError("disk full")

    monkeypatch.setattr(db, "commit", failing_commit)

    with pytest.raises(PersistenceError) as exc_info:
        service.accept(_payload())

    assert exc_info.value.status_code == 503
    assert exc_info.value.details == {"operation": "accept"}
    monkeypatch.undo()
    assert db.execute(select(func.count(Timetable.id))).scalar_one() == 0


def test_index_failure_does_not_fail_accept(db, monkeypatch, caplog):
    service = _service(db)

    def failing_upsert(self, *args, **kwargs):
        raise SQLAlchemyError("index unavailable")

    monkeypatch.setattr(SessionIndex, "upsert", failing_upsert)

    with caplog.at_level(logging.WARNING, logger="timegrid"):
        timetable_id = service.accept(_payload())

    assert service.get(timetable_id).class_name == "CSE-A"
    assert _index_count(db, timetable_id) == 0
    assert "reindex to repair" in caplog.text


def test_reindex_repairs_missing_rows(db):
    service = _service(db)
    first_id = service.accept(_payload())
    second_id = service.accept(_payload(class_name="CSE-B", entries=[make_entry("b1", class_name="CSE-B")]))
    db.execute(delete(SessionIndexRow))
    SessionIndex(db).upsert("deleted-timetable", [make_entry("x1")], INSTITUTE_ID, "CSE")
    db.commit()

    result = service.reindex()

    assert (result.timetables, result.written, result.failed) == (2, 3, 0)
    assert _index_count(db, first_id) == 2
    assert _index_count(db, second_id) == 1
    assert _index_count(db, "deleted-timetable") == 0


def test_index_and_scan_lookups_agree(db):
    _service(db).accept(
        _payload(
            class_name="CSE-B",
            entries=[
                make_entry("b1", class_name="CSE-B", start="09:00", end="11:10", room="Lab 1"),
                make_entry("b2", class_name="CSE-B", day="Tuesday", faculty_id="f2", faculty_name="Dr. Brown"),
            ],
        )
    )
    candidate = [
        make_entry("a1", start="10:10", end="11:10"),
        make_entry("a2", day="Tuesday", faculty_id="f3", faculty_name="Dr. Rao"),
        make_entry("a3", day="Wednesday"),
    ]

    via_index = _service(db, "index").analyze(candidate)
    via_scan = _service(db, "scan").analyze(candidate)

    assert sorted(conflict.description for conflict in via_index) == sorted(
        conflict.description for conflict in via_scan
    )
    assert len(via_index) == 2


def test_analyze_can_skip_history_and_exclude_a_timetable(db):
    service = _service(db)
    saved_id = service.accept(_payload(class_name="CSE-B", entries=[make_entry("b1", class_name="CSE-B")]))
    candidate = [make_entry("a1")]

    assert len(service.analyze(candidate)) == 2
    assert service.analyze(candidate, include_history=False) == []
    assert service.analyze(candidate, exclude_timetable_id=saved_id) == []
    assert _service(db, "scan").analyze(candidate, exclude_timetable_id=saved_id) == []


def test_generate_reads_catalog_and_never_persists(db):
    db.add(Faculty(id="f1", institute_id=INSTITUTE_ID, name="Dr. Johnson", department="CSE", classes=["CSE-A"]))
    db.add(Course(id="c1", institute_id=INSTITUTE_ID, code="CSE301", name="Data Structures", department="CSE", credits=3, faculty_id="f1"))
    db.add(Room(institute_id=INSTITUTE_ID, name="Room 301"))
    db.commit()

    response = _service(db).generate(GenerateTimetableRequest(class_name="CSE-A", department="CSE", semester="5"))

    assert len(response.entries) == 3
    assert {entry.room for entry in response.entries} == {"Room 301"}
    assert response.summary.total == 0
    assert [slot.start_time for slot in response.slots] == ["09:00", "10:10", "13:00", "14:10", "15:20"]
    assert db.execute(select(func.count(Timetable.id))).scalar_one() == 0


def test_generate_respects_existing_bookings(db):
    service = _service(db)
    service.accept(_payload(class_name="CSE-B", entries=[make_entry("b1", class_name="CSE-B", room="Room 999")]))
    request = GenerateTimetableRequest(
        class_name="CSE-A",
        department="CSE",
        semester="5",
        rooms=["Room 301"],
        faculty=[make_faculty()],
        courses=[make_course(credits=1)],
        respect_existing_bookings=True,
    )

    response = service.generate(request)

    assert response.entries[0].start_time == "10:10"
    assert response.summary.medium == 1
    assert response.summary.high == 0


def test_workload_for_saved_timetable(db):
    service = _service(db)
    timetable_id = service.accept(_payload())

    workload = service.workload(timetable_id, "f1")

    assert workload.total_sessions == 2
    assert workload.total_minutes == 120


def _reject_merge_for(db, monkeypatch, entry_id: str) -> None:
    original_merge = db.merge

    def flaky_merge(instance, **kwargs):
        if getattr(instance, "entry_id", None) == entry_id:
            raise SQLAlchemyError("row rejected")
        return original_merge(instance, **kwargs)

    monkeypatch.setattr(db, "merge", flaky_merge)


def _three_entries() -> list:
    return [
        make_entry("e1"),
        make_entry("e2", start="10:10", end="11:10"),
        make_entry("e3", day="Tuesday"),
    ]


def test_failed_index_row_is_skipped_and_counted(db, monkeypatch, caplog):
    _reject_merge_for(db, monkeypatch, "e2")

    with caplog.at_level(logging.WARNING, logger="timegrid"):
        result = SessionIndex(db).upsert("t1", _three_entries(), INSTITUTE_ID, "CSE")
        db.commit()

    assert (result.written, result.failed) == (2, 1)
    assert [row.entry_id for row in SessionIndex(db).rows_for("t1")] == ["e1", "e3"]
    assert "Session index write failed for timetable t1 entry e2" in caplog.text


def test_partial_index_failure_keeps_timetable_and_other_rows(db, monkeypatch, caplog):
    service = _service(db)
    _reject_merge_for(db, monkeypatch, "e2")

    with caplog.at_level(logging.WARNING, logger="timegrid"):
        timetable_id = service.accept(_payload(entries=_three_entries()))

    assert len(service.get(timetable_id).entries) == 3
    assert sorted(row.entry_id for row in service.index.rows_for(timetable_id)) == ["e1", "e3"]
    assert f"Session index for timetable {timetable_id} is missing 1 of 3 rows" in caplog.text
