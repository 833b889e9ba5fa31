from __future__ import annotations

from collections import defaultdict

from timegrid.schemas.conflict import SessionIndexEntry
from timegrid.schemas.time_grid import format_minutes, intervals_overlap
from timegrid.schemas.timetable import Conflict, TimetableEntry


def _booking_conflicts(
    entry: TimetableEntry,
    other_class: str,
    other_faculty_id: str,
    other_room: str,
    other_start: int,
    other_end: int,
) -> list[Conflict]:
    window = f"{format_minutes(other_start)}-{format_minutes(other_end)}"
    conflicts: list[Conflict] = []
    if other_faculty_id == entry.faculty_id:
        conflicts.append(
            Conflict(
                type="teacher",
                severity="high",
                description=(
                    f"{entry.faculty_name} is already teaching class {other_class} "
                    f"on {entry.day} at {window}"
                ),
                session_id=entry.id,
            )
        )
    if other_room == entry.room:
        conflicts.append(
            Conflict(
                type="room",
                severity="high",
                description=f"Room {entry.room} is already booked by class {other_class} on {entry.day} at {window}",
                session_id=entry.id,
            )
        )
    return conflicts


def conflicts_from_index_rows(entry: TimetableEntry, rows: list[SessionIndexEntry]) -> list[Conflict]:
    conflicts: list[Conflict] = []
    for row in rows:
        conflicts.extend(
            _booking_conflicts(entry, row.class_name, row.faculty_id, row.room, row.start_minutes, row.end_minutes)
        )
    return conflicts


class ConflictAnalyzer:
    def __init__(self, entries: list[TimetableEntry]):
        self.entries = entries

    def detect_intra_conflicts(self) -> list[Conflict]:
        conflicts: list[Conflict] = []

        # Bucket by day, then check pairwise: one conflict per offending pair.
        entries_by_day: dict[str, list[TimetableEntry]] = defaultdict(list)
        for entry in self.entries:
            entries_by_day[entry.day].append(entry)

        for day, day_entries in entries_by_day.items():
            n = len(day_entries)
            for i in range(n):
                first = day_entries[i]
                for j in range(i + 1, n):
                    second = day_entries[j]
                    if not intervals_overlap(
                        first.start_minutes, first.end_minutes, second.start_minutes, second.end_minutes
                    ):
                        continue
                    if first.faculty_id == second.faculty_id:
                        conflicts.append(
                            Conflict(
                                type="teacher",
                                severity="high",
                                description=f"{second.faculty_name} is double-booked on {day} at {second.start_time}",
                                session_id=second.id,
                            )
                        )
                    if first.room == second.room:
                        conflicts.append(
                            Conflict(
                                type="room",
                                severity="high",
                                description=f"Room {second.room} is double-booked on {day} at {second.start_time}",
                                session_id=second.id,
                            )
                        )
        return conflicts

    def detect_history_conflicts(self, history: list[TimetableEntry]) -> list[Conflict]:
        """Compare against entries of saved timetables for other classes.

        Uses half-open interval overlap, so a 09:00-11:00 lab collides with a
        10:00 lecture even though their start times differ.
        """

        history_by_day: dict[str, list[TimetableEntry]] = defaultdict(list)
        for other in history:
            history_by_day[other.day].append(other)

        conflicts: list[Conflict] = []
        for entry in self.entries:
            for other in history_by_day.get(entry.day, []):
                if other.class_name == entry.class_name:
                    continue
                if not intervals_overlap(entry.start_minutes, entry.end_minutes, other.start_minutes, other.end_minutes):
                    continue
                conflicts.extend(
                    _booking_conflicts(
                        entry,
                        other.class_name,
                        other.faculty_id,
                        other.room,
                        other.start_minutes,
                        other.end_minutes,
                    )
                )
        return conflicts

    def analyze(self, history: list[TimetableEntry] | None = None) -> list[Conflict]:
        conflicts = self.detect_intra_conflicts()
        if history:
            conflicts.extend(self.detect_history_conflicts(history))
        return conflicts


def analyze(entries: list[TimetableEntry], history: list[TimetableEntry] | None = None) -> list[Conflict]:
    return ConflictAnalyzer(entries).analyze(history)
