"""Deterministic, quota-driven placement of a department's courses for one class.

For each course the engine walks the working days in order and, within a day,
the grid slots in index order, placing the course's assigned faculty into the
first slot (or contiguous run of slots for long sessions) where the faculty,
the class and at least one room are free. Every obstacle met on the way is
recorded as an advisory Conflict; nothing here raises for a data problem.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
import logging
import math

from timegrid.core.exceptions import SchedulerError
from timegrid.schemas.catalog import CoursePayload, FacultyPayload
from timegrid.schemas.conflict import SessionIndexEntry
from timegrid.schemas.time_grid import TimeSlot, format_minutes, intervals_overlap
from timegrid.schemas.timetable import Conflict, TimetableEntry
from timegrid.services.time_grid import contiguous_runs

logger = logging.getLogger(__name__)


@dataclass
class GenerationRequest:
    class_name: str
    department: str
    semester: str
    courses: list[CoursePayload]
    faculty: list[FacultyPayload]
    rooms: list[str]
    grid: list[TimeSlot]
    days: list[str]
    # largest gap (normally the short break) two slots may have and still form one block
    block_gap_minutes: int = 0
    lunch_window: tuple[int, int] | None = None
    # bookings held by other classes' saved timetables
    existing_bookings: list[SessionIndexEntry] = field(default_factory=list)


@dataclass
class GenerationResult:
    entries: list[TimetableEntry] = field(default_factory=list)
    conflicts: list[Conflict] = field(default_factory=list)


@dataclass
class _SlotUsage:
    faculty_ids: set[str] = field(default_factory=set)
    rooms: set[str] = field(default_factory=set)
    busy_class: bool = False


def _run_label(run: tuple[TimeSlot, ...]) -> str:
    return f"{format_minutes(run[0].start_minutes)}-{format_minutes(run[-1].end_minutes)}"


class AssignmentEngine:
    def __init__(self, request: GenerationRequest):
        if not request.days:
            raise SchedulerError("At least one working day is required", details={"field": "days"})
        self.request = request
        self.faculty_by_id = {member.id: member for member in request.faculty}
        # occupied[(day, slot_index)] for this run only
        self.occupied: dict[tuple[str, int], _SlotUsage] = defaultdict(_SlotUsage)
        self.booked = self._index_existing_bookings()

    def _index_existing_bookings(self) -> dict[tuple[str, int], _SlotUsage]:
        booked: dict[tuple[str, int], _SlotUsage] = defaultdict(_SlotUsage)
        for row in self.request.existing_bookings:
            if row.class_name == self.request.class_name:
                continue
            for slot in self.request.grid:
                if intervals_overlap(slot.start_minutes, slot.end_minutes, row.start_minutes, row.end_minutes):
                    usage = booked[(row.day, slot.index)]
                    usage.faculty_ids.add(row.faculty_id)
                    usage.rooms.add(row.room)
        return booked

    def generate(self) -> GenerationResult:
        result = GenerationResult()
        department_courses = [
            course for course in self.request.courses if course.department == self.request.department
        ]
        for course in department_courses:
            faculty = self.faculty_by_id.get(course.faculty_id) if course.faculty_id else None
            if faculty is None:
                result.conflicts.append(
                    Conflict(
                        type="teacher",
                        severity="high",
                        description=f"No faculty assigned for course {course.name}",
                    )
                )
                continue

            if not faculty.may_teach(self.request.class_name):
                result.conflicts.append(
                    Conflict(
                        type="teacher",
                        severity="high",
                        description=f"{faculty.name} is not assigned to class {self.request.class_name}",
                    )
                )
                continue

            entries, conflicts = self._place_course(course, faculty)
            result.entries.extend(entries)
            result.conflicts.extend(conflicts)

        logger.info(
            "Generated %d entries with %d conflicts for class %s (%s)",
            len(result.entries),
            len(result.conflicts),
            self.request.class_name,
            self.request.department,
        )
        return result

    def session_span(self, course: CoursePayload) -> int:
        """Number of consecutive grid slots one session of `course` occupies."""

        if not self.request.grid or course.duration_minutes is None:
            return 1
        slot_minutes = self.request.grid[0].duration_minutes
        return max(1, math.ceil(course.duration_minutes / slot_minutes))

    def _place_course(
        self,
        course: CoursePayload,
        faculty: FacultyPayload,
    ) -> tuple[list[TimetableEntry], list[Conflict]]:
        entries: list[TimetableEntry] = []
        conflicts: list[Conflict] = []
        needed = course.weekly_quota
        runs = contiguous_runs(
            self.request.grid,
            self.session_span(course),
            self.request.block_gap_minutes,
            blocked=self.request.lunch_window,
        )

        for day in self.request.days:
            if len(entries) >= needed:
                break
            for run in runs:
                if len(entries) >= needed:
                    break

                keys = [(day, slot.index) for slot in run]
                label = _run_label(run)

                if any(faculty.id in self.occupied[key].faculty_ids for key in keys):
                    conflicts.append(
                        Conflict(
                            type="teacher",
                            severity="medium",
                            description=f"{faculty.name} has conflicting schedule on {day} at {label}",
                        )
                    )
                    continue

                if any(faculty.id in self.booked[key].faculty_ids for key in keys):
                    conflicts.append(
                        Conflict(
                            type="teacher",
                            severity="medium",
                            description=f"{faculty.name} is already booked by another class on {day} at {label}",
                        )
                    )
                    continue

                if any(self.occupied[key].busy_class for key in keys):
                    continue

                room = self._find_available_room(keys)
                if room is None:
                    conflicts.append(
                        Conflict(
                            type="room",
                            severity="high",
                            description=f"No room available on {day} at {label}",
                        )
                    )
                    continue

                entries.append(self._build_entry(course, faculty, day, run, room))
                for key in keys:
                    usage = self.occupied[key]
                    usage.faculty_ids.add(faculty.id)
                    usage.rooms.add(room)
                    usage.busy_class = True

        if len(entries) < needed:
            conflicts.append(
                Conflict(
                    type="preference",
                    severity="medium",
                    description=f"Could only assign {len(entries)}/{needed} slots for {course.name}",
                )
            )
        return entries, conflicts

    def _find_available_room(self, keys: list[tuple[str, int]]) -> str | None:
        for room in self.request.rooms:
            if any(room in self.occupied[key].rooms or room in self.booked[key].rooms for key in keys):
                continue
            return room
        return None

    def _build_entry(
        self,
        course: CoursePayload,
        faculty: FacultyPayload,
        day: str,
        run: tuple[TimeSlot, ...],
        room: str,
    ) -> TimetableEntry:
        first = run[0]
        return TimetableEntry(
            id=f"{course.id}-{day}-{first.index}",
            subject_id=course.id,
            subject_name=course.name,
            faculty_id=faculty.id,
            faculty_name=faculty.name,
            class_name=self.request.class_name,
            department=self.request.department,
            room=room,
            day=day,
            slot_index=first.index,
            start_time=format_minutes(first.start_minutes),
            end_time=format_minutes(run[-1].end_minutes),
            type=course.type,
        )


def generate_entries(request: GenerationRequest) -> GenerationResult:
    return AssignmentEngine(request).generate()
