"""Day-shape arithmetic: turns a TimeSlotConfig into the bookable slots of a day.

Sessions are laid end to end from the start of the day, separated by the short
break. A session that would touch the lunch window is dropped (never shortened
or split) and the cursor resumes at the end of lunch. No short break is added
right before lunch or right at its end, since lunch already separates them.
"""

from __future__ import annotations

from timegrid.core.exceptions import ConfigurationError
from timegrid.schemas.time_grid import TimeSlot, TimeSlotConfig, intervals_overlap, parse_time_to_minutes


def _parse_config_time(value: str | None, field: str) -> int:
    try:
        return parse_time_to_minutes(value or "")
    except ValueError as exc:
        raise ConfigurationError(f"{field} must be in HH:MM 24-hour format", field=field) from exc


def resolve_lunch_window(config: TimeSlotConfig) -> tuple[int, int] | None:
    """Return the half-open lunch window in minutes, or None when the day has no lunch."""

    if config.lunch_break_minutes < 0:
        raise ConfigurationError("lunchBreakMinutes cannot be negative", field="lunchBreakMinutes")
    if config.lunch_break_start is None:
        return None

    day_start = _parse_config_time(config.start_time, "startTime")
    day_end = _parse_config_time(config.end_time, "endTime")
    lunch_start = _parse_config_time(config.lunch_break_start, "lunchBreakStart")
    if not day_start <= lunch_start <= day_end:
        raise ConfigurationError(
            "lunchBreakStart must fall between startTime and endTime",
            field="lunchBreakStart",
        )
    if config.lunch_break_minutes == 0:
        return None
    return lunch_start, lunch_start + config.lunch_break_minutes


def validate_config(config: TimeSlotConfig) -> tuple[int, int, tuple[int, int] | None]:
    day_start = _parse_config_time(config.start_time, "startTime")
    day_end = _parse_config_time(config.end_time, "endTime")
    if day_start >= day_end:
        raise ConfigurationError("startTime must be before endTime", field="endTime")
    if config.session_duration_minutes <= 0:
        raise ConfigurationError(
            "sessionDurationMinutes must be greater than zero",
            field="sessionDurationMinutes",
        )
    if config.short_break_minutes < 0:
        raise ConfigurationError("shortBreakMinutes cannot be negative", field="shortBreakMinutes")
    return day_start, day_end, resolve_lunch_window(config)


def _inside(position: int, window: tuple[int, int] | None) -> bool:
    return window is not None and window[0] <= position < window[1]


def build_slots(config: TimeSlotConfig) -> list[TimeSlot]:
    day_start, day_end, lunch = validate_config(config)
    duration = config.session_duration_minutes
    short_break = config.short_break_minutes

    slots: list[TimeSlot] = []
    cursor = day_start
    while cursor + duration <= day_end:
        if lunch is not None:
            lunch_start, lunch_end = lunch
            if _inside(cursor, lunch) or intervals_overlap(cursor, cursor + duration, lunch_start, lunch_end):
                # cursor < lunch_end in both branches, so this always moves forward
                cursor = lunch_end
                continue

        slots.append(TimeSlot(index=len(slots), start_minutes=cursor, end_minutes=cursor + duration))
        cursor += duration

        if short_break and not _inside(cursor, lunch) and not _inside(cursor + short_break, lunch):
            cursor += short_break

    return slots


def slots_are_contiguous(first: TimeSlot, second: TimeSlot, max_gap_minutes: int) -> bool:
    gap = second.start_minutes - first.end_minutes
    return 0 <= gap <= max_gap_minutes


def contiguous_runs(
    slots: list[TimeSlot],
    length: int,
    max_gap_minutes: int,
    blocked: tuple[int, int] | None = None,
) -> list[tuple[TimeSlot, ...]]:
    """Every run of `length` consecutive slots whose gaps never exceed `max_gap_minutes`.

    A run whose overall span touches `blocked` (the lunch window) is left out.
    Runs come back ordered by their first slot.
    """

    if length <= 0:
        return []
    runs: list[tuple[TimeSlot, ...]] = []
    for start in range(0, len(slots) - length + 1):
        run = tuple(slots[start : start + length])
        if not all(slots_are_contiguous(a, b, max_gap_minutes) for a, b in zip(run, run[1:])):
            continue
        if blocked is not None and intervals_overlap(run[0].start_minutes, run[-1].end_minutes, *blocked):
            continue
        runs.append(run)
    return runs
