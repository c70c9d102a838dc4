from __future__ import annotations

from bisect import bisect_left
from typing import Sequence

from timetable.core.exceptions import ConfigurationError
from timetable.scheduling.domain import Slot, TimeWindow, parse_time_to_minutes


def _window_bounds(window: TimeWindow) -> tuple[int, int]:
    try:
        start = parse_time_to_minutes(window.day_start)
        end = parse_time_to_minutes(window.day_end)
    except ValueError as exc:
        raise ConfigurationError(
            f"Invalid day boundary: {exc}",
            details={"day_start": window.day_start, "day_end": window.day_end},
        ) from exc
    return start, end


def build_time_grid(window: TimeWindow) -> tuple[Slot, ...]:
    """Return the lesson slots of one school day for ``window``.

    Slot ``k`` starts ``(k - 1) * (lesson + break)`` minutes after the day
    start and lasts ``lesson`` minutes; the first slot that would end after
    the day end is dropped together with everything after it. Every weekday
    shares the same grid.
    """
    if window.lesson_minutes <= 0:
        raise ConfigurationError(
            "Lesson duration must be positive",
            details={"lesson_minutes": window.lesson_minutes},
        )
    if window.break_minutes < 0:
        raise ConfigurationError(
            "Break duration cannot be negative",
            details={"break_minutes": window.break_minutes},
        )

    day_start, day_end = _window_bounds(window)
    if day_end <= day_start:
        raise ConfigurationError(
            "Day end time must be after day start time",
            details={"day_start": window.day_start, "day_end": window.day_end},
        )

    stride = window.lesson_minutes + window.break_minutes
    slots: list[Slot] = []
    start = day_start
    while start + window.lesson_minutes <= day_end:
        slots.append(Slot(lesson_number=len(slots) + 1, start=start, end=start + window.lesson_minutes))
        start += stride

    if not slots:
        raise ConfigurationError(
            "Time window is too short for a single lesson",
            details={
                "day_start": window.day_start,
                "day_end": window.day_end,
                "lesson_minutes": window.lesson_minutes,
            },
        )
    return tuple(slots)


def slot_starting_at(grid: Sequence[Slot], start: int) -> Slot | None:
    starts = [slot.start for slot in grid]
    position = bisect_left(starts, start)
    if position < len(grid) and starts[position] == start:
        return grid[position]
    return None
