import pytest

from timetable.core.exceptions import ConfigurationError
from timetable.scheduling import TimeWindow, build_time_grid
from timetable.scheduling.time_grid import slot_starting_at


def _spans(grid):
    return [(slot.lesson_number, slot.start_time, slot.end_time) for slot in grid]


def test_back_to_back_lessons_fill_the_window_exactly():
    grid = build_time_grid(TimeWindow(day_start="08:00", day_end="09:30", lesson_minutes=45, break_minutes=0))

    assert _spans(grid) == [(1, "08:00", "08:45"), (2, "08:45", "09:30")]


def test_default_window_has_seven_lessons_with_breaks():
    grid = build_time_grid(TimeWindow())

    assert len(grid) == 7
    assert _spans(grid)[0] == (1, "08:00", "08:45")
    assert _spans(grid)[1] == (2, "09:00", "09:45")
    assert _spans(grid)[-1] == (7, "14:00", "14:45")


def test_slot_that_would_overrun_the_day_is_dropped():
    grid = build_time_grid(TimeWindow(day_start="08:00", day_end="09:20", lesson_minutes=45, break_minutes=0))

    assert _spans(grid) == [(1, "08:00", "08:45")]


def test_grid_is_pure():
    window = TimeWindow(day_start="07:30", day_end="13:10", lesson_minutes=40, break_minutes=10)

    assert build_time_grid(window) == build_time_grid(window)


@pytest.mark.parametrize(
    "window",
    [
        TimeWindow(lesson_minutes=0),
        TimeWindow(lesson_minutes=-45),
        TimeWindow(break_minutes=-1),
        TimeWindow(day_start="10:00", day_end="10:00"),
        TimeWindow(day_start="12:00", day_end="08:00"),
        TimeWindow(day_start="08:00", day_end="08:30", lesson_minutes=45),
        TimeWindow(day_start="8:00"),
    ],
)
def test_malformed_windows_raise_configuration_error(window):
    with pytest.raises(ConfigurationError) as exc_info:
        build_time_grid(window)

    assert exc_info.value.status_code == 422


def test_only_slot_starts_resolve_to_a_lesson():
    grid = build_time_grid(TimeWindow())

    assert slot_starting_at(grid, 8 * 60).lesson_number == 1
    assert slot_starting_at(grid, 9 * 60).lesson_number == 2
    assert slot_starting_at(grid, 14 * 60).lesson_number == 7
    # 08:50 sits in the break after lesson 1
    assert slot_starting_at(grid, 8 * 60 + 50) is None
    assert slot_starting_at(grid, 8 * 60 + 10) is None
    assert slot_starting_at(grid, 7 * 60) is None
    assert slot_starting_at(grid, 15 * 60) is None
