import pytest

from timetable.core.exceptions import ConflictError
from timetable.scheduling import ConflictIndex, ScheduleEntry, Slot


def make_entry(entry_id, *, teacher="t1", class_group="g1", day="Monday", start="08:00", end="08:45"):
    return ScheduleEntry(
        id=entry_id,
        class_group_id=class_group,
        teacher_id=teacher,
        subject_id="s1",
        day=day,
        start_time=start,
        end_time=end,
        lesson_number=1,
    )


FIRST_SLOT = Slot(lesson_number=1, start=8 * 60, end=8 * 60 + 45)
SECOND_SLOT = Slot(lesson_number=2, start=9 * 60, end=9 * 60 + 45)


def test_reserve_occupies_teacher_and_class_group_cells():
    index = ConflictIndex()
    index.reserve(make_entry("e1"))

    assert not index.is_teacher_free("t1", "Monday", FIRST_SLOT)
    assert not index.is_class_group_free("g1", "Monday", FIRST_SLOT)
    assert index.is_teacher_free("t1", "Monday", SECOND_SLOT)
    assert index.is_teacher_free("t1", "Tuesday", FIRST_SLOT)
    assert index.is_teacher_free("t2", "Monday", FIRST_SLOT)
    assert "e1" in index
    assert len(index) == 1


def test_reserve_on_occupied_cell_names_the_occupant():
    index = ConflictIndex.from_entries([make_entry("e1")])

    with pytest.raises(ConflictError) as exc_info:
        index.reserve(make_entry("e2", class_group="g2", start="08:30", end="09:15"))

    assert exc_info.value.occupying_entry_id == "e1"
    assert exc_info.value.details["resource"] == "teacher"
    assert "e2" not in index
    assert index.is_class_group_free("g2", "Monday", FIRST_SLOT)


def test_class_group_cell_conflicts_independently_of_teacher():
    index = ConflictIndex.from_entries([make_entry("e1")])

    with pytest.raises(ConflictError) as exc_info:
        index.reserve(make_entry("e2", teacher="t2"))

    assert exc_info.value.details["resource"] == "class_group"
    assert index.is_teacher_free("t2", "Monday", FIRST_SLOT)


def test_adjacent_ranges_do_not_overlap():
    index = ConflictIndex.from_entries([make_entry("e1", start="08:00", end="08:45")])

    index.reserve(make_entry("e2", start="08:45", end="09:30"))

    assert index.teacher_blocker("t1", "Monday", 8 * 60 + 45, 9 * 60 + 30) == "e2"
    assert len(index) == 2


def test_unaligned_entries_still_block_grid_slots():
    index = ConflictIndex.from_entries([make_entry("manual", start="09:30", end="10:00")])

    assert not index.is_teacher_free("t1", "Monday", SECOND_SLOT)
    assert index.teacher_blocker("t1", "Monday", 9 * 60, 9 * 60 + 45) == "manual"


def test_release_frees_cells_and_ignores_unknown_entries():
    entry = make_entry("e1")
    index = ConflictIndex.from_entries([entry])

    index.release(entry)
    index.release(make_entry("never-reserved"))

    assert index.is_teacher_free("t1", "Monday", FIRST_SLOT)
    assert index.is_class_group_free("g1", "Monday", FIRST_SLOT)
    assert len(index) == 0
    index.reserve(make_entry("e2"))
