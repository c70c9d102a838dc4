import pytest

from timetable.core.exceptions import (
    ClassGroupConflictError,
    OutOfWindowError,
    TeacherConflictError,
    UnknownReferenceError,
    UnqualifiedTeacherError,
    ValidationError,
)
from timetable.scheduling import (
    ClassGroup,
    ConflictIndex,
    DomainSnapshot,
    EntryValidator,
    ScheduleEntry,
    Subject,
    Teacher,
    TimeWindow,
    validate_and_prepare,
)


def build_snapshot(entries=()):
    return DomainSnapshot.build(
        class_groups=[ClassGroup("g1", "10A", 10), ClassGroup("g2", "10B", 10)],
        teachers=[
            Teacher("t1", "John Smith", frozenset({"math", "physics"})),
            Teacher("t2", "Maria Lopez", frozenset({"cs"})),
            Teacher("t3", "Sam Idle"),
        ],
        subjects=[
            Subject("math", "Mathematics", 4),
            Subject("physics", "Physics", 3),
            Subject("cs", "Computer Science", 3),
        ],
        entries=entries,
        time_window=TimeWindow(day_start="08:00", day_end="15:00", lesson_minutes=45, break_minutes=15),
    )


def candidate(entry_id="new", *, teacher="t1", class_group="g1", subject="math", day="Monday",
              start="08:00", end="08:45", room=None, lesson_number=None):
    return ScheduleEntry(
        id=entry_id,
        class_group_id=class_group,
        teacher_id=teacher,
        subject_id=subject,
        day=day,
        start_time=start,
        end_time=end,
        room=room,
        lesson_number=lesson_number,
    )


def test_valid_entry_is_accepted_and_numbered_from_grid():
    accepted = validate_and_prepare(candidate(start="09:00", end="09:45", lesson_number=7), build_snapshot())

    assert accepted.lesson_number == 2
    assert accepted.id == "new"
    assert accepted.start_time == "09:00"


def test_manual_entry_on_reserved_teacher_slot_names_the_existing_entry():
    existing = candidate("existing", class_group="g2", lesson_number=1)
    snapshot = build_snapshot([existing])

    with pytest.raises(TeacherConflictError) as exc_info:
        validate_and_prepare(candidate(), snapshot)

    assert exc_info.value.blocking_entry_id == "existing"
    assert exc_info.value.status_code == 409
    assert exc_info.value.details["entry"]["id"] == "new"


def test_class_group_conflict_names_the_existing_entry():
    existing = candidate("existing", teacher="t2", subject="cs", start="08:15", end="09:00", lesson_number=1)

    with pytest.raises(ClassGroupConflictError) as exc_info:
        validate_and_prepare(candidate(), build_snapshot([existing]))

    assert exc_info.value.blocking_entry_id == "existing"


def test_same_teacher_in_another_room_is_still_a_conflict():
    existing = candidate("existing", class_group="g2", room="Lab 1", lesson_number=1)

    with pytest.raises(TeacherConflictError):
        validate_and_prepare(candidate(room="Room 12"), build_snapshot([existing]))


def test_shared_room_label_is_not_a_conflict():
    existing = candidate("existing", teacher="t2", class_group="g2", subject="cs", room="Hall", lesson_number=1)

    accepted = validate_and_prepare(candidate(room="Hall"), build_snapshot([existing]))

    assert accepted.room == "Hall"


@pytest.mark.parametrize(
    "overrides, resource_type",
    [
        ({"class_group": "ghost"}, "ClassGroup"),
        ({"teacher": "ghost"}, "Teacher"),
        ({"subject": "ghost"}, "Subject"),
    ],
)
def test_unknown_references_are_rejected(overrides, resource_type):
    with pytest.raises(UnknownReferenceError) as exc_info:
        validate_and_prepare(candidate(**overrides), build_snapshot())

    assert exc_info.value.resource_type == resource_type
    assert isinstance(exc_info.value, ValidationError)


def test_unqualified_teacher_is_rejected_before_time_or_conflict_checks():
    existing = candidate("existing", lesson_number=1)
    snapshot = build_snapshot([existing])

    for bad in (
        candidate(subject="cs"),
        candidate(subject="cs", start="16:00", end="16:45"),
        candidate(teacher="t3", subject="math"),
    ):
        with pytest.raises(UnqualifiedTeacherError):
            validate_and_prepare(bad, snapshot)


@pytest.mark.parametrize(
    "overrides",
    [
        {"start": "07:15", "end": "08:00"},
        {"start": "14:30", "end": "15:15"},
        {"start": "10:00", "end": "10:00"},
        {"start": "11:00", "end": "10:15"},
        {"day": "Saturday"},
    ],
)
def test_entries_outside_the_school_day_are_rejected(overrides):
    with pytest.raises(OutOfWindowError):
        validate_and_prepare(candidate(**overrides), build_snapshot())


def test_malformed_time_is_a_validation_error():
    with pytest.raises(ValidationError):
        validate_and_prepare(candidate(start="9am", end="10am"), build_snapshot())


def test_entry_ending_exactly_at_day_end_is_accepted():
    accepted = validate_and_prepare(candidate(start="14:00", end="15:00"), build_snapshot())

    assert accepted.lesson_number == 7


def test_successive_validations_accumulate_reservations():
    snapshot = build_snapshot()
    validator = EntryValidator(snapshot)

    first = validator.validate(candidate("first"))
    with pytest.raises(TeacherConflictError) as exc_info:
        validator.validate(candidate("second", class_group="g2"))

    assert exc_info.value.blocking_entry_id == first.id
    assert "first" in validator.index
    assert snapshot.entries == ()


def test_shared_index_is_used_when_supplied():
    index = ConflictIndex()
    snapshot = build_snapshot()

    validate_and_prepare(candidate("first"), snapshot, index)

    with pytest.raises(ClassGroupConflictError):
        validate_and_prepare(candidate("second", teacher="t2", subject="cs"), snapshot, index)


@pytest.mark.parametrize("start, end", [("08:46", "08:58"), ("08:10", "08:40"), ("09:30", "10:15")])
def test_entries_must_start_on_a_lesson_slot(start, end):
    validator = EntryValidator(build_snapshot())
    first = validator.validate(candidate("first"))

    with pytest.raises(OutOfWindowError) as exc_info:
        validator.validate(candidate("second", teacher="t2", subject="cs", start=start, end=end))

    assert exc_info.value.details["entry"]["id"] == "second"
    assert "second" not in validator.index
    assert first.lesson_number == 1


def test_lesson_numbers_in_one_class_group_are_unique_unless_entries_overlap():
    validator = EntryValidator(build_snapshot())

    accepted = [
        validator.validate(candidate("first", start="08:00", end="08:45")),
        validator.validate(candidate("second", teacher="t2", subject="cs", start="09:00", end="10:00")),
        validator.validate(candidate("third", start="10:00", end="10:45")),
    ]

    assert [entry.lesson_number for entry in accepted] == [1, 2, 3]
