from __future__ import annotations

import logging
from dataclasses import replace

from timetable.core.exceptions import (
    ClassGroupConflictError,
    OutOfWindowError,
    TeacherConflictError,
    UnknownReferenceError,
    UnqualifiedTeacherError,
    ValidationError,
)
from timetable.scheduling.conflict_index import ConflictIndex
from timetable.scheduling.domain import WEEKDAYS, DomainSnapshot, ScheduleEntry, Slot, TimeWindow
from timetable.scheduling.time_grid import build_time_grid, slot_starting_at

logger = logging.getLogger(__name__)


class EntryValidator:
    """Gatekeeper every candidate entry passes through before it is placed.

    Checks run fail-fast: references, qualification, time window (an entry
    must start on a grid slot boundary), then
    teacher and class-group occupancy. An accepted entry is reserved in the
    validator's conflict index, so a sequence of calls sees earlier results.
    """

    def __init__(
        self,
        snapshot: DomainSnapshot,
        index: ConflictIndex | None = None,
        *,
        time_window: TimeWindow | None = None,
    ) -> None:
        self.snapshot = snapshot
        self.time_window = time_window or snapshot.time_window
        self.grid = build_time_grid(self.time_window)
        self.index = index if index is not None else ConflictIndex.from_entries(snapshot.entries)

    def validate(self, candidate: ScheduleEntry) -> ScheduleEntry:
        payload = candidate.to_dict()

        self._check_references(candidate, payload)

        teacher = self.snapshot.teachers[candidate.teacher_id]
        if not teacher.is_qualified_for(candidate.subject_id):
            raise UnqualifiedTeacherError(candidate.teacher_id, candidate.subject_id, entry=payload)

        start, end, slot = self._check_window(candidate, payload)

        blocker = self.index.teacher_blocker(candidate.teacher_id, candidate.day, start, end)
        if blocker is not None:
            raise TeacherConflictError(
                f"Teacher {candidate.teacher_id} already has entry {blocker} on "
                f"{candidate.day} overlapping {candidate.start_time}-{candidate.end_time}",
                blocking_entry_id=blocker,
                entry=payload,
            )
        blocker = self.index.class_group_blocker(candidate.class_group_id, candidate.day, start, end)
        if blocker is not None:
            raise ClassGroupConflictError(
                f"Class group {candidate.class_group_id} already has entry {blocker} on "
                f"{candidate.day} overlapping {candidate.start_time}-{candidate.end_time}",
                blocking_entry_id=blocker,
                entry=payload,
            )

        lesson_number = slot.lesson_number
        if candidate.lesson_number is not None and candidate.lesson_number != lesson_number:
            logger.debug(
                "Lesson number %s for entry %s replaced by grid position %s",
                candidate.lesson_number,
                candidate.id,
                lesson_number,
            )
        accepted = replace(candidate, lesson_number=lesson_number)
        self.index.reserve(accepted)
        return accepted

    def _check_references(self, candidate: ScheduleEntry, payload: dict) -> None:
        if candidate.class_group_id not in self.snapshot.class_groups:
            raise UnknownReferenceError("ClassGroup", candidate.class_group_id, entry=payload)
        if candidate.teacher_id not in self.snapshot.teachers:
            raise UnknownReferenceError("Teacher", candidate.teacher_id, entry=payload)
        if candidate.subject_id not in self.snapshot.subjects:
            raise UnknownReferenceError("Subject", candidate.subject_id, entry=payload)

    def _check_window(self, candidate: ScheduleEntry, payload: dict) -> tuple[int, int, Slot]:
        if candidate.day not in WEEKDAYS:
            raise OutOfWindowError(f"{candidate.day} is not a school day", entry=payload)
        try:
            start = candidate.start_minutes
            end = candidate.end_minutes
        except ValueError as exc:
            raise ValidationError(str(exc), entry=payload) from exc
        if end <= start:
            raise OutOfWindowError("End time must be after start time", entry=payload)
        if not self.time_window.contains(start, end):
            raise OutOfWindowError(
                f"{candidate.start_time}-{candidate.end_time} lies outside the school day "
                f"{self.time_window.day_start}-{self.time_window.day_end}",
                entry=payload,
            )
        slot = slot_starting_at(self.grid, start)
        if slot is None:
            raise OutOfWindowError(
                f"{candidate.start_time} is not the start of a lesson slot",
                entry=payload,
            )
        return start, end, slot


def validate_and_prepare(
    candidate: ScheduleEntry,
    snapshot: DomainSnapshot,
    index: ConflictIndex | None = None,
) -> ScheduleEntry:
    """Validate one manually created entry against ``snapshot``."""
    return EntryValidator(snapshot, index).validate(candidate)
