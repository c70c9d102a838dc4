from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from time import perf_counter
from typing import Iterable, Sequence

from timetable.core.exceptions import UnknownReferenceError
from timetable.scheduling.conflict_index import ConflictIndex
from timetable.scheduling.domain import (
    WEEKDAYS,
    DomainSnapshot,
    ScheduleEntry,
    Slot,
    TeacherSubjectMapping,
    TimeWindow,
)
from timetable.scheduling.validator import EntryValidator

logger = logging.getLogger(__name__)

ENTRY_NAMESPACE = uuid.UUID("5f7c2d1e-8a43-4b6e-9d0f-2c1b7a9e4f60")


@dataclass(frozen=True)
class Assignment:
    teacher_id: str
    subject_id: str
    class_group_id: str
    target: int


@dataclass(frozen=True)
class TripleOutcome:
    teacher_id: str
    subject_id: str
    class_group_id: str
    achieved: int
    target: int

    @property
    def satisfied(self) -> bool:
        return self.achieved >= self.target


@dataclass(frozen=True)
class GenerationResult:
    placed: tuple[ScheduleEntry, ...]
    outcomes: tuple[TripleOutcome, ...]

    @property
    def shortfalls(self) -> tuple[TripleOutcome, ...]:
        return tuple(outcome for outcome in self.outcomes if not outcome.satisfied)


def generated_entry_id(class_group_id: str, teacher_id: str, subject_id: str, day: str, slot: Slot) -> str:
    key = f"{class_group_id}|{teacher_id}|{subject_id}|{day}|{slot.start_time}-{slot.end_time}"
    return str(uuid.uuid5(ENTRY_NAMESPACE, key))


class AssignmentEngine:
    """Deterministic greedy weekly timetable builder.

    Work is expanded to (teacher, subject, class group) assignments, ordered
    by descending weekly-hour target, then teacher id, then class-group id,
    and each assignment takes the earliest free slots of the week. Nothing is
    backtracked; assignments that do not fit are reported as shortfalls.
    """

    def __init__(self, snapshot: DomainSnapshot) -> None:
        self.snapshot = snapshot

    def generate(
        self,
        class_group_ids: Iterable[str],
        mappings: Sequence[TeacherSubjectMapping],
        time_window: TimeWindow | None = None,
        existing_entries: Iterable[ScheduleEntry] | None = None,
    ) -> GenerationResult:
        started_at = perf_counter()
        window = time_window or self.snapshot.time_window
        seeded = tuple(self.snapshot.entries if existing_entries is None else existing_entries)

        index = ConflictIndex.from_entries(seeded)
        validator = EntryValidator(self.snapshot, index, time_window=window)
        grid = validator.grid

        assignments = self._build_work_list(set(class_group_ids), mappings)

        placed: list[ScheduleEntry] = []
        outcomes: list[TripleOutcome] = []
        for assignment in assignments:
            entries = self._place(assignment, grid, validator)
            placed.extend(entries)
            outcome = TripleOutcome(
                teacher_id=assignment.teacher_id,
                subject_id=assignment.subject_id,
                class_group_id=assignment.class_group_id,
                achieved=len(entries),
                target=assignment.target,
            )
            outcomes.append(outcome)
            if not outcome.satisfied:
                logger.warning(
                    "Shortfall for teacher=%s subject=%s class_group=%s: placed %d of %d",
                    outcome.teacher_id,
                    outcome.subject_id,
                    outcome.class_group_id,
                    outcome.achieved,
                    outcome.target,
                )

        result = GenerationResult(placed=tuple(placed), outcomes=tuple(outcomes))
        logger.info(
            "Generated %d entries for %d assignments (%d shortfalls, %d slots/day) in %.1f ms",
            len(result.placed),
            len(result.outcomes),
            len(result.shortfalls),
            len(grid),
            (perf_counter() - started_at) * 1000,
        )
        return result

    def _build_work_list(
        self,
        class_group_ids: set[str],
        mappings: Sequence[TeacherSubjectMapping],
    ) -> list[Assignment]:
        snapshot = self.snapshot
        seen: set[tuple[str, str, str]] = set()
        work: list[Assignment] = []
        for mapping in mappings:
            if mapping.teacher_id not in snapshot.teachers:
                raise UnknownReferenceError("Teacher", mapping.teacher_id)
            subject = snapshot.subjects.get(mapping.subject_id)
            if subject is None:
                raise UnknownReferenceError("Subject", mapping.subject_id)
            for class_group_id in mapping.class_group_ids:
                if class_group_id not in snapshot.class_groups:
                    raise UnknownReferenceError("ClassGroup", class_group_id)
                if class_group_id not in class_group_ids:
                    logger.info(
                        "Skipping class group %s for teacher %s: not requested for generation",
                        class_group_id,
                        mapping.teacher_id,
                    )
                    continue
                key = (mapping.teacher_id, mapping.subject_id, class_group_id)
                if key in seen:
                    continue
                seen.add(key)
                work.append(
                    Assignment(
                        teacher_id=mapping.teacher_id,
                        subject_id=mapping.subject_id,
                        class_group_id=class_group_id,
                        target=subject.weekly_hours,
                    )
                )

        work.sort(key=lambda item: (-item.target, item.teacher_id, item.class_group_id))
        return work

    def _place(
        self,
        assignment: Assignment,
        grid: Sequence[Slot],
        validator: EntryValidator,
    ) -> list[ScheduleEntry]:
        if assignment.target <= 0:
            return []
        teacher = self.snapshot.teachers[assignment.teacher_id]
        if not teacher.is_qualified_for(assignment.subject_id):
            logger.info(
                "Teacher %s is not qualified for subject %s; nothing placed for class group %s",
                assignment.teacher_id,
                assignment.subject_id,
                assignment.class_group_id,
            )
            return []

        index = validator.index
        placed: list[ScheduleEntry] = []
        for day in WEEKDAYS:
            for slot in grid:
                if not index.is_teacher_free(assignment.teacher_id, day, slot):
                    continue
                if not index.is_class_group_free(assignment.class_group_id, day, slot):
                    continue
                candidate = ScheduleEntry(
                    id=generated_entry_id(
                        assignment.class_group_id, assignment.teacher_id, assignment.subject_id, day, slot
                    ),
                    class_group_id=assignment.class_group_id,
                    teacher_id=assignment.teacher_id,
                    subject_id=assignment.subject_id,
                    day=day,
                    start_time=slot.start_time,
                    end_time=slot.end_time,
                    lesson_number=slot.lesson_number,
                )
                placed.append(validator.validate(candidate))
                if len(placed) >= assignment.target:
                    return placed
        return placed


def generate(
    snapshot: DomainSnapshot,
    class_group_ids: Iterable[str],
    mappings: Sequence[TeacherSubjectMapping],
    time_window: TimeWindow | None = None,
    existing_entries: Iterable[ScheduleEntry] | None = None,
) -> GenerationResult:
    return AssignmentEngine(snapshot).generate(class_group_ids, mappings, time_window, existing_entries)
