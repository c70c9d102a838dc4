from __future__ import annotations

import logging
import uuid
from dataclasses import replace
from threading import Lock

from sqlalchemy.orm import Session

from timetable.models.schedule_entry import ScheduleEntry
from timetable.scheduling import (
    AssignmentEngine,
    GenerationResult,
    ScheduleEntry as CandidateEntry,
    TeacherSubjectMapping,
    TimeWindow,
    build_time_grid,
    validate_and_prepare,
)
from timetable.schemas.schedule import (
    GenerateScheduleRequest,
    GenerateScheduleResponse,
    ScheduleEntryCreate,
    ScheduleEntryOut,
    ShortfallOut,
    SlotOut,
)
from timetable.services.schedule_repository import EntryScope, ScheduleRepository

logger = logging.getLogger(__name__)

# Writes are checked against a snapshot captured inside this lock, so two
# writers never reserve against diverging conflict indexes.
_write_lock = Lock()


def to_entry_out(row: ScheduleEntry) -> ScheduleEntryOut:
    return ScheduleEntryOut(
        id=row.id,
        classGroupId=row.class_group_id,
        classGroupName=row.class_group.name if row.class_group else None,
        teacherId=row.teacher_id,
        teacherName=row.teacher.name if row.teacher else None,
        subjectId=row.subject_id,
        subjectName=row.subject.name if row.subject else None,
        dayOfWeek=row.day_of_week,
        startTime=row.start_time,
        endTime=row.end_time,
        room=row.room,
        lessonNumber=row.lesson_number,
    )


def resolve_time_window(base: TimeWindow, request: GenerateScheduleRequest) -> TimeWindow:
    return replace(
        base,
        day_start=request.dayStartTime or base.day_start,
        day_end=request.dayEndTime or base.day_end,
        lesson_minutes=base.lesson_minutes if request.lessonDurationMinutes is None else request.lessonDurationMinutes,
        break_minutes=base.break_minutes if request.breakDurationMinutes is None else request.breakDurationMinutes,
    )


class ScheduleService:
    def __init__(self, db: Session) -> None:
        self.db = db
        self.repository = ScheduleRepository(db)

    def list_week(self, class_group_id: str | None = None, teacher_id: str | None = None) -> list[ScheduleEntryOut]:
        scope = None
        if class_group_id is not None or teacher_id is not None:
            scope = EntryScope(
                class_group_ids=frozenset({class_group_id}) if class_group_id is not None else None,
                teacher_id=teacher_id,
            )
        return [to_entry_out(row) for row in self.repository.list_week(scope)]

    def list_for_class_group(self, class_group_id: str) -> list[ScheduleEntryOut]:
        return [to_entry_out(row) for row in self.repository.list_for_class_group(class_group_id)]

    def list_for_teacher(self, teacher_id: str) -> list[ScheduleEntryOut]:
        return [to_entry_out(row) for row in self.repository.list_for_teacher(teacher_id)]

    def time_grid(self) -> list[SlotOut]:
        grid = build_time_grid(self.repository.get_time_window())
        return [
            SlotOut(lessonNumber=slot.lesson_number, startTime=slot.start_time, endTime=slot.end_time)
            for slot in grid
        ]

    def create_entry(self, payload: ScheduleEntryCreate) -> ScheduleEntryOut:
        candidate = CandidateEntry(
            id=str(uuid.uuid4()),
            class_group_id=payload.classGroupId,
            teacher_id=payload.teacherId,
            subject_id=payload.subjectId,
            day=payload.dayOfWeek,
            start_time=payload.startTime,
            end_time=payload.endTime,
            room=payload.room,
            lesson_number=payload.lessonNumber,
        )
        with _write_lock:
            snapshot = self.repository.load_snapshot(scope=EntryScope(day=candidate.day))
            accepted = validate_and_prepare(candidate, snapshot)
            try:
                (row,) = self.repository.insert_entries([accepted])
                self.db.commit()
            except Exception:
                self.db.rollback()
                raise
        self.db.refresh(row)
        logger.info(
            "Created entry %s for class group %s with teacher %s on %s %s-%s",
            accepted.id,
            accepted.class_group_id,
            accepted.teacher_id,
            accepted.day,
            accepted.start_time,
            accepted.end_time,
        )
        return to_entry_out(row)

    def generate(self, request: GenerateScheduleRequest) -> GenerateScheduleResponse:
        mappings = [
            TeacherSubjectMapping(
                teacher_id=item.teacherId,
                subject_id=item.subjectId,
                class_group_ids=tuple(item.classGroupIds),
            )
            for item in request.teacherSubjectMappings
        ]
        with _write_lock:
            snapshot = self.repository.load_snapshot()
            window = resolve_time_window(snapshot.time_window, request)
            result: GenerationResult = AssignmentEngine(snapshot).generate(
                request.classGroupIds,
                mappings,
                time_window=window,
                existing_entries=snapshot.entries,
            )
            try:
                rows = self.repository.insert_entries(result.placed)
                self.db.commit()
            except Exception:
                self.db.rollback()
                raise
        for row in rows:
            self.db.refresh(row)
        logger.info(
            "Persisted %d generated entries for %d class groups",
            len(rows),
            len(set(request.classGroupIds)),
        )
        return GenerateScheduleResponse(
            placed=[to_entry_out(row) for row in rows],
            shortfalls=[
                ShortfallOut(
                    teacherId=item.teacher_id,
                    subjectId=item.subject_id,
                    classGroupId=item.class_group_id,
                    achieved=item.achieved,
                    target=item.target,
                )
                for item in result.shortfalls
            ],
        )

    def delete_entry(self, entry_id: str) -> None:
        with _write_lock:
            try:
                self.repository.delete_entry(entry_id)
                self.db.commit()
            except Exception:
                self.db.rollback()
                raise
        logger.info("Deleted entry %s", entry_id)

    def get_time_window(self) -> TimeWindow:
        return self.repository.get_time_window()

    def update_time_window(self, window: TimeWindow) -> TimeWindow:
        build_time_grid(window)
        with _write_lock:
            try:
                self.repository.save_time_window(window)
                self.db.commit()
            except Exception:
                self.db.rollback()
                raise
        logger.info(
            "Time window updated to %s-%s (%d min lessons, %d min breaks)",
            window.day_start,
            window.day_end,
            window.lesson_minutes,
            window.break_minutes,
        )
        return window
