from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable

from sqlalchemy import case, select
from sqlalchemy.orm import Session

from timetable.core.config import get_settings
from timetable.core.exceptions import ResourceNotFoundError
from timetable.models.class_group import ClassGroup
from timetable.models.schedule_entry import ScheduleEntry
from timetable.models.schedule_settings import ScheduleSettings
from timetable.models.subject import Subject
from timetable.models.teacher import Teacher
from timetable.scheduling import domain

logger = logging.getLogger(__name__)

DAY_SORT = case(domain.DAY_ORDER, value=ScheduleEntry.day_of_week, else_=len(domain.WEEKDAYS))


@dataclass(frozen=True)
class EntryScope:
    class_group_ids: frozenset[str] | None = None
    teacher_id: str | None = None
    day: str | None = None


def default_time_window() -> domain.TimeWindow:
    settings = get_settings()
    return domain.TimeWindow(
        day_start=settings.default_day_start,
        day_end=settings.default_day_end,
        lesson_minutes=settings.default_lesson_minutes,
        break_minutes=settings.default_break_minutes,
    )


def to_domain_entry(row: ScheduleEntry) -> domain.ScheduleEntry:
    return domain.ScheduleEntry(
        id=row.id,
        class_group_id=row.class_group_id,
        teacher_id=row.teacher_id,
        subject_id=row.subject_id,
        day=row.day_of_week,
        start_time=row.start_time,
        end_time=row.end_time,
        room=row.room,
        lesson_number=row.lesson_number,
    )


class ScheduleRepository:
    """SQLAlchemy persistence for the roster snapshot and schedule entries.

    The repository never commits; the caller owns the transaction.
    """

    def __init__(self, db: Session) -> None:
        self.db = db

    def list_class_groups(self) -> list[domain.ClassGroup]:
        rows = self.db.execute(select(ClassGroup).order_by(ClassGroup.name)).scalars().all()
        return [domain.ClassGroup(id=row.id, name=row.name, grade=row.grade) for row in rows]

    def list_teachers_with_qualifications(self) -> list[domain.Teacher]:
        rows = self.db.execute(select(Teacher).order_by(Teacher.name)).scalars().all()
        return [
            domain.Teacher(
                id=row.id,
                name=row.name,
                subject_ids=frozenset(subject.id for subject in row.subjects),
            )
            for row in rows
        ]

    def list_subjects(self) -> list[domain.Subject]:
        rows = self.db.execute(select(Subject).order_by(Subject.name)).scalars().all()
        return [
            domain.Subject(
                id=row.id,
                name=row.name,
                weekly_hours=row.hours_per_week,
                description=row.description,
            )
            for row in rows
        ]

    def _entry_query(self, scope: EntryScope | None = None):
        query = select(ScheduleEntry)
        if scope is not None:
            if scope.class_group_ids is not None:
                query = query.where(ScheduleEntry.class_group_id.in_(scope.class_group_ids))
            if scope.teacher_id is not None:
                query = query.where(ScheduleEntry.teacher_id == scope.teacher_id)
            if scope.day is not None:
                query = query.where(ScheduleEntry.day_of_week == scope.day)
        return query.order_by(DAY_SORT, ScheduleEntry.start_time, ScheduleEntry.id)

    def list_existing_entries(self, scope: EntryScope | None = None) -> list[domain.ScheduleEntry]:
        rows = self.db.execute(self._entry_query(scope)).unique().scalars().all()
        return [to_domain_entry(row) for row in rows]

    def list_week(self, scope: EntryScope | None = None) -> list[ScheduleEntry]:
        return list(self.db.execute(self._entry_query(scope)).unique().scalars().all())

    def list_for_class_group(self, class_group_id: str) -> list[ScheduleEntry]:
        if self.db.get(ClassGroup, class_group_id) is None:
            raise ResourceNotFoundError("ClassGroup", class_group_id)
        return self.list_week(EntryScope(class_group_ids=frozenset({class_group_id})))

    def list_for_teacher(self, teacher_id: str) -> list[ScheduleEntry]:
        if self.db.get(Teacher, teacher_id) is None:
            raise ResourceNotFoundError("Teacher", teacher_id)
        return self.list_week(EntryScope(teacher_id=teacher_id))

    def insert_entries(self, entries: Iterable[domain.ScheduleEntry]) -> list[ScheduleEntry]:
        rows = [
            ScheduleEntry(
                id=entry.id,
                class_group_id=entry.class_group_id,
                teacher_id=entry.teacher_id,
                subject_id=entry.subject_id,
                day_of_week=entry.day,
                start_time=entry.start_time,
                end_time=entry.end_time,
                room=entry.room,
                lesson_number=entry.lesson_number,
            )
            for entry in entries
        ]
        self.db.add_all(rows)
        self.db.flush()
        return rows

    def delete_entry(self, entry_id: str) -> None:
        row = self.db.get(ScheduleEntry, entry_id)
        if row is None:
            raise ResourceNotFoundError("ScheduleEntry", entry_id)
        self.db.delete(row)
        self.db.flush()

    def get_time_window(self) -> domain.TimeWindow:
        record = self.db.get(ScheduleSettings, 1)
        if record is None:
            return default_time_window()
        return domain.TimeWindow(
            day_start=record.day_start,
            day_end=record.day_end,
            lesson_minutes=record.lesson_minutes,
            break_minutes=record.break_minutes,
        )

    def save_time_window(self, window: domain.TimeWindow) -> domain.TimeWindow:
        record = self.db.get(ScheduleSettings, 1)
        if record is None:
            record = ScheduleSettings(id=1, day_start=window.day_start, day_end=window.day_end)
            self.db.add(record)
        record.day_start = window.day_start
        record.day_end = window.day_end
        record.lesson_minutes = window.lesson_minutes
        record.break_minutes = window.break_minutes
        self.db.flush()
        return window

    def load_snapshot(
        self,
        time_window: domain.TimeWindow | None = None,
        scope: EntryScope | None = None,
    ) -> domain.DomainSnapshot:
        return domain.DomainSnapshot.build(
            class_groups=self.list_class_groups(),
            teachers=self.list_teachers_with_qualifications(),
            subjects=self.list_subjects(),
            entries=self.list_existing_entries(scope),
            time_window=time_window or self.get_time_window(),
        )
