from __future__ import annotations

import re
from dataclasses import asdict, dataclass, field
from types import MappingProxyType
from typing import Iterable, Mapping

WEEKDAYS: tuple[str, ...] = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday")
DAY_ORDER = {day: index for index, day in enumerate(WEEKDAYS)}

TIME_PATTERN = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")


def parse_time_to_minutes(value: str) -> int:
    if not isinstance(value, str) or not TIME_PATTERN.match(value):
        raise ValueError("Time must be in HH:MM 24-hour format")
    hours, minutes = value.split(":")
    return int(hours) * 60 + int(minutes)


def minutes_to_time(value: int) -> str:
    hours = value // 60
    minutes = value % 60
    return f"{hours:02d}:{minutes:02d}"


@dataclass(frozen=True)
class ClassGroup:
    id: str
    name: str
    grade: int | None = None


@dataclass(frozen=True)
class Teacher:
    id: str
    name: str
    subject_ids: frozenset[str] = frozenset()

    def is_qualified_for(self, subject_id: str) -> bool:
        return subject_id in self.subject_ids


@dataclass(frozen=True)
class Subject:
    id: str
    name: str
    weekly_hours: int
    description: str | None = None


@dataclass(frozen=True)
class ScheduleEntry:
    id: str
    class_group_id: str
    teacher_id: str
    subject_id: str
    day: str
    start_time: str
    end_time: str
    room: str | None = None
    lesson_number: int | None = None

    @property
    def start_minutes(self) -> int:
        return parse_time_to_minutes(self.start_time)

    @property
    def end_minutes(self) -> int:
        return parse_time_to_minutes(self.end_time)

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class TeacherSubjectMapping:
    teacher_id: str
    subject_id: str
    class_group_ids: tuple[str, ...] = ()


@dataclass(frozen=True)
class TimeWindow:
    day_start: str = "08:00"
    day_end: str = "15:00"
    lesson_minutes: int = 45
    break_minutes: int = 15

    @property
    def start_minutes(self) -> int:
        return parse_time_to_minutes(self.day_start)

    @property
    def end_minutes(self) -> int:
        return parse_time_to_minutes(self.day_end)

    def contains(self, start: int, end: int) -> bool:
        return self.start_minutes <= start < end <= self.end_minutes


@dataclass(frozen=True)
class Slot:
    lesson_number: int
    start: int
    end: int

    @property
    def start_time(self) -> str:
        return minutes_to_time(self.start)

    @property
    def end_time(self) -> str:
        return minutes_to_time(self.end)


@dataclass(frozen=True)
class DomainSnapshot:
    """Point-in-time, read-only view of the roster and the persisted schedule."""

    class_groups: Mapping[str, ClassGroup]
    teachers: Mapping[str, Teacher]
    subjects: Mapping[str, Subject]
    entries: tuple[ScheduleEntry, ...] = ()
    time_window: TimeWindow = field(default_factory=TimeWindow)

    @classmethod
    def build(
        cls,
        *,
        class_groups: Iterable[ClassGroup] = (),
        teachers: Iterable[Teacher] = (),
        subjects: Iterable[Subject] = (),
        entries: Iterable[ScheduleEntry] = (),
        time_window: TimeWindow | None = None,
    ) -> "DomainSnapshot":
        return cls(
            class_groups=MappingProxyType({item.id: item for item in class_groups}),
            teachers=MappingProxyType({item.id: item for item in teachers}),
            subjects=MappingProxyType({item.id: item for item in subjects}),
            entries=tuple(entries),
            time_window=time_window or TimeWindow(),
        )
