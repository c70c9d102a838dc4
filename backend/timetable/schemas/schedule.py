from __future__ import annotations

from pydantic import BaseModel, Field, field_validator, model_validator

from timetable.scheduling.domain import TIME_PATTERN, WEEKDAYS, parse_time_to_minutes


def normalize_day(value: str) -> str:
    day = value.strip().capitalize()
    if day not in WEEKDAYS:
        raise ValueError(f"Day must be one of: {', '.join(WEEKDAYS)}")
    return day


def validate_time_value(value: str) -> str:
    if not TIME_PATTERN.match(value):
        raise ValueError("Time must be in HH:MM 24-hour format")
    return value


class ScheduleEntryCreate(BaseModel):
    classGroupId: str = Field(min_length=1, max_length=36)
    teacherId: str = Field(min_length=1, max_length=36)
    subjectId: str = Field(min_length=1, max_length=36)
    dayOfWeek: str
    startTime: str
    endTime: str
    room: str | None = Field(default=None, max_length=100)
    lessonNumber: int | None = Field(default=None, ge=1)

    @field_validator("dayOfWeek")
    @classmethod
    def validate_day(cls, value: str) -> str:
        return normalize_day(value)

    @field_validator("startTime", "endTime")
    @classmethod
    def validate_time(cls, value: str) -> str:
        return validate_time_value(value)

    @model_validator(mode="after")
    def validate_time_order(self) -> "ScheduleEntryCreate":
        if parse_time_to_minutes(self.endTime) <= parse_time_to_minutes(self.startTime):
            raise ValueError("End time must be after start time")
        return self


class ScheduleEntryOut(BaseModel):
    id: str
    classGroupId: str
    classGroupName: str | None = None
    teacherId: str
    teacherName: str | None = None
    subjectId: str
    subjectName: str | None = None
    dayOfWeek: str
    startTime: str
    endTime: str
    room: str | None = None
    lessonNumber: int


class TeacherSubjectMappingIn(BaseModel):
    teacherId: str = Field(min_length=1, max_length=36)
    subjectId: str = Field(min_length=1, max_length=36)
    classGroupIds: list[str] = Field(default_factory=list)


class GenerateScheduleRequest(BaseModel):
    classGroupIds: list[str]
    teacherSubjectMappings: list[TeacherSubjectMappingIn]
    dayStartTime: str | None = None
    dayEndTime: str | None = None
    lessonDurationMinutes: int | None = None
    breakDurationMinutes: int | None = None

    @field_validator("dayStartTime", "dayEndTime")
    @classmethod
    def validate_time(cls, value: str | None) -> str | None:
        if value is None:
            return value
        return validate_time_value(value)


class ShortfallOut(BaseModel):
    teacherId: str
    subjectId: str
    classGroupId: str
    achieved: int
    target: int


class GenerateScheduleResponse(BaseModel):
    placed: list[ScheduleEntryOut]
    shortfalls: list[ShortfallOut]


class SlotOut(BaseModel):
    lessonNumber: int
    startTime: str
    endTime: str
