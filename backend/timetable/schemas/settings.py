from __future__ import annotations

from pydantic import BaseModel, Field, field_validator, model_validator

from timetable.scheduling.domain import TIME_PATTERN, TimeWindow, parse_time_to_minutes


class TimeWindowSettings(BaseModel):
    day_start: str
    day_end: str
    lesson_minutes: int = Field(ge=1, le=240)
    break_minutes: int = Field(ge=0, le=120)

    @field_validator("day_start", "day_end")
    @classmethod
    def validate_time(cls, value: str) -> str:
        if not TIME_PATTERN.match(value):
            raise ValueError("Time must be in HH:MM 24-hour format")
        return value

    @model_validator(mode="after")
    def validate_time_order(self) -> "TimeWindowSettings":
        start = parse_time_to_minutes(self.day_start)
        end = parse_time_to_minutes(self.day_end)
        if end <= start:
            raise ValueError("End time must be after start time")
        if end - start < self.lesson_minutes:
            raise ValueError("School day is shorter than a single lesson")
        return self

    def to_window(self) -> TimeWindow:
        return TimeWindow(
            day_start=self.day_start,
            day_end=self.day_end,
            lesson_minutes=self.lesson_minutes,
            break_minutes=self.break_minutes,
        )

    @classmethod
    def from_window(cls, window: TimeWindow) -> "TimeWindowSettings":
        return cls(
            day_start=window.day_start,
            day_end=window.day_end,
            lesson_minutes=window.lesson_minutes,
            break_minutes=window.break_minutes,
        )
