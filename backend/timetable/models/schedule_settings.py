from datetime import datetime

from sqlalchemy import DateTime, Integer, String
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from timetable.db.base import Base


class ScheduleSettings(Base):
    __tablename__ = "schedule_settings"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, default=1)
    day_start: Mapped[str] = mapped_column(String(5), nullable=False)
    day_end: Mapped[str] = mapped_column(String(5), nullable=False)
    lesson_minutes: Mapped[int] = mapped_column(Integer, nullable=False, default=45)
    break_minutes: Mapped[int] = mapped_column(Integer, nullable=False, default=15)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
