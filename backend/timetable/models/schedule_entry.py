import uuid
from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func

from timetable.db.base import Base
from timetable.models.class_group import ClassGroup
from timetable.models.subject import Subject
from timetable.models.teacher import Teacher


class ScheduleEntry(Base):
    __tablename__ = "schedule_entries"
    __table_args__ = (
        Index("ix_schedule_entries_teacher_day", "teacher_id", "day_of_week"),
        Index("ix_schedule_entries_class_group_day", "class_group_id", "day_of_week"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    class_group_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("class_groups.id", ondelete="CASCADE"), nullable=False
    )
    teacher_id: Mapped[str] = mapped_column(String(36), ForeignKey("teachers.id", ondelete="CASCADE"), nullable=False)
    subject_id: Mapped[str] = mapped_column(String(36), ForeignKey("subjects.id", ondelete="CASCADE"), nullable=False)
    day_of_week: Mapped[str] = mapped_column(String(10), nullable=False)
    start_time: Mapped[str] = mapped_column(String(5), nullable=False)
    end_time: Mapped[str] = mapped_column(String(5), nullable=False)
    room: Mapped[str | None] = mapped_column(String(100), nullable=True)
    lesson_number: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    class_group: Mapped[ClassGroup] = relationship(lazy="joined")
    teacher: Mapped[Teacher] = relationship(lazy="joined")
    subject: Mapped[Subject] = relationship(lazy="joined")
