from timetable.models.class_group import ClassGroup  # noqa: F401
from timetable.models.schedule_entry import ScheduleEntry  # noqa: F401
from timetable.models.schedule_settings import ScheduleSettings  # noqa: F401
from timetable.models.subject import Subject  # noqa: F401
from timetable.models.teacher import Teacher, teacher_subjects  # noqa: F401
