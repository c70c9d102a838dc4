"""Scheduling core: time grid, conflict index, entry validation and generation.

Everything in this package works on plain value objects from
``timetable.scheduling.domain`` and never touches the database.
"""

from timetable.scheduling.conflict_index import ConflictIndex  # noqa: F401
from timetable.scheduling.domain import (  # noqa: F401
    WEEKDAYS,
    ClassGroup,
    DomainSnapshot,
    ScheduleEntry,
    Slot,
    Subject,
    Teacher,
    TeacherSubjectMapping,
    TimeWindow,
)
from timetable.scheduling.engine import (  # noqa: F401
    AssignmentEngine,
    GenerationResult,
    TripleOutcome,
    generate,
)
from timetable.scheduling.time_grid import build_time_grid  # noqa: F401
from timetable.scheduling.validator import EntryValidator, validate_and_prepare  # noqa: F401
