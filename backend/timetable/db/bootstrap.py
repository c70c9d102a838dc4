from __future__ import annotations

import logging

from sqlalchemy import inspect

from timetable.db.base import Base
from timetable.db.session import engine
import timetable.models  # noqa: F401

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS: dict[str, set[str]] = {
    "class_groups": {"id", "name", "grade"},
    "teachers": {"id", "name"},
    "subjects": {"id", "name", "hours_per_week"},
    "teacher_subjects": {"teacher_id", "subject_id"},
    "schedule_entries": {
        "id",
        "class_group_id",
        "teacher_id",
        "subject_id",
        "day_of_week",
        "start_time",
        "end_time",
        "lesson_number",
    },
    "schedule_settings": {"id", "day_start", "day_end", "lesson_minutes", "break_minutes"},
}


def ensure_schema(create_missing: bool = True) -> dict[str, list[str]]:
    """Create missing tables and report columns absent from existing ones."""
    if create_missing:
        Base.metadata.create_all(bind=engine)

    missing: dict[str, list[str]] = {}
    with engine.connect() as connection:
        inspector = inspect(connection)
        table_names = set(inspector.get_table_names())
        for table_name, columns in REQUIRED_COLUMNS.items():
            if table_name not in table_names:
                missing[table_name] = sorted(columns)
                continue
            existing = {item["name"] for item in inspector.get_columns(table_name)}
            absent = sorted(columns - existing)
            if absent:
                missing[table_name] = absent

    for table_name, columns in missing.items():
        logger.warning("Table %s is missing columns: %s", table_name, ", ".join(columns))
    return missing
