"""Seed a small demo roster for the timetable service.

Run:
  PYTHONPATH=backend python scripts/seed_demo_data.py
"""

from __future__ import annotations

import os

from sqlalchemy import delete, func, select
from sqlalchemy.orm import Session

from timetable.db.bootstrap import ensure_schema
from timetable.db.session import SessionLocal
from timetable.models.class_group import ClassGroup
from timetable.models.schedule_entry import ScheduleEntry
from timetable.models.subject import Subject
from timetable.models.teacher import Teacher

SUBJECTS = [
    ("Mathematics", "Maths", 4),
    ("Physics", "Physics", 3),
    ("Computer Science", "IT", 3),
]

CLASS_GROUPS = [
    ("10A", 10),
    ("10B", 10),
    ("11A", 11),
]

TEACHERS = [
    ("John Smith", "T001", ["Mathematics", "Physics"]),
    ("Maria Lopez", "T002", ["Computer Science"]),
]

RESET_ENTRIES = os.getenv("SEED_RESET_ENTRIES", "false").strip().lower() in {"1", "true", "yes", "on"}


def upsert_subjects(session: Session) -> dict[str, Subject]:
    by_name: dict[str, Subject] = {}
    for name, description, hours in SUBJECTS:
        subject = session.execute(select(Subject).where(Subject.name == name)).scalar_one_or_none()
        if subject is None:
            subject = Subject(name=name)
            session.add(subject)
        subject.description = description
        subject.hours_per_week = hours
        by_name[name] = subject
    session.flush()
    return by_name


def upsert_class_groups(session: Session) -> None:
    for name, grade in CLASS_GROUPS:
        group = session.execute(select(ClassGroup).where(ClassGroup.name == name)).scalar_one_or_none()
        if group is None:
            session.add(ClassGroup(name=name, grade=grade))
        else:
            group.grade = grade
    session.flush()


def upsert_teachers(session: Session, subjects: dict[str, Subject]) -> None:
    for name, employee_number, subject_names in TEACHERS:
        teacher = session.execute(
            select(Teacher).where(Teacher.employee_number == employee_number)
        ).scalar_one_or_none()
        if teacher is None:
            teacher = Teacher(name=name, employee_number=employee_number)
            session.add(teacher)
        teacher.name = name
        teacher.subjects = [subjects[item] for item in subject_names]
    session.flush()


def main() -> None:
    ensure_schema()
    with SessionLocal() as session:
        if RESET_ENTRIES:
            session.execute(delete(ScheduleEntry))
        subjects = upsert_subjects(session)
        upsert_class_groups(session)
        upsert_teachers(session, subjects)
        session.commit()

        subject_count = session.execute(select(func.count(Subject.id))).scalar_one()
        class_group_count = session.execute(select(func.count(ClassGroup.id))).scalar_one()
        teacher_count = session.execute(select(func.count(Teacher.id))).scalar_one()

    print("Demo roster seeded successfully.")
    print(f"Subjects: {subject_count}")
    print(f"Class groups: {class_group_count}")
    print(f"Teachers: {teacher_count}")


if __name__ == "__main__":
    main()
