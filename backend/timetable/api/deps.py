from collections.abc import Generator

from fastapi import Depends
from sqlalchemy.orm import Session

from timetable.db.session import SessionLocal
from timetable.services.schedule_service import ScheduleService


def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_schedule_service(db: Session = Depends(get_db)) -> ScheduleService:
    return ScheduleService(db)
