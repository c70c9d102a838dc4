from fastapi import APIRouter, Depends

from timetable.api.deps import get_schedule_service
from timetable.schemas.settings import TimeWindowSettings
from timetable.services.schedule_service import ScheduleService

router = APIRouter()


@router.get("/settings/time-window", response_model=TimeWindowSettings)
def get_time_window(service: ScheduleService = Depends(get_schedule_service)) -> TimeWindowSettings:
    return TimeWindowSettings.from_window(service.get_time_window())


@router.put("/settings/time-window", response_model=TimeWindowSettings)
def update_time_window(
    payload: TimeWindowSettings,
    service: ScheduleService = Depends(get_schedule_service),
) -> TimeWindowSettings:
    window = service.update_time_window(payload.to_window())
    return TimeWindowSettings.from_window(window)
