from fastapi import APIRouter, Depends, Query, Response, status

from timetable.api.deps import get_schedule_service
from timetable.schemas.schedule import (
    GenerateScheduleRequest,
    GenerateScheduleResponse,
    ScheduleEntryCreate,
    ScheduleEntryOut,
    SlotOut,
)
from timetable.services.schedule_service import ScheduleService

router = APIRouter()


@router.get("/week", response_model=list[ScheduleEntryOut])
def get_weekly_schedule(
    class_group_id: str | None = Query(default=None, alias="classGroupId"),
    teacher_id: str | None = Query(default=None, alias="teacherId"),
    service: ScheduleService = Depends(get_schedule_service),
) -> list[ScheduleEntryOut]:
    return service.list_week(class_group_id=class_group_id, teacher_id=teacher_id)


@router.get("/class/{class_group_id}", response_model=list[ScheduleEntryOut])
def get_class_schedule(
    class_group_id: str,
    service: ScheduleService = Depends(get_schedule_service),
) -> list[ScheduleEntryOut]:
    return service.list_for_class_group(class_group_id)


@router.get("/teacher/{teacher_id}", response_model=list[ScheduleEntryOut])
def get_teacher_schedule(
    teacher_id: str,
    service: ScheduleService = Depends(get_schedule_service),
) -> list[ScheduleEntryOut]:
    return service.list_for_teacher(teacher_id)


@router.get("/grid", response_model=list[SlotOut])
def get_time_grid(service: ScheduleService = Depends(get_schedule_service)) -> list[SlotOut]:
    return service.time_grid()


@router.post("", response_model=ScheduleEntryOut, status_code=status.HTTP_201_CREATED)
def create_schedule_entry(
    payload: ScheduleEntryCreate,
    service: ScheduleService = Depends(get_schedule_service),
) -> ScheduleEntryOut:
    return service.create_entry(payload)


@router.post("/generate", response_model=GenerateScheduleResponse)
def generate_schedule(
    payload: GenerateScheduleRequest,
    service: ScheduleService = Depends(get_schedule_service),
) -> GenerateScheduleResponse:
    return service.generate(payload)


@router.delete("/{entry_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_schedule_entry(
    entry_id: str,
    service: ScheduleService = Depends(get_schedule_service),
) -> Response:
    service.delete_entry(entry_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
