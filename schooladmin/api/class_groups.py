"""Class groups and the attendance sheet of one session."""
from fastapi import APIRouter, Query, status

from schooladmin.api.deps import Actor, Services
from schooladmin.models import (
    BatchAttendanceRequest,
    BatchAttendanceResponse,
    ClassGroupCreate,
    ClassGroupOut,
    ClassGroupUpdate,
    Page,
    ScheduleConflictRequest,
    ScheduleConflictResponse,
)

router = APIRouter()


@router.get("/", response_model=Page[ClassGroupOut])
async def list_class_groups(
    services: Services,
    school_id: int | None = None,
    q: str | None = Query(None, description="Search by name"),
    page: int = Query(1, ge=1),
    page_size: int | None = Query(None, ge=1),
):
    return await services.class_groups.list(
        search=q, filters={"school_id": school_id}, page=page, page_size=page_size
    )


@router.post("/", response_model=ClassGroupOut, status_code=status.HTTP_201_CREATED)
async def create_class_group(data: ClassGroupCreate, services: Services):
    return await services.class_groups.create(data)


@router.post("/check-conflicts", response_model=ScheduleConflictResponse)
async def check_schedule_conflicts(data: ScheduleConflictRequest, services: Services):
    """Class groups served by the same truck on the same day whose times overlap the given slot."""
    return await services.class_groups.check_conflicts(data)


@router.get("/{class_group_id}", response_model=ClassGroupOut)
async def get_class_group(class_group_id: int, services: Services):
    return await services.class_groups.get(class_group_id)


@router.patch("/{class_group_id}", response_model=ClassGroupOut)
async def update_class_group(class_group_id: int, data: ClassGroupUpdate, services: Services, actor: Actor):
    return await services.class_groups.update(class_group_id, data, actor)


@router.delete("/{class_group_id}", status_code=status.HTTP_204_NO_CONTENT)
async def archive_class_group(class_group_id: int, services: Services, actor: Actor):
    await services.class_groups.archive(class_group_id, actor)


@router.post("/{class_group_id}/attendance/batch", response_model=BatchAttendanceResponse)
async def save_attendance_batch(
    class_group_id: int, data: BatchAttendanceRequest, services: Services, actor: Actor
):
    """Create or update the attendance of every listed student for one session date."""
    return await services.attendance.batch_save(class_group_id, data, actor)
