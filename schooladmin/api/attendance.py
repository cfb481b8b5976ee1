"""Single attendance records: create, correct, look up."""
from fastapi import APIRouter, Query, status

from schooladmin.api.deps import Actor, Services
from schooladmin.models import AttendanceCreate, AttendanceOut, AttendanceUpdate

router = APIRouter()


@router.get("/", response_model=list[AttendanceOut])
async def list_attendance(
    services: Services,
    student_id: int | None = None,
    class_group_id: int | None = None,
    from_date: str | None = Query(None, description="Inclusive, YYYY-MM-DD"),
    to_date: str | None = Query(None, description="Inclusive, YYYY-MM-DD"),
):
    return await services.attendance.list(
        student_id=student_id, class_group_id=class_group_id, from_date=from_date, to_date=to_date
    )


@router.post("/", response_model=AttendanceOut, status_code=status.HTTP_201_CREATED)
async def create_attendance(data: AttendanceCreate, services: Services, actor: Actor):
    return await services.attendance.create(data, actor)


@router.get("/{attendance_id}", response_model=AttendanceOut)
async def get_attendance(attendance_id: int, services: Services):
    return await services.attendance.get(attendance_id)


@router.put("/{attendance_id}", response_model=AttendanceOut)
async def update_attendance(attendance_id: int, data: AttendanceUpdate, services: Services, actor: Actor):
    return await services.attendance.update(attendance_id, data, actor)
