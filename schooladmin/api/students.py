"""Student CRUD and attendance history."""
from fastapi import APIRouter, Query, status

from schooladmin.api.deps import Actor, Services
from schooladmin.models import AttendanceOut, Page, StudentCreate, StudentOut, StudentUpdate

router = APIRouter()


@router.get("/", response_model=Page[StudentOut])
async def list_students(
    services: Services,
    school_id: int | None = None,
    class_group_id: int | None = None,
    q: str | None = Query(None, description="Search by reference or name"),
    page: int = Query(1, ge=1),
    page_size: int | None = Query(None, ge=1),
):
    return await services.students.list(
        search=q,
        filters={"school_id": school_id, "class_group_id": class_group_id},
        page=page,
        page_size=page_size,
    )


@router.post("/", response_model=StudentOut, status_code=status.HTTP_201_CREATED)
async def create_student(data: StudentCreate, services: Services):
    return await services.students.create(data)


@router.get("/{student_id}", response_model=StudentOut)
async def get_student(student_id: int, services: Services):
    return await services.students.get(student_id)


@router.patch("/{student_id}", response_model=StudentOut)
async def update_student(student_id: int, data: StudentUpdate, services: Services, actor: Actor):
    return await services.students.update(student_id, data, actor)


@router.delete("/{student_id}", status_code=status.HTTP_204_NO_CONTENT)
async def archive_student(student_id: int, services: Services, actor: Actor):
    """Soft delete: the student disappears from listings and releases its reference."""
    await services.students.archive(student_id, actor)


@router.get("/{student_id}/attendance", response_model=list[AttendanceOut])
async def student_attendance(student_id: int, services: Services):
    return await services.attendance.list_for_student(student_id)
