"""Activity catalogue."""
from fastapi import APIRouter, Query, status

from schooladmin.api.deps import Actor, Services
from schooladmin.models import ActivityCreate, ActivityOut, ActivityUpdate, Page

router = APIRouter()


@router.get("/", response_model=Page[ActivityOut])
async def list_activities(
    services: Services,
    q: str | None = Query(None, description="Search by code, name or description"),
    page: int = Query(1, ge=1),
    page_size: int | None = Query(None, ge=1),
):
    return await services.activities.list(search=q, page=page, page_size=page_size)


@router.post("/", response_model=ActivityOut, status_code=status.HTTP_201_CREATED)
async def create_activity(data: ActivityCreate, services: Services):
    return await services.activities.create(data)


@router.get("/{activity_id}", response_model=ActivityOut)
async def get_activity(activity_id: int, services: Services):
    return await services.activities.get(activity_id)


@router.patch("/{activity_id}", response_model=ActivityOut)
async def update_activity(activity_id: int, data: ActivityUpdate, services: Services, actor: Actor):
    return await services.activities.update(activity_id, data, actor)


@router.delete("/{activity_id}", status_code=status.HTTP_204_NO_CONTENT)
async def archive_activity(activity_id: int, services: Services, actor: Actor):
    await services.activities.archive(activity_id, actor)
