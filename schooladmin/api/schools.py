"""Schools where class groups are held."""
from fastapi import APIRouter, Query, status

from schooladmin.api.deps import Actor, Services
from schooladmin.models import Page, SchoolCreate, SchoolOut, SchoolUpdate

router = APIRouter()


@router.get("/", response_model=Page[SchoolOut])
async def list_schools(
    services: Services,
    q: str | None = Query(None, description="Search by name or contact person"),
    page: int = Query(1, ge=1),
    page_size: int | None = Query(None, ge=1),
):
    return await services.schools.list(search=q, page=page, page_size=page_size)


@router.post("/", response_model=SchoolOut, status_code=status.HTTP_201_CREATED)
async def create_school(data: SchoolCreate, services: Services):
    return await services.schools.create(data)


@router.get("/{school_id}", response_model=SchoolOut)
async def get_school(school_id: int, services: Services):
    return await services.schools.get(school_id)


@router.patch("/{school_id}", response_model=SchoolOut)
async def update_school(school_id: int, data: SchoolUpdate, services: Services, actor: Actor):
    return await services.schools.update(school_id, data, actor)


@router.delete("/{school_id}", status_code=status.HTTP_204_NO_CONTENT)
async def archive_school(school_id: int, services: Services, actor: Actor):
    await services.schools.archive(school_id, actor)
