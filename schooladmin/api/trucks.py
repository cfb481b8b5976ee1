"""Trucks that bring the classroom to the schools."""
from fastapi import APIRouter, Query, status

from schooladmin.api.deps import Actor, Services
from schooladmin.models import Page, TruckCreate, TruckOut, TruckUpdate

router = APIRouter()


@router.get("/", response_model=Page[TruckOut])
async def list_trucks(
    services: Services,
    q: str | None = Query(None, description="Search by name or registration number"),
    page: int = Query(1, ge=1),
    page_size: int | None = Query(None, ge=1),
):
    return await services.trucks.list(search=q, page=page, page_size=page_size)


@router.post("/", response_model=TruckOut, status_code=status.HTTP_201_CREATED)
async def create_truck(data: TruckCreate, services: Services):
    return await services.trucks.create(data)


@router.get("/{truck_id}", response_model=TruckOut)
async def get_truck(truck_id: int, services: Services):
    return await services.trucks.get(truck_id)


@router.patch("/{truck_id}", response_model=TruckOut)
async def update_truck(truck_id: int, data: TruckUpdate, services: Services, actor: Actor):
    return await services.trucks.update(truck_id, data, actor)


@router.delete("/{truck_id}", status_code=status.HTTP_204_NO_CONTENT)
async def archive_truck(truck_id: int, services: Services, actor: Actor):
    await services.trucks.archive(truck_id, actor)
