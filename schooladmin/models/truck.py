"""Mobile classroom trucks; registration number is unique among active trucks."""
from datetime import datetime
from typing import Optional

from beanie import Document
from pydantic import BaseModel, Field
from pymongo import ASCENDING, IndexModel


class Truck(Document):
    id: Optional[int] = None
    name: str
    registration_number: str
    status: str = "Active"
    notes: Optional[str] = None
    is_active: bool = True
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: Optional[datetime] = None

    class Settings:
        name = "trucks"
        indexes = [
            IndexModel(
                [("registration_number", ASCENDING)],
                name="uq_trucks_active_registration_number",
                unique=True,
                partialFilterExpression={"is_active": True},
            ),
        ]


class TruckOut(BaseModel):
    id: int
    name: str
    registration_number: str
    status: str
    notes: Optional[str] = None
    is_active: bool
    created_at: datetime
    updated_at: Optional[datetime] = None


class TruckCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    registration_number: str = Field(min_length=1, max_length=50)
    status: str = Field(default="Active", min_length=1, max_length=50)
    notes: Optional[str] = Field(default=None, max_length=1000)


class TruckUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    registration_number: Optional[str] = Field(default=None, min_length=1, max_length=50)
    status: Optional[str] = Field(default=None, min_length=1, max_length=50)
    notes: Optional[str] = Field(default=None, max_length=1000)
