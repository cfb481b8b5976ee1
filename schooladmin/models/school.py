"""Schools served by the programme."""
from datetime import datetime
from typing import Optional

from beanie import Document
from pydantic import BaseModel, Field
from pymongo import ASCENDING, IndexModel


class School(Document):
    """School document; name is unique among active schools."""

    id: Optional[int] = None
    name: str
    short_name: Optional[str] = None
    address: Optional[str] = None
    contact_person: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    is_active: bool = True
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: Optional[datetime] = None

    class Settings:
        name = "schools"
        indexes = [
            IndexModel(
                [("name", ASCENDING)],
                name="uq_schools_active_name",
                unique=True,
                partialFilterExpression={"is_active": True},
            ),
        ]


class SchoolOut(BaseModel):
    id: int
    name: str
    short_name: Optional[str] = None
    address: Optional[str] = None
    contact_person: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    is_active: bool
    created_at: datetime
    updated_at: Optional[datetime] = None


class SchoolCreate(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    short_name: Optional[str] = None
    address: Optional[str] = None
    contact_person: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None


class SchoolUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    short_name: Optional[str] = None
    address: Optional[str] = None
    contact_person: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
