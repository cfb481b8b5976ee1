"""Activities / programmes; code is optional but unique among active activities."""
from datetime import datetime
from typing import Optional

from beanie import Document
from pydantic import BaseModel, Field
from pymongo import ASCENDING, IndexModel


class Activity(Document):
    """Activity document."""

    id: Optional[int] = None
    code: Optional[str] = None
    name: str
    description: Optional[str] = None
    folder: Optional[str] = None
    grade_level: Optional[str] = None
    is_active: bool = True
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: Optional[datetime] = None

    class Settings:
        name = "activities"
        indexes = [
            IndexModel(
                [("code", ASCENDING)],
                name="uq_activities_active_code",
                unique=True,
                partialFilterExpression={"is_active": True, "code": {"$type": "string"}},
            ),
        ]


class ActivityOut(BaseModel):
    id: int
    code: Optional[str] = None
    name: str
    description: Optional[str] = None
    folder: Optional[str] = None
    grade_level: Optional[str] = None
    is_active: bool
    created_at: datetime
    updated_at: Optional[datetime] = None


class ActivityCreate(BaseModel):
    code: Optional[str] = Field(default=None, max_length=255)
    name: str = Field(min_length=1, max_length=255)
    description: Optional[str] = None
    folder: Optional[str] = None
    grade_level: Optional[str] = None


class ActivityUpdate(BaseModel):
    code: Optional[str] = Field(default=None, max_length=255)
    name: Optional[str] = None
    description: Optional[str] = None
    folder: Optional[str] = None
    grade_level: Optional[str] = None
