"""Class groups: a scheduled weekly session at a school."""
from datetime import datetime
from typing import Optional

from beanie import Document
from pydantic import BaseModel, Field
from pymongo import ASCENDING, IndexModel

TIME_PATTERN = r"^\d{2}:\d{2}$"


class ClassGroup(Document):
    """Class group (e.g. 'Gr1-Mon') held at one school on one weekday, optionally served by a truck."""

    id: Optional[int] = None
    name: str
    school_id: int
    truck_id: Optional[int] = None
    day_of_week: int = Field(ge=0, le=6)  # 0 = Monday
    start_time: str  # HH:MM
    end_time: str  # HH:MM
    sequence: int = 1
    notes: Optional[str] = None
    is_active: bool = True
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: Optional[datetime] = None

    class Settings:
        name = "class_groups"
        indexes = [
            IndexModel([("school_id", ASCENDING), ("day_of_week", ASCENDING), ("start_time", ASCENDING)]),
            IndexModel([("truck_id", ASCENDING), ("day_of_week", ASCENDING)]),
        ]


class ClassGroupOut(BaseModel):
    id: int
    name: str
    school_id: int
    truck_id: Optional[int] = None
    day_of_week: int
    start_time: str
    end_time: str
    sequence: int = 1
    notes: Optional[str] = None
    is_active: bool
    created_at: datetime
    updated_at: Optional[datetime] = None


class ClassGroupCreate(BaseModel):
    name: str = Field(min_length=1, max_length=10)
    school_id: int = Field(gt=0)
    truck_id: Optional[int] = Field(default=None, gt=0)
    day_of_week: int = Field(ge=0, le=6)
    start_time: str = Field(pattern=TIME_PATTERN)
    end_time: str = Field(pattern=TIME_PATTERN)
    sequence: int = 1
    notes: Optional[str] = None


class ClassGroupUpdate(BaseModel):
    """All fields optional for PATCH."""
    name: Optional[str] = Field(default=None, min_length=1, max_length=10)
    school_id: Optional[int] = Field(default=None, gt=0)
    truck_id: Optional[int] = Field(default=None, gt=0)
    day_of_week: Optional[int] = Field(default=None, ge=0, le=6)
    start_time: Optional[str] = Field(default=None, pattern=TIME_PATTERN)
    end_time: Optional[str] = Field(default=None, pattern=TIME_PATTERN)
    sequence: Optional[int] = None
    notes: Optional[str] = None


class ScheduleConflictRequest(BaseModel):
    truck_id: int = Field(gt=0)
    day_of_week: int = Field(ge=0, le=6)
    start_time: str = Field(pattern=TIME_PATTERN)
    end_time: str = Field(pattern=TIME_PATTERN)
    exclude_id: Optional[int] = None


class ScheduleConflict(BaseModel):
    id: int
    name: str
    school_name: str
    start_time: str
    end_time: str


class ScheduleConflictResponse(BaseModel):
    has_conflicts: bool = False
    conflicts: list[ScheduleConflict] = Field(default_factory=list)
