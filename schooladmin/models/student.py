"""Student records keyed by a human-assigned reference."""
from datetime import date, datetime
from typing import Optional

from beanie import Document
from pydantic import BaseModel, Field
from pymongo import ASCENDING, IndexModel


class Student(Document):
    """Student document; reference is unique among active students."""

    id: Optional[int] = None
    reference: str
    first_name: str
    last_name: str
    date_of_birth: Optional[date] = None
    gender: Optional[str] = None
    language: Optional[str] = None
    grade: Optional[str] = None
    school_id: Optional[int] = None
    class_group_id: Optional[int] = None
    notes: Optional[str] = None

    is_active: bool = True
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: Optional[datetime] = None

    class Settings:
        name = "students"
        bson_encoders = {date: lambda d: d.isoformat()}
        indexes = [
            IndexModel(
                [("reference", ASCENDING)],
                name="uq_students_active_reference",
                unique=True,
                partialFilterExpression={"is_active": True},
            ),
            IndexModel([("last_name", ASCENDING), ("first_name", ASCENDING)]),
        ]


class StudentOut(BaseModel):
    id: int
    reference: str
    first_name: str
    last_name: str
    full_name: str = ""
    date_of_birth: Optional[date] = None
    gender: Optional[str] = None
    language: Optional[str] = None
    grade: Optional[str] = None
    school_id: Optional[int] = None
    class_group_id: Optional[int] = None
    notes: Optional[str] = None
    is_active: bool
    created_at: datetime
    updated_at: Optional[datetime] = None


class StudentCreate(BaseModel):
    reference: str = Field(min_length=1, max_length=10)
    first_name: str = Field(min_length=1, max_length=50)
    last_name: str = Field(min_length=1, max_length=50)
    date_of_birth: Optional[date] = None
    gender: Optional[str] = None
    language: Optional[str] = None
    grade: Optional[str] = None
    school_id: Optional[int] = None
    class_group_id: Optional[int] = None
    notes: Optional[str] = None


class StudentUpdate(BaseModel):
    """All fields optional for PATCH."""
    reference: Optional[str] = Field(default=None, min_length=1, max_length=10)
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    date_of_birth: Optional[date] = None
    gender: Optional[str] = None
    language: Optional[str] = None
    grade: Optional[str] = None
    school_id: Optional[int] = None
    class_group_id: Optional[int] = None
    notes: Optional[str] = None
