"""Attendance per student, class group and session date."""
from datetime import datetime
from enum import Enum
from typing import Optional

from beanie import Document
from pydantic import BaseModel, Field
from pymongo import ASCENDING, DESCENDING, IndexModel


class AttendanceStatus(str, Enum):
    PRESENT = "Present"
    ABSENT = "Absent"
    LATE = "Late"

    @classmethod
    def parse(cls, value: str | None) -> Optional["AttendanceStatus"]:
        """Case-insensitive lookup by value; None when the value is not a valid status."""
        if not value:
            return None
        wanted = value.strip().lower()
        for status in cls:
            if status.value.lower() == wanted:
                return status
        return None


VALID_STATUSES = ", ".join(s.value for s in AttendanceStatus)


class AttendanceRecord(Document):
    """One attendance entry per student per class group session per day."""

    id: Optional[int] = None
    student_id: int
    class_group_id: int
    session_date: str  # YYYY-MM-DD
    status: AttendanceStatus
    notes: Optional[str] = None
    created_at: datetime = Field(default_factory=datetime.utcnow)
    modified_at: Optional[datetime] = None  # set on every update

    class Settings:
        name = "attendance"
        indexes = [
            IndexModel(
                [("student_id", ASCENDING), ("class_group_id", ASCENDING), ("session_date", ASCENDING)],
                name="uq_attendance_student_group_date",
                unique=True,
            ),
            IndexModel([("class_group_id", ASCENDING), ("session_date", DESCENDING)]),
        ]


class AttendanceOut(BaseModel):
    id: int
    student_id: int
    student_name: Optional[str] = None
    class_group_id: int
    class_group_name: Optional[str] = None
    session_date: str
    status: AttendanceStatus
    notes: Optional[str] = None
    created_at: datetime
    modified_at: Optional[datetime] = None


class AttendanceCreate(BaseModel):
    student_id: int = Field(gt=0)
    class_group_id: int = Field(gt=0)
    session_date: str
    status: str  # Present, Absent, Late
    notes: Optional[str] = None


class AttendanceUpdate(BaseModel):
    status: str
    notes: Optional[str] = None


class BatchAttendanceEntry(BaseModel):
    student_id: int = Field(gt=0)
    status: str
    notes: Optional[str] = None


class BatchAttendanceRequest(BaseModel):
    class_group_id: int = Field(gt=0)
    session_date: str
    entries: list[BatchAttendanceEntry] = Field(default_factory=list)


class BatchAttendanceResponse(BaseModel):
    created: int = 0
    updated: int = 0
    failed: int = 0
    errors: list[str] = Field(default_factory=list)
