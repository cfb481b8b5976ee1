"""Beanie document models and Pydantic schemas."""
from schooladmin.models.activity import Activity, ActivityCreate, ActivityOut, ActivityUpdate
from schooladmin.models.attendance import (
    AttendanceCreate,
    AttendanceOut,
    AttendanceRecord,
    AttendanceStatus,
    AttendanceUpdate,
    BatchAttendanceEntry,
    BatchAttendanceRequest,
    BatchAttendanceResponse,
    VALID_STATUSES,
)
from schooladmin.models.audit_log import AuditLog, AuditLogOut
from schooladmin.models.class_group import (
    ClassGroup,
    ClassGroupCreate,
    ClassGroupOut,
    ClassGroupUpdate,
    ScheduleConflict,
    ScheduleConflictRequest,
    ScheduleConflictResponse,
)
from schooladmin.models.common import Page
from schooladmin.models.counter import Counter
from schooladmin.models.school import School, SchoolCreate, SchoolOut, SchoolUpdate
from schooladmin.models.student import Student, StudentCreate, StudentOut, StudentUpdate
from schooladmin.models.truck import Truck, TruckCreate, TruckOut, TruckUpdate

__all__ = [
    "Activity",
    "ActivityCreate",
    "ActivityOut",
    "ActivityUpdate",
    "AttendanceCreate",
    "AttendanceOut",
    "AttendanceRecord",
    "AttendanceStatus",
    "AttendanceUpdate",
    "BatchAttendanceEntry",
    "BatchAttendanceRequest",
    "BatchAttendanceResponse",
    "VALID_STATUSES",
    "AuditLog",
    "AuditLogOut",
    "ClassGroup",
    "ClassGroupCreate",
    "ClassGroupOut",
    "ClassGroupUpdate",
    "ScheduleConflict",
    "ScheduleConflictRequest",
    "ScheduleConflictResponse",
    "Page",
    "Counter",
    "School",
    "SchoolCreate",
    "SchoolOut",
    "SchoolUpdate",
    "Student",
    "StudentCreate",
    "StudentOut",
    "StudentUpdate",
    "Truck",
    "TruckCreate",
    "TruckOut",
    "TruckUpdate",
]
