"""Attendance: single-record CRUD and the class group batch upsert."""
from __future__ import annotations

import logging
import re
from collections import Counter
from datetime import date, datetime
from typing import Any, Optional, Sequence

from schooladmin.core.exceptions import MismatchError, NotFoundError, ValidationFailure
from schooladmin.models import (
    VALID_STATUSES,
    AttendanceCreate,
    AttendanceOut,
    AttendanceStatus,
    AttendanceUpdate,
    BatchAttendanceRequest,
    BatchAttendanceResponse,
    ClassGroupOut,
    StudentOut,
)
from schooladmin.repositories.protocols import AttendanceRepository, EntityRepository, Transactions
from schooladmin.services.audit import AuditService
from schooladmin.services.unique import create_unique

logger = logging.getLogger(__name__)

ENTITY = "Attendance"

_SESSION_DATE = re.compile(r"\d{4}-\d{2}-\d{2}")


def parse_session_date(value: Optional[str]) -> Optional[str]:
    """Return the date as YYYY-MM-DD; None unless the value is exactly a valid YYYY-MM-DD date."""
    if not value or not _SESSION_DATE.fullmatch(value.strip()):
        return None
    try:
        return date.fromisoformat(value.strip()).isoformat()
    except ValueError:
        return None


class AttendanceService:
    def __init__(
        self,
        attendance: AttendanceRepository,
        students: EntityRepository[StudentOut],
        class_groups: EntityRepository[ClassGroupOut],
        audit: AuditService,
        transactions: Transactions,
    ):
        self._attendance = attendance
        self._students = students
        self._class_groups = class_groups
        self._audit = audit
        self._transactions = transactions

    async def _active_class_group(self, class_group_id: int) -> ClassGroupOut:
        group = await self._class_groups.get_by_id(class_group_id)
        if group is None or not group.is_active:
            logger.warning("Class group %s not found or archived", class_group_id)
            raise NotFoundError("ClassGroup", class_group_id)
        return group

    async def _active_student(self, student_id: int, *, session: Any = None) -> Optional[StudentOut]:
        student = await self._students.get_by_id(student_id, session=session)
        if student is None or not student.is_active:
            return None
        return student

    async def batch_save(
        self,
        route_class_group_id: int,
        request: BatchAttendanceRequest,
        changed_by: str,
    ) -> BatchAttendanceResponse:
        """Create or update one record per entry for a class group session.

        All validation happens before the transaction opens. Entries whose
        student is missing or archived are counted as failed; any storage
        error aborts the whole batch.
        """
        if request.class_group_id != route_class_group_id:
            raise MismatchError(
                f"Class group ID in body ({request.class_group_id}) does not match route ({route_class_group_id})"
            )

        errors: list[str] = []
        if not request.entries:
            errors.append("At least one attendance entry is required")
        session_date = parse_session_date(request.session_date)
        if session_date is None:
            errors.append(f"Invalid session date '{request.session_date}', expected YYYY-MM-DD")
        statuses: list[Optional[AttendanceStatus]] = []
        for entry in request.entries:
            status = AttendanceStatus.parse(entry.status)
            if status is None:
                errors.append(
                    f"Invalid status '{entry.status}' for student {entry.student_id}. Valid values: {VALID_STATUSES}"
                )
            statuses.append(status)
        seen = Counter(entry.student_id for entry in request.entries)
        errors.extend(
            f"Student {student_id} appears {count} times in the batch"
            for student_id, count in seen.items()
            if count > 1
        )
        if errors:
            logger.warning("Batch attendance for class group %s rejected: %s", route_class_group_id, errors)
            raise ValidationFailure("Batch attendance request is invalid", errors)

        await self._active_class_group(route_class_group_id)

        result = BatchAttendanceResponse()
        async with self._transactions.transaction() as session:
            for entry, status in zip(request.entries, statuses):
                if await self._active_student(entry.student_id, session=session) is None:
                    result.failed += 1
                    result.errors.append(f"Student {entry.student_id} not found or archived")
                    logger.warning("Batch attendance skipped student %s: not found or archived", entry.student_id)
                    continue

                existing = await self._attendance.find_by_key(
                    student_id=entry.student_id,
                    class_group_id=route_class_group_id,
                    session_date=session_date,
                    session=session,
                )
                if existing is None:
                    new_id = await self._attendance.insert(
                        {
                            "student_id": entry.student_id,
                            "class_group_id": route_class_group_id,
                            "session_date": session_date,
                            "status": status,
                            "notes": entry.notes,
                            "created_at": datetime.utcnow(),
                            "modified_at": None,
                        },
                        session=session,
                    )
                    await self._audit.log_change(
                        ENTITY, new_id, "status", None, status.value, changed_by, session=session
                    )
                    result.created += 1
                else:
                    await self._attendance.update(
                        existing.id,
                        {"status": status, "notes": entry.notes, "modified_at": datetime.utcnow()},
                        session=session,
                    )
                    changes = _changes(existing, status, entry.notes)
                    await self._audit.log_changes(ENTITY, existing.id, changes, changed_by, session=session)
                    result.updated += 1

        logger.info(
            "Batch attendance for class group %s on %s: created=%d updated=%d failed=%d",
            route_class_group_id,
            session_date,
            result.created,
            result.updated,
            result.failed,
        )
        return result

    async def create(self, data: AttendanceCreate, changed_by: str) -> AttendanceOut:
        status = AttendanceStatus.parse(data.status)
        session_date = parse_session_date(data.session_date)
        errors = []
        if status is None:
            errors.append(f"Invalid status '{data.status}'. Valid values: {VALID_STATUSES}")
        if session_date is None:
            errors.append(f"Invalid session date '{data.session_date}', expected YYYY-MM-DD")
        if errors:
            raise ValidationFailure("Attendance record is invalid", errors)

        if await self._active_student(data.student_id) is None:
            raise NotFoundError("Student", data.student_id)
        await self._active_class_group(data.class_group_id)

        key = dict(student_id=data.student_id, class_group_id=data.class_group_id, session_date=session_date)

        fields = {**key, "status": status, "notes": data.notes, "created_at": datetime.utcnow(), "modified_at": None}

        # The record and its audit entry commit together
        async with self._transactions.transaction() as session:

            async def exists() -> bool:
                return await self._attendance.find_by_key(**key, session=session) is not None

            created = await create_unique(
                entity=ENTITY,
                field="student_id, class_group_id, session_date",
                value=f"{data.student_id}, {data.class_group_id}, {session_date}",
                exists=exists,
                insert=lambda: self._attendance.insert(fields, session=session),
                fetch=lambda new_id: self._attendance.get_by_id(new_id, session=session),
            )
            await self._audit.log_change(ENTITY, created.id, "status", None, status.value, changed_by, session=session)
        logger.info("Created attendance record %s", created.id)
        return created

    async def get(self, attendance_id: int) -> AttendanceOut:
        record = await self._attendance.get_by_id(attendance_id)
        if record is None:
            raise NotFoundError(ENTITY, attendance_id)
        return record

    async def update(self, attendance_id: int, data: AttendanceUpdate, changed_by: str) -> AttendanceOut:
        status = AttendanceStatus.parse(data.status)
        if status is None:
            raise ValidationFailure(
                "Attendance record is invalid", [f"Invalid status '{data.status}'. Valid values: {VALID_STATUSES}"]
            )
        current = await self.get(attendance_id)
        changes = _changes(current, status, data.notes)

        async with self._transactions.transaction() as session:
            await self._attendance.update(
                attendance_id,
                {"status": status, "notes": data.notes, "modified_at": datetime.utcnow()},
                session=session,
            )
            await self._audit.log_changes(ENTITY, attendance_id, changes, changed_by, session=session)
        logger.info("Updated attendance record %s, %d changes audited", attendance_id, len(changes))
        return await self.get(attendance_id)

    async def list(
        self,
        *,
        student_id: Optional[int] = None,
        class_group_id: Optional[int] = None,
        from_date: Optional[str] = None,
        to_date: Optional[str] = None,
    ) -> Sequence[AttendanceOut]:
        bounds = {}
        for name, value in (("from_date", from_date), ("to_date", to_date)):
            if value is None:
                continue
            parsed = parse_session_date(value)
            if parsed is None:
                raise ValidationFailure("Invalid date filter", [f"{name} '{value}' is not a valid date"])
            bounds[name] = parsed
        return await self._attendance.list_filtered(
            student_id=student_id, class_group_id=class_group_id, **bounds
        )

    async def list_for_student(self, student_id: int) -> Sequence[AttendanceOut]:
        if await self._students.get_by_id(student_id) is None:
            raise NotFoundError("Student", student_id)
        return await self._attendance.list_filtered(student_id=student_id)


def _changes(
    current: AttendanceOut, status: AttendanceStatus, notes: Optional[str]
) -> dict[str, tuple[Optional[str], Optional[str]]]:
    changes = {}
    if current.status != status:
        changes["status"] = (current.status.value, status.value)
    if current.notes != notes:
        changes["notes"] = (current.notes, notes)
    return changes
