"""Beanie-backed repositories."""
from __future__ import annotations

import re
from typing import Any, Generic, Optional, Sequence, TypeVar

from beanie import Document
from pydantic import BaseModel

from schooladmin.db import next_sequence
from schooladmin.models import (
    Activity,
    ActivityOut,
    AttendanceOut,
    AttendanceRecord,
    AuditLog,
    AuditLogOut,
    ClassGroup,
    ClassGroupOut,
    School,
    SchoolOut,
    Student,
    StudentOut,
    Truck,
    TruckOut,
)

DocT = TypeVar("DocT", bound=Document)
OutT = TypeVar("OutT", bound=BaseModel)


class BeanieEntityRepository(Generic[DocT, OutT]):
    """Generic CRUD over one archivable collection with integer ids."""

    document: type[DocT]
    out_model: type[OutT]
    collection: str
    search_fields: tuple[str, ...] = ()
    sort_fields: tuple[str, ...] = ("+_id",)

    def _to_out(self, doc: DocT) -> OutT:
        return self.out_model.model_validate(doc.model_dump())

    async def get_by_id(self, entity_id: int, *, session=None) -> Optional[OutT]:
        doc = await self.document.get(entity_id, session=session)
        return self._to_out(doc) if doc else None

    async def find_active_by(self, field: str, value: Any, *, exclude_id: Optional[int] = None, session=None) -> Optional[OutT]:
        query: dict[str, Any] = {field: value, "is_active": True}
        if exclude_id is not None:
            query["_id"] = {"$ne": exclude_id}
        doc = await self.document.find_one(query, session=session)
        return self._to_out(doc) if doc else None

    async def insert(self, fields: dict[str, Any], *, session=None) -> int:
        new_id = await next_sequence(self.collection)
        doc = self.document(id=new_id, **fields)
        await doc.insert(session=session)
        return new_id

    async def update(self, entity_id: int, fields: dict[str, Any], *, session=None) -> bool:
        doc = await self.document.get(entity_id, session=session)
        if not doc:
            return False
        for key, value in fields.items():
            setattr(doc, key, value)
        await doc.save(session=session)
        return True

    async def list_active(
        self,
        *,
        filters: Optional[dict[str, Any]] = None,
        search: Optional[str] = None,
        skip: int = 0,
        limit: Optional[int] = None,
    ) -> tuple[Sequence[OutT], int]:
        query: dict[str, Any] = {"is_active": True}
        query.update({k: v for k, v in (filters or {}).items() if v is not None})
        if search and search.strip() and self.search_fields:
            pattern = re.escape(search.strip())
            query["$or"] = [{f: {"$regex": pattern, "$options": "i"}} for f in self.search_fields]
        total = await self.document.find(query).count()
        finder = self.document.find(query).sort(*self.sort_fields).skip(skip)
        if limit:
            finder = finder.limit(limit)
        docs = await finder.to_list()
        return [self._to_out(d) for d in docs], total


class StudentRepository(BeanieEntityRepository[Student, StudentOut]):
    document = Student
    out_model = StudentOut
    collection = "students"
    search_fields = ("reference", "first_name", "last_name")
    sort_fields = ("+last_name", "+first_name")

    def _to_out(self, doc: Student) -> StudentOut:
        out = super()._to_out(doc)
        out.full_name = f"{doc.first_name} {doc.last_name}".strip()
        return out


class SchoolRepository(BeanieEntityRepository[School, SchoolOut]):
    document = School
    out_model = SchoolOut
    collection = "schools"
    search_fields = ("name", "short_name", "contact_person")
    sort_fields = ("+name",)


class ActivityRepository(BeanieEntityRepository[Activity, ActivityOut]):
    document = Activity
    out_model = ActivityOut
    collection = "activities"
    search_fields = ("code", "name", "description")
    sort_fields = ("+name",)


class TruckRepository(BeanieEntityRepository[Truck, TruckOut]):
    document = Truck
    out_model = TruckOut
    collection = "trucks"
    search_fields = ("name", "registration_number")
    sort_fields = ("+name",)


class ClassGroupRepository(BeanieEntityRepository[ClassGroup, ClassGroupOut]):
    document = ClassGroup
    out_model = ClassGroupOut
    collection = "class_groups"
    search_fields = ("name",)
    sort_fields = ("+day_of_week", "+start_time", "+sequence")


class MongoAttendanceRepository:
    async def _names(self, records: list[AttendanceRecord], session=None) -> tuple[dict[int, str], dict[int, str]]:
        student_ids = list({r.student_id for r in records})
        group_ids = list({r.class_group_id for r in records})
        students = await Student.find({"_id": {"$in": student_ids}}, session=session).to_list()
        groups = await ClassGroup.find({"_id": {"$in": group_ids}}, session=session).to_list()
        student_names = {s.id: f"{s.first_name} {s.last_name}".strip() for s in students}
        group_names = {g.id: g.name for g in groups}
        return student_names, group_names

    async def _to_out_many(self, records: list[AttendanceRecord], session=None) -> list[AttendanceOut]:
        if not records:
            return []
        student_names, group_names = await self._names(records, session=session)
        return [
            AttendanceOut(
                **r.model_dump(),
                student_name=student_names.get(r.student_id),
                class_group_name=group_names.get(r.class_group_id),
            )
            for r in records
        ]

    async def get_by_id(self, attendance_id: int, *, session=None) -> Optional[AttendanceOut]:
        record = await AttendanceRecord.get(attendance_id, session=session)
        if not record:
            return None
        return (await self._to_out_many([record], session=session))[0]

    async def find_by_key(self, *, student_id: int, class_group_id: int, session_date: str, session=None) -> Optional[AttendanceOut]:
        record = await AttendanceRecord.find_one(
            {"student_id": student_id, "class_group_id": class_group_id, "session_date": session_date},
            session=session,
        )
        if not record:
            return None
        return AttendanceOut(**record.model_dump())

    async def insert(self, fields: dict[str, Any], *, session=None) -> int:
        new_id = await next_sequence("attendance")
        await AttendanceRecord(id=new_id, **fields).insert(session=session)
        return new_id

    async def update(self, attendance_id: int, fields: dict[str, Any], *, session=None) -> bool:
        record = await AttendanceRecord.get(attendance_id, session=session)
        if not record:
            return False
        for key, value in fields.items():
            setattr(record, key, value)
        await record.save(session=session)
        return True

    async def list_filtered(
        self,
        *,
        student_id: Optional[int] = None,
        class_group_id: Optional[int] = None,
        from_date: Optional[str] = None,
        to_date: Optional[str] = None,
    ) -> Sequence[AttendanceOut]:
        query: dict[str, Any] = {}
        if student_id is not None:
            query["student_id"] = student_id
        if class_group_id is not None:
            query["class_group_id"] = class_group_id
        date_range: dict[str, str] = {}
        if from_date:
            date_range["$gte"] = from_date
        if to_date:
            date_range["$lte"] = to_date
        if date_range:
            query["session_date"] = date_range
        records = await AttendanceRecord.find(query).sort("-session_date", "+student_id").to_list()
        return await self._to_out_many(records)


class MongoAuditLogRepository:
    async def insert(self, fields: dict[str, Any], *, session=None) -> int:
        new_id = await next_sequence("audit_log")
        await AuditLog(id=new_id, **fields).insert(session=session)
        return new_id

    async def list_for_entity(self, entity_type: str, entity_id: int) -> Sequence[AuditLogOut]:
        entries = (
            await AuditLog.find({"entity_type": entity_type, "entity_id": entity_id})
            .sort("-changed_at", "-_id")
            .to_list()
        )
        return [AuditLogOut.model_validate(e.model_dump()) for e in entries]
