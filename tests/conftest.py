from __future__ import annotations

import copy
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Any, Optional

import pytest
from pymongo.errors import DuplicateKeyError

from schooladmin.container import Container, build_container
from schooladmin.models import (
    ActivityOut,
    AttendanceOut,
    AuditLogOut,
    ClassGroupOut,
    SchoolOut,
    StudentOut,
    TruckOut,
)


class InMemoryStore:
    """Collections of plain dicts keyed by integer id.

    Id sequences live outside the collections so, like the counters
    collection, they are not rolled back by an aborted transaction.
    """

    def __init__(self):
        self.collections: dict[str, dict[int, dict[str, Any]]] = {}
        self._sequences: dict[str, int] = {}

    def collection(self, name: str) -> dict[int, dict[str, Any]]:
        return self.collections.setdefault(name, {})

    def next_id(self, name: str) -> int:
        self._sequences[name] = self._sequences.get(name, 0) + 1
        return self._sequences[name]

    def snapshot(self) -> dict[str, dict[int, dict[str, Any]]]:
        return copy.deepcopy(self.collections)

    def restore(self, snapshot: dict[str, dict[int, dict[str, Any]]]) -> None:
        for name, rows in self.collections.items():
            rows.clear()
            rows.update(snapshot.get(name, {}))


class FakeTransactions:
    def __init__(self, store: InMemoryStore):
        self._store = store
        self.committed = 0
        self.aborted = 0

    @asynccontextmanager
    async def transaction(self):
        snapshot = self._store.snapshot()
        try:
            yield object()
        except BaseException:
            self._store.restore(snapshot)
            self.aborted += 1
            raise
        self.committed += 1


class FakeEntityRepository:
    """Archivable collection with an optional partial unique index on one field."""

    def __init__(self, store: InMemoryStore, name: str, out_model, unique_field: Optional[str] = None):
        self._store = store
        self._name = name
        self._out_model = out_model
        self._unique_field = unique_field
        self.inserts = 0

    @property
    def rows(self) -> dict[int, dict[str, Any]]:
        return self._store.collection(self._name)

    def _to_out(self, row: dict[str, Any]):
        return self._out_model.model_validate(row)

    def _check_unique(self, row: dict[str, Any], exclude_id: Optional[int] = None) -> None:
        field = self._unique_field
        if not field or not row.get("is_active") or not isinstance(row.get(field), str):
            return
        for other_id, other in self.rows.items():
            if other_id != exclude_id and other.get("is_active") and other.get(field) == row[field]:
                raise DuplicateKeyError(f"E11000 duplicate key error collection: {self._name} dup key: {field}", 11000)

    async def get_by_id(self, entity_id: int, *, session: Any = None):
        row = self.rows.get(entity_id)
        return self._to_out(row) if row else None

    async def find_active_by(self, field: str, value: Any, *, exclude_id: Optional[int] = None, session: Any = None):
        for row_id, row in self.rows.items():
            if row_id != exclude_id and row.get("is_active") and row.get(field) == value:
                return self._to_out(row)
        return None

    async def insert(self, fields: dict[str, Any], *, session: Any = None) -> int:
        new_id = self._store.next_id(self._name)
        row = {**fields, "id": new_id}
        self._check_unique(row)
        self.rows[new_id] = row
        self.inserts += 1
        return new_id

    async def update(self, entity_id: int, fields: dict[str, Any], *, session: Any = None) -> bool:
        row = self.rows.get(entity_id)
        if row is None:
            return False
        merged = {**row, **fields}
        self._check_unique(merged, exclude_id=entity_id)
        self.rows[entity_id] = merged
        return True

    async def list_active(self, *, filters=None, search=None, skip=0, limit=None):
        rows = [r for r in self.rows.values() if r.get("is_active")]
        for key, value in (filters or {}).items():
            if value is not None:
                rows = [r for r in rows if r.get(key) == value]
        if search:
            needle = search.strip().lower()
            rows = [r for r in rows if any(needle in str(v).lower() for v in r.values() if isinstance(v, str))]
        rows.sort(key=lambda r: r["id"])
        page = rows[skip : skip + limit] if limit else rows[skip:]
        return [self._to_out(r) for r in page], len(rows)


class FakeStudentRepository(FakeEntityRepository):
    def _to_out(self, row):
        out = super()._to_out(row)
        out.full_name = f"{out.first_name} {out.last_name}"
        return out


class FakeAttendanceRepository:
    """Attendance with a unique index on (student_id, class_group_id, session_date).

    ``fail_on_insert`` makes the n-th insert (1-based) raise the given
    exception, to simulate a storage fault or a cancellation mid-batch.
    """

    def __init__(self, store: InMemoryStore):
        self._store = store
        self.fail_on_insert: Optional[tuple[int, BaseException]] = None
        self.insert_calls = 0

    @property
    def rows(self) -> dict[int, dict[str, Any]]:
        return self._store.collection("attendance")

    def _to_out(self, row: dict[str, Any]) -> AttendanceOut:
        student = self._store.collection("students").get(row["student_id"])
        group = self._store.collection("class_groups").get(row["class_group_id"])
        return AttendanceOut(
            **row,
            student_name=f"{student['first_name']} {student['last_name']}" if student else None,
            class_group_name=group["name"] if group else None,
        )

    async def get_by_id(self, attendance_id: int, *, session: Any = None):
        row = self.rows.get(attendance_id)
        return self._to_out(row) if row else None

    async def find_by_key(self, *, student_id, class_group_id, session_date, session: Any = None):
        for row in self.rows.values():
            if (row["student_id"], row["class_group_id"], row["session_date"]) == (
                student_id,
                class_group_id,
                session_date,
            ):
                return AttendanceOut(**row)
        return None

    async def insert(self, fields: dict[str, Any], *, session: Any = None) -> int:
        self.insert_calls += 1
        if self.fail_on_insert and self.fail_on_insert[0] == self.insert_calls:
            raise self.fail_on_insert[1]
        key = (fields["student_id"], fields["class_group_id"], fields["session_date"])
        if any((r["student_id"], r["class_group_id"], r["session_date"]) == key for r in self.rows.values()):
            raise DuplicateKeyError("E11000 duplicate key error collection: attendance", 11000)
        new_id = self._store.next_id("attendance")
        self.rows[new_id] = {**fields, "id": new_id}
        return new_id

    async def update(self, attendance_id: int, fields: dict[str, Any], *, session: Any = None) -> bool:
        row = self.rows.get(attendance_id)
        if row is None:
            return False
        row.update(fields)
        return True

    async def list_filtered(self, *, student_id=None, class_group_id=None, from_date=None, to_date=None):
        rows = list(self.rows.values())
        if student_id is not None:
            rows = [r for r in rows if r["student_id"] == student_id]
        if class_group_id is not None:
            rows = [r for r in rows if r["class_group_id"] == class_group_id]
        if from_date:
            rows = [r for r in rows if r["session_date"] >= from_date]
        if to_date:
            rows = [r for r in rows if r["session_date"] <= to_date]
        rows.sort(key=lambda r: (r["session_date"], -r["student_id"]), reverse=True)
        return [self._to_out(r) for r in rows]


class FakeAuditLogRepository:
    """``fail_with`` makes every insert raise, to simulate a lost audit write."""

    def __init__(self, store: InMemoryStore):
        self._store = store
        self.fail_with: Optional[BaseException] = None

    @property
    def rows(self) -> dict[int, dict[str, Any]]:
        return self._store.collection("audit_log")

    async def insert(self, fields: dict[str, Any], *, session: Any = None) -> int:
        if self.fail_with is not None:
            raise self.fail_with
        new_id = self._store.next_id("audit_log")
        self.rows[new_id] = {**fields, "id": new_id}
        return new_id

    async def list_for_entity(self, entity_type: str, entity_id: int):
        rows = [r for r in self.rows.values() if r["entity_type"] == entity_type and r["entity_id"] == entity_id]
        rows.sort(key=lambda r: (r["changed_at"], r["id"]), reverse=True)
        return [AuditLogOut.model_validate(r) for r in rows]


class Backend:
    """In-memory repositories plus the services built on top of them."""

    def __init__(self):
        self.store = InMemoryStore()
        self.students = FakeStudentRepository(self.store, "students", StudentOut, unique_field="reference")
        self.schools = FakeEntityRepository(self.store, "schools", SchoolOut, unique_field="name")
        self.activities = FakeEntityRepository(self.store, "activities", ActivityOut, unique_field="code")
        self.trucks = FakeEntityRepository(self.store, "trucks", TruckOut, unique_field="registration_number")
        self.class_groups = FakeEntityRepository(self.store, "class_groups", ClassGroupOut)
        self.attendance = FakeAttendanceRepository(self.store)
        self.audit_log = FakeAuditLogRepository(self.store)
        self.transactions = FakeTransactions(self.store)
        self.services: Container = build_container(
            students=self.students,
            schools=self.schools,
            activities=self.activities,
            trucks=self.trucks,
            class_groups=self.class_groups,
            attendance=self.attendance,
            audit_log=self.audit_log,
            transactions=self.transactions,
        )

    async def add_school(self, name: str = "Greenfield Primary", **extra) -> int:
        return await self.schools.insert(
            {"name": name, "is_active": True, "created_at": datetime(2024, 1, 1), **extra}
        )

    async def add_class_group(self, school_id: int, name: str = "Gr1-Mon", **extra) -> int:
        fields = {
            "name": name,
            "school_id": school_id,
            "day_of_week": 0,
            "start_time": "08:00",
            "end_time": "09:00",
            "sequence": 1,
            "is_active": True,
            "created_at": datetime(2024, 1, 1),
        }
        fields.update(extra)
        return await self.class_groups.insert(fields)

    async def add_truck(self, registration_number: str, name: str = "Blue Truck") -> int:
        return await self.trucks.insert(
            {
                "name": name,
                "registration_number": registration_number,
                "status": "Active",
                "is_active": True,
                "created_at": datetime(2024, 1, 1),
            }
        )

    async def add_student(self, reference: str, first_name: str = "Ada", last_name: str = "Lovelace", **extra) -> int:
        fields = {
            "reference": reference,
            "first_name": first_name,
            "last_name": last_name,
            "is_active": True,
            "created_at": datetime(2024, 1, 1),
        }
        fields.update(extra)
        return await self.students.insert(fields)


@pytest.fixture
def backend() -> Backend:
    return Backend()
