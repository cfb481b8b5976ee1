"""Storage contracts used by the services.

Implementations must enforce the unique business keys at the storage layer
and raise ``pymongo.errors.DuplicateKeyError`` when an insert or update
violates one; every other storage failure is raised unchanged.
"""
from __future__ import annotations

from typing import Any, AsyncContextManager, Optional, Protocol, Sequence, TypeVar

from schooladmin.models import AttendanceOut, AuditLogOut

OutT = TypeVar("OutT", covariant=True)


class Transactions(Protocol):
    def transaction(self) -> AsyncContextManager[Any]:
        """Yield a session; commit on normal exit, abort on any exception."""
        raise NotImplementedError


class EntityRepository(Protocol[OutT]):
    async def get_by_id(self, entity_id: int, *, session: Any = None) -> Optional[OutT]:
        raise NotImplementedError

    async def find_active_by(
        self,
        field: str,
        value: Any,
        *,
        exclude_id: Optional[int] = None,
        session: Any = None,
    ) -> Optional[OutT]:
        raise NotImplementedError

    async def insert(self, fields: dict[str, Any], *, session: Any = None) -> int:
        raise NotImplementedError

    async def update(self, entity_id: int, fields: dict[str, Any], *, session: Any = None) -> bool:
        raise NotImplementedError

    async def list_active(
        self,
        *,
        filters: Optional[dict[str, Any]] = None,
        search: Optional[str] = None,
        skip: int = 0,
        limit: Optional[int] = None,
    ) -> tuple[Sequence[OutT], int]:
        raise NotImplementedError


class AttendanceRepository(Protocol):
    async def get_by_id(self, attendance_id: int, *, session: Any = None) -> Optional[AttendanceOut]:
        raise NotImplementedError

    async def find_by_key(
        self,
        *,
        student_id: int,
        class_group_id: int,
        session_date: str,
        session: Any = None,
    ) -> Optional[AttendanceOut]:
        raise NotImplementedError

    async def insert(self, fields: dict[str, Any], *, session: Any = None) -> int:
        raise NotImplementedError

    async def update(self, attendance_id: int, fields: dict[str, Any], *, session: Any = None) -> bool:
        raise NotImplementedError

    async def list_filtered(
        self,
        *,
        student_id: Optional[int] = None,
        class_group_id: Optional[int] = None,
        from_date: Optional[str] = None,
        to_date: Optional[str] = None,
    ) -> Sequence[AttendanceOut]:
        raise NotImplementedError


class AuditLogRepository(Protocol):
    async def insert(self, fields: dict[str, Any], *, session: Any = None) -> int:
        raise NotImplementedError

    async def list_for_entity(self, entity_type: str, entity_id: int) -> Sequence[AuditLogOut]:
        raise NotImplementedError
