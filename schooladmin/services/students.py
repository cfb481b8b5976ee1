"""Students: reference is unique among active students."""
from __future__ import annotations

from typing import Any, Optional

from schooladmin.core.exceptions import NotFoundError
from schooladmin.models import ClassGroupOut, SchoolOut, StudentOut
from schooladmin.repositories.protocols import EntityRepository, Transactions
from schooladmin.services.audit import AuditService
from schooladmin.services.catalog import CatalogService


class StudentService(CatalogService[StudentOut]):
    entity = "Student"
    key_field = "reference"
    required_fields = ("reference", "first_name", "last_name")

    def __init__(
        self,
        repo: EntityRepository[StudentOut],
        audit: AuditService,
        transactions: Transactions,
        schools: EntityRepository[SchoolOut],
        class_groups: EntityRepository[ClassGroupOut],
    ):
        super().__init__(repo, audit, transactions)
        self._schools = schools
        self._class_groups = class_groups

    async def _validate(self, fields: dict[str, Any], *, current: Optional[StudentOut] = None) -> None:
        school_id = fields.get("school_id")
        if school_id is not None:
            school = await self._schools.get_by_id(school_id)
            if school is None or not school.is_active:
                raise NotFoundError("School", school_id)
        class_group_id = fields.get("class_group_id")
        if class_group_id is not None:
            group = await self._class_groups.get_by_id(class_group_id)
            if group is None or not group.is_active:
                raise NotFoundError("ClassGroup", class_group_id)
