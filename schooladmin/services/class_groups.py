"""Class groups: a weekly session slot at a school."""
from __future__ import annotations

import logging
from typing import Any, Optional

from schooladmin.core.exceptions import NotFoundError, ValidationFailure
from schooladmin.models import (
    ClassGroupOut,
    SchoolOut,
    ScheduleConflict,
    ScheduleConflictRequest,
    ScheduleConflictResponse,
    TruckOut,
)
from schooladmin.repositories.protocols import EntityRepository, Transactions
from schooladmin.services.audit import AuditService
from schooladmin.services.catalog import CatalogService

logger = logging.getLogger(__name__)


class ClassGroupService(CatalogService[ClassGroupOut]):
    entity = "ClassGroup"
    required_fields = ("name", "school_id", "day_of_week", "start_time", "end_time")

    def __init__(
        self,
        repo: EntityRepository[ClassGroupOut],
        audit: AuditService,
        transactions: Transactions,
        schools: EntityRepository[SchoolOut],
        trucks: EntityRepository[TruckOut],
    ):
        super().__init__(repo, audit, transactions)
        self._schools = schools
        self._trucks = trucks

    async def _validate(self, fields: dict[str, Any], *, current: Optional[ClassGroupOut] = None) -> None:
        school_id = fields.get("school_id", current.school_id if current else None)
        school = await self._schools.get_by_id(school_id)
        if school is None or not school.is_active:
            raise NotFoundError("School", school_id)

        truck_id = fields.get("truck_id")
        if truck_id is not None:
            truck = await self._trucks.get_by_id(truck_id)
            if truck is None or not truck.is_active:
                raise NotFoundError("Truck", truck_id)

        start = fields.get("start_time", current.start_time if current else None)
        end = fields.get("end_time", current.end_time if current else None)
        # HH:MM strings compare correctly as text
        if end <= start:
            raise ValidationFailure("End time must be after start time", [f"end_time {end} <= start_time {start}"])

    async def check_conflicts(self, request: ScheduleConflictRequest) -> ScheduleConflictResponse:
        """Active class groups served by the same truck on the same day whose times overlap."""
        candidates, _ = await self._repo.list_active(
            filters={"truck_id": request.truck_id, "day_of_week": request.day_of_week}
        )
        conflicts = []
        for group in candidates:
            if group.id == request.exclude_id:
                continue
            if group.start_time < request.end_time and request.start_time < group.end_time:
                school = await self._schools.get_by_id(group.school_id)
                conflicts.append(
                    ScheduleConflict(
                        id=group.id,
                        name=group.name,
                        school_name=school.name if school else f"School {group.school_id}",
                        start_time=group.start_time,
                        end_time=group.end_time,
                    )
                )
        logger.info("Found %d schedule conflicts for truck %s on day %s", len(conflicts), request.truck_id, request.day_of_week)
        return ScheduleConflictResponse(has_conflicts=bool(conflicts), conflicts=conflicts)
