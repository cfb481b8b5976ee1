"""Field-level audit trail helpers."""
from __future__ import annotations

from datetime import datetime
from typing import Any, Optional, Sequence

from schooladmin.core.exceptions import ValidationFailure
from schooladmin.models import AuditLogOut
from schooladmin.repositories.protocols import AuditLogRepository

AUDITED_ENTITY_TYPES = ("Attendance", "Student", "School", "ClassGroup", "Activity", "Truck")

_VALID_TYPES = {t.lower(): t for t in AUDITED_ENTITY_TYPES}


def canonical_entity_type(entity_type: str) -> str:
    try:
        return _VALID_TYPES[entity_type.strip().lower()]
    except KeyError:
        raise ValidationFailure(
            f"Invalid entity type '{entity_type}'. Valid types are: {', '.join(AUDITED_ENTITY_TYPES)}"
        ) from None


class AuditService:
    def __init__(self, entries: AuditLogRepository):
        self._entries = entries

    async def log_change(
        self,
        entity_type: str,
        entity_id: int,
        field: str,
        old_value: Optional[str],
        new_value: Optional[str],
        changed_by: str,
        *,
        session: Any = None,
    ) -> None:
        await self._entries.insert(
            {
                "entity_type": canonical_entity_type(entity_type),
                "entity_id": entity_id,
                "field": field,
                "old_value": old_value,
                "new_value": new_value,
                "changed_by": changed_by,
                "changed_at": datetime.utcnow(),
            },
            session=session,
        )

    async def log_changes(
        self,
        entity_type: str,
        entity_id: int,
        changes: dict[str, tuple[Optional[str], Optional[str]]],
        changed_by: str,
        *,
        session: Any = None,
    ) -> None:
        for field, (old_value, new_value) in changes.items():
            await self.log_change(entity_type, entity_id, field, old_value, new_value, changed_by, session=session)

    async def list_for_entity(self, entity_type: str, entity_id: int) -> Sequence[AuditLogOut]:
        return await self._entries.list_for_entity(canonical_entity_type(entity_type), entity_id)
