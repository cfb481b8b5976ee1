"""Shared lifecycle for archivable entities: create, get, list, update, archive."""
from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Generic, Optional, TypeVar

from pydantic import BaseModel

from schooladmin.config import settings
from schooladmin.core.exceptions import NotFoundError, ValidationFailure
from schooladmin.models import Page
from schooladmin.repositories.protocols import EntityRepository, Transactions
from schooladmin.services.audit import AuditService
from schooladmin.services.unique import create_unique, update_unique

logger = logging.getLogger(__name__)

OutT = TypeVar("OutT", bound=BaseModel)


def _as_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, bool):
        return str(value).lower()
    return str(value)


class CatalogService(Generic[OutT]):
    """Subclasses set ``entity`` and, when the entity has a unique business
    key, ``key_field``. Archived records are invisible to get/list/update and
    do not hold their key."""

    entity: str
    key_field: Optional[str] = None
    required_fields: tuple[str, ...] = ()

    def __init__(self, repo: EntityRepository[OutT], audit: AuditService, transactions: Transactions):
        self._repo = repo
        self._audit = audit
        self._transactions = transactions

    def _prepare(self, fields: dict[str, Any]) -> dict[str, Any]:
        """Normalise incoming fields; a blank key means the record has none."""
        if self.key_field and isinstance(fields.get(self.key_field), str):
            fields[self.key_field] = fields[self.key_field].strip() or None
        missing = [name for name in self.required_fields if name in fields and fields[name] in (None, "")]
        if missing:
            raise ValidationFailure("Required fields are missing", [f"{name} is required" for name in missing])
        return fields

    async def _validate(self, fields: dict[str, Any], *, current: Optional[OutT] = None) -> None:
        """Hook for reference checks; raise a DomainError to reject."""

    async def _key_taken(self, value: Any, *, exclude_id: Optional[int] = None, session: Any = None) -> bool:
        existing = await self._repo.find_active_by(self.key_field, value, exclude_id=exclude_id, session=session)
        return existing is not None

    async def create(self, data: BaseModel) -> OutT:
        fields = self._prepare(data.model_dump())
        await self._validate(fields)
        fields["is_active"] = True
        fields["created_at"] = datetime.utcnow()

        key = fields.get(self.key_field) if self.key_field else None
        created = await create_unique(
            entity=self.entity,
            field=self.key_field or "",
            value=key,
            exists=lambda: self._key_taken(key),
            insert=lambda: self._repo.insert(fields),
            fetch=self._repo.get_by_id,
        )
        logger.info("Created %s with ID %s", self.entity, created.id)
        return created

    async def get(self, entity_id: int) -> OutT:
        found = await self._repo.get_by_id(entity_id)
        if found is None or not found.is_active:
            logger.warning("%s with ID %s not found", self.entity, entity_id)
            raise NotFoundError(self.entity, entity_id)
        return found

    async def list(
        self,
        *,
        search: Optional[str] = None,
        filters: Optional[dict[str, Any]] = None,
        page: int = 1,
        page_size: Optional[int] = None,
    ) -> Page[OutT]:
        page = page if page > 0 else 1
        page_size = page_size if page_size and page_size > 0 else settings.default_page_size
        page_size = min(page_size, settings.max_page_size)
        items, total = await self._repo.list_active(
            filters=filters,
            search=search,
            skip=(page - 1) * page_size,
            limit=page_size,
        )
        return Page(items=list(items), total=total, page=page, page_size=page_size)

    async def update(self, entity_id: int, data: BaseModel, changed_by: str) -> OutT:
        current = await self.get(entity_id)
        fields = self._prepare(data.model_dump(exclude_unset=True))
        await self._validate(fields, current=current)

        changes = {
            name: (_as_text(getattr(current, name)), _as_text(value))
            for name, value in fields.items()
            if getattr(current, name) != value
        }
        if not changes:
            return current

        fields["updated_at"] = datetime.utcnow()
        new_key = fields.get(self.key_field) if self.key_field and self.key_field in changes else None
        async with self._transactions.transaction() as session:
            await update_unique(
                entity=self.entity,
                field=self.key_field or "",
                value=new_key,
                exists=lambda: self._key_taken(new_key, exclude_id=entity_id, session=session),
                update=lambda: self._repo.update(entity_id, fields, session=session),
            )
            await self._audit.log_changes(self.entity, entity_id, changes, changed_by, session=session)
        logger.info("Updated %s with ID %s, %d changes audited", self.entity, entity_id, len(changes))
        return await self.get(entity_id)

    async def archive(self, entity_id: int, changed_by: str) -> None:
        """Soft delete. Archiving an already archived record is a no-op."""
        found = await self._repo.get_by_id(entity_id)
        if found is None:
            raise NotFoundError(self.entity, entity_id)
        if not found.is_active:
            logger.info("%s with ID %s is already archived", self.entity, entity_id)
            return
        async with self._transactions.transaction() as session:
            await self._repo.update(entity_id, {"is_active": False, "updated_at": datetime.utcnow()}, session=session)
            await self._audit.log_change(
                self.entity, entity_id, "is_active", "true", "false", changed_by, session=session
            )
        logger.info("Archived %s with ID %s", self.entity, entity_id)
