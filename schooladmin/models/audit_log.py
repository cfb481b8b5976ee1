"""Field-level audit trail."""
from datetime import datetime
from typing import Optional

from beanie import Document
from pydantic import BaseModel, Field
from pymongo import ASCENDING, DESCENDING, IndexModel


class AuditLog(Document):
    id: Optional[int] = None
    entity_type: str
    entity_id: int
    field: str
    old_value: Optional[str] = None
    new_value: Optional[str] = None
    changed_by: str
    changed_at: datetime = Field(default_factory=datetime.utcnow)

    class Settings:
        name = "audit_log"
        indexes = [
            IndexModel([("entity_type", ASCENDING), ("entity_id", ASCENDING), ("changed_at", DESCENDING)]),
        ]


class AuditLogOut(BaseModel):
    id: int
    entity_type: str
    entity_id: int
    field: str
    old_value: Optional[str] = None
    new_value: Optional[str] = None
    changed_by: str
    changed_at: datetime
