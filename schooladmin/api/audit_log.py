"""Audit trail lookup."""
from fastapi import APIRouter, Query

from schooladmin.api.deps import Services
from schooladmin.models import AuditLogOut

router = APIRouter()


@router.get("/", response_model=list[AuditLogOut])
async def list_audit_entries(
    services: Services,
    entity_type: str = Query(..., description="Attendance, Student, School, ClassGroup, Activity or Truck"),
    entity_id: int = Query(..., gt=0),
):
    return await services.audit.list_for_entity(entity_type, entity_id)
