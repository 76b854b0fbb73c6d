from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import Optional
from datetime import date
import math

from emhr.domain.audit.service import AuditLogService
from emhr.domain.auth.models import User
from emhr.api.deps import require_admin
from emhr.api.v1.audit.schemas import AuditLogListResponse, AuditActionsResponse
from emhr.infrastructure.database import get_db

router = APIRouter(prefix="/audit-logs", tags=["Audit"])


@router.get("/", response_model=AuditLogListResponse)
def search_audit_logs(
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=500),
    user_id: Optional[int] = Query(None, alias="userId"),
    action: Optional[str] = None,
    resource_type: Optional[str] = Query(None, alias="resourceType"),
    resource_id: Optional[int] = Query(None, alias="resourceId"),
    start_date: Optional[date] = Query(None, alias="startDate"),
    end_date: Optional[date] = Query(None, alias="endDate"),
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Audit trail viewer (admin only), newest first"""
    logs, total = AuditLogService(db).search(
        page=page,
        limit=limit,
        user_id=user_id,
        action=action,
        resource_type=resource_type,
        resource_id=resource_id,
        start_date=start_date,
        end_date=end_date,
    )
    return AuditLogListResponse(
        logs=logs,
        total=total,
        page=page,
        limit=limit,
        pages=math.ceil(total / limit) if total else 0,
    )


@router.get("/actions", response_model=AuditActionsResponse)
def list_audit_actions(
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    return AuditActionsResponse(actions=AuditLogService(db).actions())
