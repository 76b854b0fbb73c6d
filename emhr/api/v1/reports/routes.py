from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import Optional
from datetime import date

from emhr.domain.audit.service import AuditLogger
from emhr.domain.auth.models import User
from emhr.domain.reports.service import ReportService, ReportType
from emhr.api.deps import require_admin, get_audit_logger
from emhr.api.v1.reports.schemas import ReportResponse
from emhr.infrastructure.database import get_db

router = APIRouter(prefix="/reports", tags=["Reports"])


@router.get("/", response_model=ReportResponse, response_model_exclude_none=True)
def run_report(
    report: ReportType = Query(ReportType.ALL),
    start_date: Optional[date] = Query(None, alias="startDate"),
    end_date: Optional[date] = Query(None, alias="endDate"),
    current_user: User = Depends(require_admin),
    audit: AuditLogger = Depends(get_audit_logger),
    db: Session = Depends(get_db)
):
    """Practice statistics over a date range, last 30 days by default (admin only)"""
    data = ReportService(db, current_user, audit).build(report, start_date, end_date)
    return ReportResponse(**data)
