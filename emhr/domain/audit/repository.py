from typing import Optional, List, Tuple
from datetime import date, datetime, time

from emhr.domain.audit.models import AuditLog


class AuditLogRepository:
    """Repository for audit log data access operations"""

    def __init__(self, db):
        self.db = db

    def create(self, log_data: dict) -> AuditLog:
        entry = AuditLog(**log_data)
        self.db.add(entry)
        self.db.commit()
        return entry

    def search(
        self,
        skip: int = 0,
        limit: int = 50,
        user_id: Optional[int] = None,
        action: Optional[str] = None,
        resource_type: Optional[str] = None,
        resource_id: Optional[int] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None
    ) -> Tuple[List[AuditLog], int]:
        query = self.db.query(AuditLog)

        if user_id:
            query = query.filter(AuditLog.user_id == user_id)
        if action:
            query = query.filter(AuditLog.action == action)
        if resource_type:
            query = query.filter(AuditLog.resource_type == resource_type)
        if resource_id:
            query = query.filter(AuditLog.resource_id == resource_id)
        if start_date:
            query = query.filter(AuditLog.created_at >= datetime.combine(start_date, time.min))
        if end_date:
            query = query.filter(AuditLog.created_at <= datetime.combine(end_date, time.max))

        total = query.count()
        logs = query.order_by(AuditLog.created_at.desc(), AuditLog.id.desc()).offset(skip).limit(limit).all()
        return logs, total

    def distinct_actions(self) -> List[str]:
        return [row.action for row in self.db.query(AuditLog.action).distinct().order_by(AuditLog.action).all()]
