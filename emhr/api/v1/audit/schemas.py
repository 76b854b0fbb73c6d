from typing import Optional, List, Dict, Any
from datetime import datetime

from emhr.api.v1.common import CamelModel


class AuditLogResponse(CamelModel):
    id: int
    user_id: Optional[int] = None
    username: Optional[str] = None
    action: str
    resource_type: str
    resource_id: Optional[int] = None
    details: Optional[Dict[str, Any]] = None
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    request_id: Optional[str] = None
    created_at: datetime


class AuditLogListResponse(CamelModel):
    success: bool = True
    logs: List[AuditLogResponse]
    total: int
    page: int
    limit: int
    pages: int


class AuditActionsResponse(CamelModel):
    success: bool = True
    actions: List[str]
