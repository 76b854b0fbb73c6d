"""
Audit Service Layer

Records who viewed or changed protected health information. Audit writes
never fail the request that triggered them.
"""

from typing import Optional, Dict, Any, List
from datetime import datetime
import logging

from sqlalchemy.exc import SQLAlchemyError

from emhr.core.request_context import get_request_id
from emhr.domain.audit.repository import AuditLogRepository

logger = logging.getLogger(__name__)


class AuditLogger:
    """Writes audit_logs rows on behalf of the current user"""

    def __init__(self, db, user=None, ip_address: Optional[str] = None, user_agent: Optional[str] = None):
        self.db = db
        self.user = user
        self.ip_address = ip_address
        self.user_agent = user_agent
        self.repo = AuditLogRepository(db)

    def log(
        self,
        action: str,
        resource_type: str,
        resource_id: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
        user_id: Optional[int] = None,
        username: Optional[str] = None
    ) -> bool:
        try:
            self.repo.create({
                "action": action,
                "resource_type": resource_type,
                "resource_id": resource_id,
                "details": details,
                "user_id": user_id if user_id is not None else (self.user.id if self.user else None),
                "username": username or (self.user.username if self.user else None),
                "ip_address": self.ip_address,
                "user_agent": self.user_agent,
                "request_id": get_request_id(),
            })
            return True
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Audit logging failed for {action} {resource_type}:{resource_id}: {e}")
            return False

    # Login events

    def login_success(self, user_id: int, username: str) -> bool:
        return self.log("login_success", "user", user_id, {"username": username, "method": "password"},
                        user_id=user_id, username=username)

    def login_failure(self, username: str, reason: str = "invalid_credentials") -> bool:
        return self.log("login_failure", "user", None, {
            "username": username,
            "reason": reason,
            "failed_at": datetime.utcnow().isoformat(),
        }, username=username)

    def account_locked(self, user_id: int, username: str) -> bool:
        return self.log("account_locked", "user", user_id,
                        {"username": username, "reason": "too_many_failed_attempts"},
                        user_id=user_id, username=username)

    def logout(self) -> bool:
        return self.log("logout", "user", self.user.id if self.user else None)

    # Client access

    def view_client(self, client_id: int, client_name: Optional[str] = None) -> bool:
        return self.log("view_client", "client", client_id, {"client_name": client_name})

    def search_clients(self, search_term: str, result_count: int) -> bool:
        return self.log("search_clients", "client", None, {
            "search_term": search_term,
            "result_count": result_count,
        })

    def create_client(self, client_id: int, client_name: str) -> bool:
        return self.log("create_client", "client", client_id, {"client_name": client_name})

    def edit_demographics(self, client_id: int, changed_fields: List[str]) -> bool:
        return self.log("edit_demographics", "client", client_id, {"changed_fields": changed_fields})

    # Clinical notes

    def create_note(self, note_id: int, client_id: int, note_type: str) -> bool:
        return self.log("create_note", "note", note_id, {"client_id": client_id, "note_type": note_type})

    def view_note(self, note_id: int, client_id: int) -> bool:
        return self.log("view_note", "note", note_id, {"client_id": client_id})

    def edit_note(self, note_id: int, client_id: int, change_type: Optional[str] = None) -> bool:
        return self.log("edit_note", "note", note_id, {"client_id": client_id, "change_type": change_type})

    def sign_note(self, note_id: int, client_id: int, is_supervisor: bool = False) -> bool:
        return self.log(
            "supervisor_sign_note" if is_supervisor else "sign_note",
            "note",
            note_id,
            {"client_id": client_id, "signed_at": datetime.utcnow().isoformat()},
        )

    def create_addendum(self, addendum_id: int, note_id: int, client_id: int) -> bool:
        return self.log("create_addendum", "addendum", addendum_id, {"note_id": note_id, "client_id": client_id})

    def delete_note(self, note_id: int, client_id: int, reason: str) -> bool:
        return self.log("delete_note", "note", note_id, {"client_id": client_id, "reason": reason})

    # Documents / exports

    def upload_document(self, document_id: int, client_id: int, file_name: str) -> bool:
        return self.log("upload_document", "document", document_id, {"client_id": client_id, "file_name": file_name})

    def delete_document(self, document_id: int, client_id: int) -> bool:
        return self.log("delete_document", "document", document_id, {"client_id": client_id})

    def export(self, export_type: str, client_id: Optional[int] = None, filters: Optional[Dict[str, Any]] = None) -> bool:
        return self.log("export", export_type, client_id, {"filters": filters})

    # User administration

    def create_user(self, new_user_id: int, username: str, user_type: str) -> bool:
        return self.log("create_user", "user", new_user_id, {"username": username, "user_type": user_type})

    def edit_user(self, target_user_id: int, changed_fields: List[str]) -> bool:
        return self.log("edit_user", "user", target_user_id, {"changed_fields": changed_fields})


class AuditLogService:
    """Read side of the audit trail (admin viewer)"""

    def __init__(self, db):
        self.db = db
        self.repo = AuditLogRepository(db)

    def search(self, page: int = 1, limit: int = 50, **filters):
        skip = (page - 1) * limit
        return self.repo.search(skip=skip, limit=limit, **filters)

    def actions(self) -> List[str]:
        return self.repo.distinct_actions()
