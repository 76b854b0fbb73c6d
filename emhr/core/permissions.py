from typing import List, Optional
from datetime import date
from sqlalchemy import or_

from emhr.core.exceptions import AuthorizationError
from emhr.domain.auth.models import User, UserType, UserSupervisor
from emhr.domain.clients.models import ClientProvider


def active_on(column, as_of: Optional[date] = None):
    """``ended_at`` style filter: open-ended or ending after ``as_of``"""
    as_of = as_of or date.today()
    return or_(column.is_(None), column > as_of)


class PermissionChecker:
    """Role and care-team based access checks for one user"""

    def __init__(self, db, user: Optional[User]):
        self.db = db
        self.user = user

    # Roles

    @property
    def is_admin(self) -> bool:
        return bool(self.user) and self.user.user_type == UserType.ADMIN

    @property
    def is_supervisor(self) -> bool:
        return bool(self.user) and bool(self.user.is_supervisor)

    @property
    def is_social_worker(self) -> bool:
        return bool(self.user) and (
            bool(self.user.is_social_worker) or self.user.user_type == UserType.SOCIAL_WORKER
        )

    @property
    def is_provider(self) -> bool:
        return bool(self.user) and bool(self.user.is_provider)

    @property
    def is_social_worker_only(self) -> bool:
        return self.is_social_worker and not self.is_provider

    # Care team lookups

    def is_assigned_to_client(self, user_id: int, client_id: int) -> bool:
        return self.db.query(ClientProvider.id).filter(
            ClientProvider.provider_id == user_id,
            ClientProvider.client_id == client_id,
            active_on(ClientProvider.ended_at)
        ).first() is not None

    def get_supervisee_ids(self, supervisor_id: Optional[int] = None) -> List[int]:
        supervisor_id = supervisor_id or (self.user.id if self.user else None)
        if supervisor_id is None:
            return []
        rows = self.db.query(UserSupervisor.user_id).filter(
            UserSupervisor.supervisor_id == supervisor_id,
            active_on(UserSupervisor.ended_at)
        ).all()
        return [row.user_id for row in rows]

    # Client access

    def can_access_client(self, client_id: int) -> bool:
        if not self.user:
            return False
        if self.is_admin:
            return True
        if self.is_assigned_to_client(self.user.id, client_id):
            return True
        if self.is_supervisor:
            for supervisee_id in self.get_supervisee_ids():
                if self.is_assigned_to_client(supervisee_id, client_id):
                    return True
        return False

    def can_view_clinical_notes(self, client_id: int) -> bool:
        if not self.user:
            return False
        if self.is_admin:
            return True
        if not self.can_access_client(client_id):
            return False
        # Social workers see case management only
        return not self.is_social_worker_only

    def can_create_clinical_notes(self, client_id: int) -> bool:
        if not self.user:
            return False
        if not self.can_access_client(client_id):
            return False
        if self.is_admin:
            return True
        if self.is_social_worker_only:
            return False
        return self.is_provider

    def can_edit_demographics(self, client_id: int) -> bool:
        if not self.user:
            return False
        if self.is_admin:
            return True
        return self.can_access_client(client_id)

    def get_accessible_client_ids(self) -> Optional[List[int]]:
        """Client ids the user may see; ``None`` means all clients"""
        if not self.user:
            return []
        if self.is_admin:
            return None

        provider_ids = [self.user.id]
        if self.is_supervisor:
            provider_ids.extend(self.get_supervisee_ids())

        rows = self.db.query(ClientProvider.client_id).filter(
            ClientProvider.provider_id.in_(provider_ids),
            active_on(ClientProvider.ended_at)
        ).distinct().all()
        return sorted({row.client_id for row in rows})

    def client_access_filter(self, client_id_column):
        """SQL expression restricting ``client_id_column`` to accessible clients"""
        client_ids = self.get_accessible_client_ids()
        if client_ids is None:
            return None
        return client_id_column.in_(client_ids)

    def get_access_denied_message(self) -> str:
        if self.is_social_worker_only:
            return "Access denied - clinical notes are restricted to clinical staff"
        return "Access denied - you are not assigned to this client's care team"

    # Raising variants used by services

    def ensure_client_access(self, client_id: int):
        if not self.can_access_client(client_id):
            raise AuthorizationError(self.get_access_denied_message())

    def ensure_can_view_notes(self, client_id: int):
        if not self.can_view_clinical_notes(client_id):
            raise AuthorizationError(self.get_access_denied_message())

    def ensure_can_create_notes(self, client_id: int):
        if not self.can_create_clinical_notes(client_id):
            raise AuthorizationError(self.get_access_denied_message())

    def ensure_can_edit_demographics(self, client_id: int):
        if not self.can_edit_demographics(client_id):
            raise AuthorizationError(self.get_access_denied_message())

    def ensure_admin(self):
        if not self.is_admin:
            raise AuthorizationError("Access denied - administrator role required")
