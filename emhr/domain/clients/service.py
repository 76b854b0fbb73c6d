"""
Client Service Layer

Business logic for client records, care team assignment and caseload
statistics. Every read is filtered by the caller's care-team access.
"""

from typing import Optional, List, Dict, Any
from datetime import date, datetime
import logging

from emhr.core.exceptions import ConflictError, NotFoundError, ValidationError
from emhr.core.permissions import PermissionChecker
from emhr.domain.audit.service import AuditLogger
from emhr.domain.auth.models import User
from emhr.domain.auth.repository import UserRepository
from emhr.domain.clients.models import Client, ClientProvider, CareTeamRole, CareTeamStatus
from emhr.domain.clients.repository import ClientRepository, CareTeamRepository
from emhr.domain.documents.models import ClientDocument
from emhr.domain.insurance.models import ClientInsurance
from emhr.domain.notes.models import ClinicalNote
from emhr.domain.scheduling.models import Appointment
from emhr.infrastructure.encryption import encrypt_data, decrypt_data, mask_ssn

logger = logging.getLogger(__name__)

DEMOGRAPHIC_FIELDS = {
    "fname", "mname", "lname", "preferred_name", "dob", "sex", "gender_identity", "pronouns",
    "phone_cell", "phone_home", "email", "street", "city", "state", "postal_code",
    "emergency_contact_name", "emergency_contact_phone", "emergency_contact_relationship",
    "care_team_status",
}


class ClientService:
    """Service layer for client management"""

    def __init__(self, db, current_user: User, audit: Optional[AuditLogger] = None):
        self.db = db
        self.current_user = current_user
        self.permissions = PermissionChecker(db, current_user)
        self.client_repo = ClientRepository(db)
        self.care_team_repo = CareTeamRepository(db)
        self.user_repo = UserRepository(db)
        self.audit = audit or AuditLogger(db, current_user)

    def _access_filter(self):
        return self.permissions.client_access_filter(Client.id)

    def get_client(self, client_id: int) -> Client:
        """Get client by ID, enforcing care-team access"""
        client = self.client_repo.get_by_id(client_id)
        if not client:
            raise NotFoundError("Client not found")
        self.permissions.ensure_client_access(client_id)
        return client

    def list_clients(self, status: Optional[str] = None, search: Optional[str] = None) -> List[Client]:
        status_filter = None
        if status and status.lower() != "all":
            try:
                status_filter = CareTeamStatus(status.lower())
            except ValueError:
                raise ValidationError(f"Invalid status filter: {status}")
        return self.client_repo.get_all(
            access_filter=self._access_filter(),
            status=status_filter,
            search=search
        )

    def search_clients(self, q: str, limit: int = 20) -> List[Client]:
        if not q or len(q.strip()) < 2:
            raise ValidationError("Search term must be at least 2 characters")
        results = self.client_repo.search(q, access_filter=self._access_filter(), limit=limit)
        self.audit.search_clients(q, len(results))
        return results

    def create_client(self, client_data: Dict[str, Any]) -> Client:
        for field, label in (("fname", "First name"), ("lname", "Last name"), ("dob", "Date of birth")):
            if not client_data.get(field):
                raise ValidationError(f"{label} is required")

        if client_data["dob"] > date.today():
            raise ValidationError("Date of birth cannot be in the future")

        ssn = client_data.pop("ssn", None)
        if ssn:
            client_data["ssn_encrypted"] = encrypt_data(ssn)
        client_data["created_by"] = self.current_user.id

        client = self.client_repo.create(client_data)

        # Creating clinician joins the care team so the record stays visible
        if not self.permissions.is_admin and (self.permissions.is_provider or self.permissions.is_social_worker):
            role = CareTeamRole.PRIMARY_CLINICIAN if self.permissions.is_provider else CareTeamRole.SOCIAL_WORKER
            self.care_team_repo.create({
                "client_id": client.id,
                "provider_id": self.current_user.id,
                "role": role,
                "assigned_by": self.current_user.id,
            })

        logger.info(f"Client {client.id} created by user {self.current_user.id}")
        self.audit.create_client(client.id, client.full_name)
        return client

    def get_client_detail(self, client_id: int) -> Dict[str, Any]:
        client = self.get_client(client_id)

        care_team = self.care_team_repo.get_active_for_client(client_id)
        insurances = self.db.query(ClientInsurance).filter(
            ClientInsurance.patient_id == client_id
        ).order_by(ClientInsurance.coverage_type).all()

        counts = {
            "notes": self.db.query(ClinicalNote).filter(ClinicalNote.patient_id == client_id).count(),
            "appointments": self.db.query(Appointment).filter(Appointment.patient_id == client_id).count(),
            "documents": self.db.query(ClientDocument).filter(
                ClientDocument.patient_id == client_id,
                ClientDocument.deleted_at.is_(None)
            ).count(),
        }

        self.audit.view_client(client.id, client.full_name)
        return {
            "client": client,
            "ssn_masked": self.masked_ssn(client),
            "care_team": care_team,
            "insurances": insurances,
            "counts": counts,
        }

    def masked_ssn(self, client: Client) -> Optional[str]:
        return mask_ssn(decrypt_data(client.ssn_encrypted))

    def update_demographics(self, client_id: int, update_data: Dict[str, Any]) -> Client:
        client = self.client_repo.get_by_id(client_id)
        if not client:
            raise NotFoundError("Client not found")
        self.permissions.ensure_can_edit_demographics(client_id)

        changes = {k: v for k, v in update_data.items() if k in DEMOGRAPHIC_FIELDS}
        for required in ("fname", "lname", "dob"):
            if required in changes and not changes[required]:
                raise ValidationError(f"{required} cannot be empty")

        changed_fields = sorted(changes)
        if "ssn" in update_data:
            changes["ssn_encrypted"] = encrypt_data(update_data["ssn"]) if update_data["ssn"] else None
            changed_fields.append("ssn")

        if not changes:
            raise ValidationError("No fields to update")

        client = self.client_repo.update(client, changes)
        self.audit.edit_demographics(client.id, changed_fields)
        return client

    def delete_client(self, client_id: int):
        self.permissions.ensure_admin()
        client = self.client_repo.get_by_id(client_id)
        if not client:
            raise NotFoundError("Client not found")
        self.client_repo.soft_delete(client)
        logger.info(f"Client {client_id} soft-deleted by user {self.current_user.id}")

    def get_stats(self) -> Dict[str, int]:
        access_filter = self._access_filter()
        by_status = self.client_repo.count_by_status(access_filter)
        month_start = datetime.combine(date.today().replace(day=1), datetime.min.time())
        return {
            "total_clients": sum(by_status.values()),
            "active_clients": by_status.get(CareTeamStatus.ACTIVE, 0),
            "inactive_clients": by_status.get(CareTeamStatus.INACTIVE, 0),
            "discharged_clients": by_status.get(CareTeamStatus.DISCHARGED, 0),
            "today_appointments": self.client_repo.count_with_appointments_on(date.today(), access_filter),
            "new_clients_this_month": self.client_repo.count_created_since(month_start, access_filter),
        }

    # Care team

    def get_care_team(self, client_id: int) -> List[ClientProvider]:
        self.get_client(client_id)
        return self.care_team_repo.get_active_for_client(client_id)

    def assign_provider(self, client_id: int, provider_id: int, role: CareTeamRole) -> ClientProvider:
        self.permissions.ensure_admin()
        if not self.client_repo.get_by_id(client_id):
            raise NotFoundError("Client not found")
        provider = self.user_repo.get_by_id(provider_id)
        if not provider or not provider.is_active:
            raise NotFoundError("Provider not found")
        if self.care_team_repo.get_active(client_id, provider_id):
            raise ConflictError("Provider is already assigned to this client")

        return self.care_team_repo.create({
            "client_id": client_id,
            "provider_id": provider_id,
            "role": role,
            "assigned_by": self.current_user.id,
        })

    def end_assignment(self, client_id: int, provider_id: int):
        self.permissions.ensure_admin()
        assignment = self.care_team_repo.get_active(client_id, provider_id)
        if not assignment:
            raise NotFoundError("Care team assignment not found")
        self.care_team_repo.end(assignment, date.today())
