"""
Insurance Service Layer

Payer administration and client coverage (primary, secondary, tertiary).
"""

from typing import Optional, List, Dict, Any
import logging

from emhr.core.exceptions import ConflictError, NotFoundError, ValidationError
from emhr.core.permissions import PermissionChecker
from emhr.domain.auth.models import User
from emhr.domain.clients.repository import ClientRepository
from emhr.domain.insurance.models import InsuranceProvider, ClientInsurance, CoverageType
from emhr.domain.insurance.repository import InsuranceProviderRepository, ClientInsuranceRepository

logger = logging.getLogger(__name__)


class InsuranceProviderService:
    """Service layer for insurance payers"""

    def __init__(self, db, current_user: Optional[User] = None):
        self.db = db
        self.current_user = current_user
        self.repo = InsuranceProviderRepository(db)

    def list_providers(self, include_inactive: bool = False, search: Optional[str] = None) -> List[InsuranceProvider]:
        return self.repo.get_all(include_inactive=include_inactive, search=search)

    def get_provider(self, provider_id: int) -> InsuranceProvider:
        provider = self.repo.get_by_id(provider_id)
        if not provider:
            raise NotFoundError("Insurance provider not found")
        return provider

    def create_provider(self, provider_data: Dict[str, Any]) -> InsuranceProvider:
        name = (provider_data.get("name") or "").strip()
        if not name:
            raise ValidationError("Provider name is required")
        if self.repo.get_by_name(name):
            raise ConflictError(f"Insurance provider '{name}' already exists")

        provider_data["name"] = name
        provider = self.repo.create(provider_data)
        logger.info(f"Insurance provider {provider.id} created: {name}")
        return provider

    def update_provider(self, provider_id: int, update_data: Dict[str, Any]) -> InsuranceProvider:
        provider = self.get_provider(provider_id)
        if "name" in update_data:
            name = (update_data["name"] or "").strip()
            if not name:
                raise ValidationError("Provider name cannot be empty")
            existing = self.repo.get_by_name(name)
            if existing and existing.id != provider.id:
                raise ConflictError(f"Insurance provider '{name}' already exists")
            update_data["name"] = name
        return self.repo.update(provider, update_data)

    def delete_provider(self, provider_id: int):
        provider = self.get_provider(provider_id)
        if self.repo.is_referenced(provider.id):
            raise ConflictError("Insurance provider is assigned to clients and cannot be deleted")
        self.repo.delete(provider)


class ClientInsuranceService:
    """Service layer for a client's coverage"""

    def __init__(self, db, current_user: User):
        self.db = db
        self.current_user = current_user
        self.permissions = PermissionChecker(db, current_user)
        self.repo = ClientInsuranceRepository(db)
        self.provider_repo = InsuranceProviderRepository(db)

    def _ensure_client(self, patient_id: int):
        if not ClientRepository(self.db).get_by_id(patient_id):
            raise NotFoundError("Client not found")
        self.permissions.ensure_client_access(patient_id)

    def list_insurance(self, patient_id: int) -> List[ClientInsurance]:
        self._ensure_client(patient_id)
        return self.repo.get_for_patient(patient_id)

    def upsert_insurance(self, patient_id: int, coverage_type: CoverageType, data: Dict[str, Any]) -> ClientInsurance:
        """Create or replace the client's coverage of the given type"""
        self._ensure_client(patient_id)

        provider_id = data.get("provider_id")
        if not provider_id:
            raise ValidationError("Insurance provider is required")
        if not self.provider_repo.get_by_id(provider_id):
            raise NotFoundError("Insurance provider not found")

        effective_date, end_date = data.get("effective_date"), data.get("end_date")
        if effective_date and end_date and end_date < effective_date:
            raise ValidationError("End date cannot be before the effective date")

        insurance = self.repo.get_by_type(patient_id, coverage_type)
        if insurance is None:
            insurance = ClientInsurance(patient_id=patient_id, coverage_type=coverage_type)
        for field, value in data.items():
            setattr(insurance, field, value)

        insurance = self.repo.save(insurance)
        logger.info(f"{coverage_type.value} insurance saved for client {patient_id}")
        return insurance
