from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import Optional

from emhr.domain.auth.models import User
from emhr.domain.insurance.models import ClientInsurance, CoverageType
from emhr.domain.insurance.service import InsuranceProviderService, ClientInsuranceService
from emhr.api.deps import get_current_user, require_admin
from emhr.api.v1.common import SuccessResponse
from emhr.api.v1.insurance.schemas import (
    InsuranceProviderCreate,
    InsuranceProviderUpdate,
    InsuranceProviderResponse,
    InsuranceProviderListResponse,
    ClientInsuranceUpsert,
    ClientInsuranceResponse,
    ClientInsuranceListResponse,
)
from emhr.infrastructure.database import get_db

router = APIRouter(prefix="/insurance", tags=["Insurance"])


def _insurance_response(insurance: ClientInsurance) -> ClientInsuranceResponse:
    response = ClientInsuranceResponse.model_validate(insurance)
    response.provider_name = insurance.provider.name if insurance.provider else None
    return response


# ==================== Insurance Provider Endpoints ====================

@router.get("/providers", response_model=InsuranceProviderListResponse)
def list_providers(
    include_inactive: bool = Query(False, alias="includeInactive"),
    search: Optional[str] = None,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    providers = InsuranceProviderService(db, current_user).list_providers(
        include_inactive=include_inactive, search=search
    )
    return InsuranceProviderListResponse(providers=providers, count=len(providers))


@router.post("/providers", response_model=InsuranceProviderResponse, status_code=status.HTTP_201_CREATED)
def create_provider(
    provider_data: InsuranceProviderCreate,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    return InsuranceProviderService(db, current_user).create_provider(provider_data.model_dump())


@router.put("/providers/{provider_id}", response_model=InsuranceProviderResponse)
def update_provider(
    provider_id: int,
    provider_data: InsuranceProviderUpdate,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    return InsuranceProviderService(db, current_user).update_provider(
        provider_id, provider_data.model_dump(exclude_unset=True)
    )


@router.delete("/providers/{provider_id}", response_model=SuccessResponse)
def delete_provider(
    provider_id: int,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Delete a payer no client coverage references"""
    InsuranceProviderService(db, current_user).delete_provider(provider_id)
    return SuccessResponse(message="Insurance provider deleted successfully")


# ==================== Client Insurance Endpoints ====================

@router.get("/clients/{patient_id}", response_model=ClientInsuranceListResponse)
def list_client_insurance(
    patient_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    insurances = ClientInsuranceService(db, current_user).list_insurance(patient_id)
    return ClientInsuranceListResponse(
        patient_id=patient_id,
        insurances=[_insurance_response(i) for i in insurances]
    )


@router.put("/clients/{patient_id}/{coverage_type}", response_model=ClientInsuranceResponse)
def upsert_client_insurance(
    patient_id: int,
    coverage_type: CoverageType,
    insurance_data: ClientInsuranceUpsert,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Create or replace the client's primary, secondary or tertiary coverage"""
    insurance = ClientInsuranceService(db, current_user).upsert_insurance(
        patient_id, coverage_type, insurance_data.model_dump()
    )
    return _insurance_response(insurance)
