from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import Optional

from emhr.domain.auth.models import User
from emhr.domain.billing.service import CptCodeService, BillingModifierService, ClientBillingService
from emhr.api.deps import get_current_user, require_admin
from emhr.api.v1.common import SuccessResponse
from emhr.api.v1.billing.schemas import (
    CptCodeCreate,
    CptCodeUpdate,
    CptCodeResponse,
    CptCodeListResponse,
    ModifierCreate,
    ModifierUpdate,
    ModifierResponse,
    ModifierListResponse,
    ChargeCreate,
    ChargeResponse,
    PaymentCreate,
    PaymentResponse,
    BillingSummaryResponse,
)
from emhr.infrastructure.database import get_db

router = APIRouter(prefix="/billing", tags=["Billing"])


# ==================== CPT Code Endpoints ====================

@router.get("/cpt-codes", response_model=CptCodeListResponse)
def list_cpt_codes(
    category: Optional[str] = None,
    include_inactive: bool = Query(False, alias="includeInactive"),
    search: Optional[str] = None,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    codes = CptCodeService(db, current_user).list_codes(
        category=category, include_inactive=include_inactive, search=search
    )
    return CptCodeListResponse(cpt_codes=codes, count=len(codes))


@router.post("/cpt-codes", response_model=CptCodeResponse, status_code=status.HTTP_201_CREATED)
def create_cpt_code(
    code_data: CptCodeCreate,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    return CptCodeService(db, current_user).create_code(code_data.model_dump())


@router.put("/cpt-codes/{code_id}", response_model=CptCodeResponse)
def update_cpt_code(
    code_id: int,
    code_data: CptCodeUpdate,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    return CptCodeService(db, current_user).update_code(code_id, code_data.model_dump(exclude_unset=True))


@router.delete("/cpt-codes/{code_id}", response_model=SuccessResponse)
def delete_cpt_code(
    code_id: int,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    CptCodeService(db, current_user).delete_code(code_id)
    return SuccessResponse(message="CPT code deleted successfully")


# ==================== Modifier Endpoints ====================

@router.get("/modifiers", response_model=ModifierListResponse)
def list_modifiers(
    include_inactive: bool = Query(False, alias="includeInactive"),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    modifiers = BillingModifierService(db, current_user).list_modifiers(include_inactive=include_inactive)
    return ModifierListResponse(modifiers=modifiers, count=len(modifiers))


@router.post("/modifiers", response_model=ModifierResponse, status_code=status.HTTP_201_CREATED)
def create_modifier(
    modifier_data: ModifierCreate,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    return BillingModifierService(db, current_user).create_modifier(modifier_data.model_dump())


@router.put("/modifiers/{modifier_id}", response_model=ModifierResponse)
def update_modifier(
    modifier_id: int,
    modifier_data: ModifierUpdate,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    return BillingModifierService(db, current_user).update_modifier(
        modifier_id, modifier_data.model_dump(exclude_unset=True)
    )


@router.delete("/modifiers/{modifier_id}", response_model=SuccessResponse)
def delete_modifier(
    modifier_id: int,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Delete a modifier that no charge references"""
    BillingModifierService(db, current_user).delete_modifier(modifier_id)
    return SuccessResponse(message="Modifier deleted successfully")


# ==================== Client Ledger Endpoints ====================

@router.get("/clients/{patient_id}", response_model=BillingSummaryResponse)
def get_billing_summary(
    patient_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Charges, payments and balance for a client"""
    summary = ClientBillingService(db, current_user).get_summary(patient_id)
    return BillingSummaryResponse(patient_id=patient_id, **summary)


@router.post("/clients/{patient_id}/charges", response_model=ChargeResponse, status_code=status.HTTP_201_CREATED)
def post_charge(
    patient_id: int,
    charge_data: ChargeCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return ClientBillingService(db, current_user).post_charge(patient_id, charge_data.model_dump())


@router.post("/clients/{patient_id}/payments", response_model=PaymentResponse, status_code=status.HTTP_201_CREATED)
def post_payment(
    patient_id: int,
    payment_data: PaymentCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return ClientBillingService(db, current_user).post_payment(patient_id, payment_data.model_dump())
