from pydantic import Field
from typing import Optional, List
from datetime import date, datetime
from decimal import Decimal

from emhr.api.v1.common import CamelModel


# CPT code schemas

class CptCodeCreate(CamelModel):
    code: str = Field(..., min_length=1, max_length=10)
    category: str = Field(..., min_length=1, max_length=50)
    type: Optional[str] = Field(None, max_length=50)
    description: str = Field(..., min_length=1)
    standard_duration_minutes: Optional[int] = Field(None, ge=0)
    standard_fee: Optional[Decimal] = Field(None, ge=0)
    is_active: bool = True
    is_addon: bool = False
    requires_primary_code: bool = False
    sort_order: int = 0


class CptCodeUpdate(CamelModel):
    code: Optional[str] = Field(None, max_length=10)
    category: Optional[str] = Field(None, max_length=50)
    type: Optional[str] = Field(None, max_length=50)
    description: Optional[str] = None
    standard_duration_minutes: Optional[int] = Field(None, ge=0)
    standard_fee: Optional[Decimal] = Field(None, ge=0)
    is_active: Optional[bool] = None
    is_addon: Optional[bool] = None
    requires_primary_code: Optional[bool] = None
    sort_order: Optional[int] = None


class CptCodeResponse(CamelModel):
    id: int
    code: str
    category: str
    type: Optional[str] = None
    description: str
    standard_duration_minutes: Optional[int] = None
    standard_fee: Optional[Decimal] = None
    is_active: bool
    is_addon: bool
    requires_primary_code: bool
    sort_order: Optional[int] = None


class CptCodeListResponse(CamelModel):
    success: bool = True
    cpt_codes: List[CptCodeResponse]
    count: int


# Modifier schemas

class ModifierCreate(CamelModel):
    code: str = Field(..., min_length=1, max_length=5)
    description: str = Field(..., min_length=1, max_length=255)
    modifier_type: Optional[str] = Field(None, max_length=50)
    is_active: bool = True
    sort_order: int = 0


class ModifierUpdate(CamelModel):
    code: Optional[str] = Field(None, max_length=5)
    description: Optional[str] = Field(None, max_length=255)
    modifier_type: Optional[str] = Field(None, max_length=50)
    is_active: Optional[bool] = None
    sort_order: Optional[int] = None


class ModifierResponse(CamelModel):
    id: int
    code: str
    description: str
    modifier_type: Optional[str] = None
    is_active: bool
    sort_order: Optional[int] = None


class ModifierListResponse(CamelModel):
    success: bool = True
    modifiers: List[ModifierResponse]
    count: int


# Client ledger schemas

class ChargeCreate(CamelModel):
    service_date: Optional[date] = None
    code_type: str = Field("CPT4", max_length=15)
    code: str = Field(..., min_length=1, max_length=20)
    modifier: Optional[str] = Field(None, max_length=12)
    units: int = Field(1, ge=1)
    fee: Optional[Decimal] = Field(None, ge=0)
    justify: Optional[str] = Field(None, max_length=255)
    note_id: Optional[int] = None
    appointment_id: Optional[int] = None


class ChargeResponse(CamelModel):
    id: int
    patient_id: int
    service_date: date
    code_type: str
    code: str
    modifier: Optional[str] = None
    units: int
    fee: Decimal
    total: Decimal
    justify: Optional[str] = None
    note_id: Optional[int] = None
    appointment_id: Optional[int] = None
    posted_by: Optional[int] = None
    created_at: Optional[datetime] = None


class PaymentCreate(CamelModel):
    payment_date: Optional[date] = None
    amount: Decimal = Field(..., gt=0)
    method: str = Field("cash", max_length=30)
    reference: Optional[str] = Field(None, max_length=100)
    memo: Optional[str] = None


class PaymentResponse(CamelModel):
    id: int
    patient_id: int
    payment_date: date
    amount: Decimal
    method: str
    reference: Optional[str] = None
    memo: Optional[str] = None
    posted_by: Optional[int] = None
    created_at: Optional[datetime] = None


class BillingSummaryResponse(CamelModel):
    success: bool = True
    patient_id: int
    charges: List[ChargeResponse]
    payments: List[PaymentResponse]
    total_charges: Decimal
    total_payments: Decimal
    balance: Decimal
    charge_count: int
    payment_count: int
