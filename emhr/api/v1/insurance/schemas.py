from pydantic import Field
from typing import Optional, List
from datetime import date, datetime
from decimal import Decimal

from emhr.api.v1.common import CamelModel
from emhr.domain.insurance.models import CoverageType


class InsuranceProviderBase(CamelModel):
    payer_id: Optional[str] = Field(None, max_length=50)
    phone: Optional[str] = Field(None, max_length=30)
    fax: Optional[str] = Field(None, max_length=30)
    email: Optional[str] = Field(None, max_length=255)
    website: Optional[str] = Field(None, max_length=255)
    address_line1: Optional[str] = Field(None, max_length=255)
    address_line2: Optional[str] = Field(None, max_length=255)
    city: Optional[str] = Field(None, max_length=100)
    state: Optional[str] = Field(None, max_length=50)
    zip: Optional[str] = Field(None, max_length=20)
    claims_address: Optional[str] = Field(None, max_length=255)
    claims_phone: Optional[str] = Field(None, max_length=30)
    claims_email: Optional[str] = Field(None, max_length=255)


class InsuranceProviderCreate(InsuranceProviderBase):
    name: str = Field(..., min_length=1, max_length=255)
    insurance_type: str = Field("commercial", max_length=30)
    is_active: bool = True


class InsuranceProviderUpdate(InsuranceProviderBase):
    name: Optional[str] = Field(None, max_length=255)
    insurance_type: Optional[str] = Field(None, max_length=30)
    is_active: Optional[bool] = None


class InsuranceProviderResponse(InsuranceProviderBase):
    id: int
    name: str
    insurance_type: str
    is_active: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class InsuranceProviderListResponse(CamelModel):
    success: bool = True
    providers: List[InsuranceProviderResponse]
    count: int


class ClientInsuranceUpsert(CamelModel):
    provider_id: int
    policy_number: Optional[str] = Field(None, max_length=100)
    group_number: Optional[str] = Field(None, max_length=100)
    subscriber_fname: Optional[str] = Field(None, max_length=100)
    subscriber_lname: Optional[str] = Field(None, max_length=100)
    subscriber_dob: Optional[date] = None
    subscriber_relationship: Optional[str] = Field("self", max_length=30)
    effective_date: Optional[date] = None
    end_date: Optional[date] = None
    copay: Optional[Decimal] = Field(None, ge=0)


class ClientInsuranceResponse(ClientInsuranceUpsert):
    id: int
    patient_id: int
    coverage_type: CoverageType
    provider_name: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ClientInsuranceListResponse(CamelModel):
    success: bool = True
    patient_id: int
    insurances: List[ClientInsuranceResponse]
