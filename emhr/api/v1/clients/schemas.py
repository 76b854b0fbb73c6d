from pydantic import Field
from typing import Optional, List, Dict
from datetime import date, datetime
from decimal import Decimal

from emhr.api.v1.common import CamelModel
from emhr.domain.clients.models import CareTeamStatus, CareTeamRole
from emhr.domain.insurance.models import CoverageType


class ClientBase(CamelModel):
    mname: Optional[str] = Field(None, max_length=100)
    preferred_name: Optional[str] = Field(None, max_length=100)
    sex: Optional[str] = Field(None, max_length=20)
    gender_identity: Optional[str] = Field(None, max_length=50)
    pronouns: Optional[str] = Field(None, max_length=30)
    phone_cell: Optional[str] = Field(None, max_length=30)
    phone_home: Optional[str] = Field(None, max_length=30)
    email: Optional[str] = Field(None, max_length=255)
    street: Optional[str] = Field(None, max_length=255)
    city: Optional[str] = Field(None, max_length=100)
    state: Optional[str] = Field(None, max_length=50)
    postal_code: Optional[str] = Field(None, max_length=20)
    emergency_contact_name: Optional[str] = Field(None, max_length=200)
    emergency_contact_phone: Optional[str] = Field(None, max_length=30)
    emergency_contact_relationship: Optional[str] = Field(None, max_length=50)


class ClientCreate(ClientBase):
    """Schema for creating a client. Required fields are checked by the service."""
    fname: Optional[str] = Field(None, max_length=100)
    lname: Optional[str] = Field(None, max_length=100)
    dob: Optional[date] = None
    ssn: Optional[str] = Field(None, max_length=11)
    care_team_status: CareTeamStatus = CareTeamStatus.ACTIVE


class ClientUpdate(ClientBase):
    fname: Optional[str] = Field(None, max_length=100)
    lname: Optional[str] = Field(None, max_length=100)
    dob: Optional[date] = None
    ssn: Optional[str] = Field(None, max_length=11)
    care_team_status: Optional[CareTeamStatus] = None


class ClientResponse(ClientBase):
    id: int
    fname: str
    lname: str
    full_name: str
    dob: date
    age: int
    care_team_status: CareTeamStatus
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ClientListResponse(CamelModel):
    success: bool = True
    clients: List[ClientResponse]
    count: int


class ClientCreatedResponse(CamelModel):
    success: bool = True
    client_id: int
    message: str


class CareTeamMember(CamelModel):
    id: int
    provider_id: int
    provider_name: Optional[str] = None
    role: CareTeamRole
    assigned_at: date
    ended_at: Optional[date] = None


class CareTeamAssign(CamelModel):
    provider_id: int
    role: CareTeamRole = CareTeamRole.CLINICIAN


class CareTeamResponse(CamelModel):
    success: bool = True
    care_team: List[CareTeamMember]


class ClientInsuranceSummary(CamelModel):
    id: int
    coverage_type: CoverageType
    provider_id: int
    provider_name: Optional[str] = None
    policy_number: Optional[str] = None
    group_number: Optional[str] = None
    copay: Optional[Decimal] = None


class ClientDetail(ClientResponse):
    ssn_masked: Optional[str] = None


class ClientDetailResponse(CamelModel):
    success: bool = True
    client: ClientDetail
    care_team: List[CareTeamMember]
    insurances: List[ClientInsuranceSummary]
    counts: Dict[str, int]


class ClientStatsResponse(CamelModel):
    success: bool = True
    total_clients: int
    active_clients: int
    inactive_clients: int
    discharged_clients: int
    today_appointments: int
    new_clients_this_month: int
