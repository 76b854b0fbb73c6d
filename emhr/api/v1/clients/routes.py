from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import Optional

from emhr.domain.audit.service import AuditLogger
from emhr.domain.auth.models import User
from emhr.domain.clients.models import Client, ClientProvider
from emhr.domain.clients.service import ClientService
from emhr.api.deps import get_current_user, get_audit_logger
from emhr.api.v1.common import SuccessResponse
from emhr.api.v1.clients.schemas import (
    ClientCreate,
    ClientUpdate,
    ClientResponse,
    ClientListResponse,
    ClientCreatedResponse,
    ClientDetail,
    ClientDetailResponse,
    ClientStatsResponse,
    ClientInsuranceSummary,
    CareTeamAssign,
    CareTeamMember,
    CareTeamResponse,
)
from emhr.infrastructure.database import get_db

router = APIRouter(prefix="/clients", tags=["Clients"])


def _client_response(client: Client) -> ClientResponse:
    return ClientResponse.model_validate({
        **{field: getattr(client, field) for field in ClientResponse.model_fields if field != "age"},
        "age": client.age(),
    })


def _care_team_member(member: ClientProvider) -> CareTeamMember:
    return CareTeamMember(
        id=member.id,
        provider_id=member.provider_id,
        provider_name=member.provider.full_name if member.provider else None,
        role=member.role,
        assigned_at=member.assigned_at,
        ended_at=member.ended_at,
    )


# ==================== Client Endpoints ====================

@router.get("/", response_model=ClientListResponse)
def list_clients(
    status_filter: Optional[str] = Query(None, alias="status"),
    search: Optional[str] = None,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Clients on the caller's caseload"""
    clients = ClientService(db, current_user).list_clients(status=status_filter, search=search)
    return ClientListResponse(clients=[_client_response(c) for c in clients], count=len(clients))


@router.get("/search", response_model=ClientListResponse)
def search_clients(
    q: str = Query(""),
    current_user: User = Depends(get_current_user),
    audit: AuditLogger = Depends(get_audit_logger),
    db: Session = Depends(get_db)
):
    """Quick search by name, date of birth or phone"""
    clients = ClientService(db, current_user, audit).search_clients(q)
    return ClientListResponse(clients=[_client_response(c) for c in clients], count=len(clients))


@router.get("/stats", response_model=ClientStatsResponse)
def client_stats(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Caseload statistics for the dashboard"""
    return ClientStatsResponse(**ClientService(db, current_user).get_stats())


@router.post("/", response_model=ClientCreatedResponse, status_code=status.HTTP_201_CREATED)
def create_client(
    client_data: ClientCreate,
    current_user: User = Depends(get_current_user),
    audit: AuditLogger = Depends(get_audit_logger),
    db: Session = Depends(get_db)
):
    """Register a new client"""
    client = ClientService(db, current_user, audit).create_client(client_data.model_dump(exclude_none=True))
    return ClientCreatedResponse(client_id=client.id, message="Client created successfully")


@router.get("/{client_id}", response_model=ClientDetailResponse)
def get_client(
    client_id: int,
    current_user: User = Depends(get_current_user),
    audit: AuditLogger = Depends(get_audit_logger),
    db: Session = Depends(get_db)
):
    """Client demographics with care team, insurance and record counts"""
    detail = ClientService(db, current_user, audit).get_client_detail(client_id)
    client = ClientDetail(**_client_response(detail["client"]).model_dump(), ssn_masked=detail["ssn_masked"])

    return ClientDetailResponse(
        client=client,
        care_team=[_care_team_member(m) for m in detail["care_team"]],
        insurances=[
            ClientInsuranceSummary(
                id=ins.id,
                coverage_type=ins.coverage_type,
                provider_id=ins.provider_id,
                provider_name=ins.provider.name if ins.provider else None,
                policy_number=ins.policy_number,
                group_number=ins.group_number,
                copay=ins.copay,
            )
            for ins in detail["insurances"]
        ],
        counts=detail["counts"],
    )


@router.put("/{client_id}", response_model=ClientResponse)
def update_client(
    client_id: int,
    client_data: ClientUpdate,
    current_user: User = Depends(get_current_user),
    audit: AuditLogger = Depends(get_audit_logger),
    db: Session = Depends(get_db)
):
    """Update demographics"""
    client = ClientService(db, current_user, audit).update_demographics(
        client_id, client_data.model_dump(exclude_unset=True)
    )
    return _client_response(client)


@router.delete("/{client_id}", response_model=SuccessResponse)
def delete_client(
    client_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Soft delete a client (admin only)"""
    ClientService(db, current_user).delete_client(client_id)
    return SuccessResponse(message="Client deleted successfully")


# ==================== Care Team Endpoints ====================

@router.get("/{client_id}/care-team", response_model=CareTeamResponse)
def get_care_team(
    client_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    members = ClientService(db, current_user).get_care_team(client_id)
    return CareTeamResponse(care_team=[_care_team_member(m) for m in members])


@router.post("/{client_id}/care-team", response_model=CareTeamMember, status_code=status.HTTP_201_CREATED)
def assign_care_team_member(
    client_id: int,
    assignment: CareTeamAssign,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Assign a provider to the client's care team (admin only)"""
    member = ClientService(db, current_user).assign_provider(client_id, assignment.provider_id, assignment.role)
    return _care_team_member(member)


@router.delete("/{client_id}/care-team/{provider_id}", response_model=SuccessResponse)
def end_care_team_assignment(
    client_id: int,
    provider_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """End a care team assignment (admin only)"""
    ClientService(db, current_user).end_assignment(client_id, provider_id)
    return SuccessResponse(message="Care team assignment ended")
