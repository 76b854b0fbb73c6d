from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import Optional

from emhr.core.exceptions import AuthorizationError
from emhr.domain.auth.models import User, UserSupervisor
from emhr.domain.auth.service import UserService
from emhr.api.deps import get_current_user, require_admin
from emhr.api.v1.common import SuccessResponse
from emhr.api.v1.users.schemas import (
    UserCreate,
    UserUpdate,
    UserListResponse,
    UserDetailResponse,
    SupervisorAssign,
    SupervisionResponse,
    SupervisionListResponse,
)
from emhr.infrastructure.database import get_db

router = APIRouter(prefix="/users", tags=["Users"])


def _supervision_response(link: UserSupervisor) -> SupervisionResponse:
    return SupervisionResponse(
        id=link.id,
        user_id=link.user_id,
        supervisor_id=link.supervisor_id,
        user_name=link.user.full_name if link.user else None,
        supervisor_name=link.supervisor.full_name if link.supervisor else None,
        started_at=link.started_at,
        ended_at=link.ended_at,
    )


# ==================== User Endpoints ====================

@router.get("/", response_model=UserListResponse)
def list_users(
    include_inactive: bool = Query(False, alias="includeInactive"),
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """List staff users (admin only)"""
    users = UserService(db, current_user).list_users(include_inactive=include_inactive)
    return UserListResponse(users=users, count=len(users))


@router.post("/", response_model=UserDetailResponse, status_code=status.HTTP_201_CREATED)
def create_user(
    user_data: UserCreate,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Create a staff user (admin only)"""
    user = UserService(db, current_user).create_user(user_data.model_dump())
    return UserDetailResponse(user=user)


@router.get("/providers", response_model=UserListResponse)
def list_providers(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Active providers, for scheduling and care team pickers"""
    providers = UserService(db, current_user).list_providers()
    return UserListResponse(users=providers, count=len(providers))


@router.get("/supervisees", response_model=SupervisionListResponse)
def list_supervisees(
    supervisor_id: Optional[int] = Query(None, alias="supervisorId"),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """A supervisor's active supervisees; admins may ask for any supervisor"""
    if supervisor_id is None or supervisor_id == current_user.id:
        if not (current_user.is_supervisor or current_user.is_admin):
            raise AuthorizationError("Access denied - supervisor role required")
        supervisor_id = current_user.id
    elif not current_user.is_admin:
        raise AuthorizationError("Only administrators can view other supervisors' supervisees")

    links = UserService(db, current_user).get_supervisees(supervisor_id)
    return SupervisionListResponse(relationships=[_supervision_response(link) for link in links], count=len(links))


@router.put("/{user_id}", response_model=UserDetailResponse)
def update_user(
    user_id: int,
    user_data: UserUpdate,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Update a staff user (admin only)"""
    user = UserService(db, current_user).update_user(user_id, user_data.model_dump(exclude_unset=True))
    return UserDetailResponse(user=user)


# ==================== Supervision Endpoints ====================

@router.get("/{user_id}/supervisors", response_model=SupervisionListResponse)
def list_supervisors(
    user_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Active supervisors of a user"""
    if user_id != current_user.id and not current_user.is_admin:
        raise AuthorizationError("You can only view your own supervisors")
    links = UserService(db, current_user).get_supervisors(user_id)
    return SupervisionListResponse(relationships=[_supervision_response(link) for link in links], count=len(links))


@router.post("/{user_id}/supervisors", response_model=SupervisionResponse, status_code=status.HTTP_201_CREATED)
def assign_supervisor(
    user_id: int,
    assignment: SupervisorAssign,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Assign a supervisor to a user (admin only)"""
    link = UserService(db, current_user).assign_supervisor(user_id, assignment.supervisor_id)
    return _supervision_response(link)


@router.delete("/{user_id}/supervisors/{supervisor_id}", response_model=SuccessResponse)
def end_supervision(
    user_id: int,
    supervisor_id: int,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """End a supervision relationship (admin only)"""
    UserService(db, current_user).end_supervision(user_id, supervisor_id)
    return SuccessResponse(message="Supervision relationship ended")
