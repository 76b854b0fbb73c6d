from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import Optional

from emhr.domain.auth.models import User
from emhr.domain.treatment.models import GoalStatus
from emhr.domain.treatment.service import TreatmentGoalService, InterventionService
from emhr.api.deps import get_current_user, require_admin
from emhr.api.v1.treatment.schemas import (
    GoalCreate,
    GoalStatusUpdate,
    GoalResponse,
    GoalListResponse,
    InterventionCreate,
    InterventionResponse,
    InterventionLibraryResponse,
    FavoriteToggleResponse,
)
from emhr.infrastructure.database import get_db

router = APIRouter(tags=["Treatment Planning"])


# ==================== Treatment Goal Endpoints ====================

@router.get("/treatment-goals", response_model=GoalListResponse)
def list_goals(
    patient_id: int = Query(..., alias="patientId"),
    goal_status: Optional[GoalStatus] = Query(None, alias="status"),
    include_all: bool = Query(False, alias="includeAll"),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Active goals by default; includeAll returns every status in display order"""
    result = TreatmentGoalService(db, current_user).list_goals(
        patient_id, status=goal_status, include_all=include_all
    )
    return GoalListResponse(**result)


@router.post("/treatment-goals", response_model=GoalResponse, status_code=status.HTTP_201_CREATED)
def create_goal(
    goal_data: GoalCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return TreatmentGoalService(db, current_user).create_goal(goal_data.patient_id, goal_data.model_dump())


@router.patch("/treatment-goals/{goal_id}", response_model=GoalResponse)
def update_goal_status(
    goal_id: int,
    status_data: GoalStatusUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return TreatmentGoalService(db, current_user).update_status(goal_id, status_data.status)


# ==================== Intervention Library Endpoints ====================

@router.get("/interventions", response_model=InterventionLibraryResponse)
def get_interventions(
    tier: Optional[int] = Query(None),
    modality: Optional[str] = Query(None),
    include_inactive: bool = Query(False, alias="includeInactive"),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    result = InterventionService(db, current_user).get_library(
        tier=tier, modality=modality, include_inactive=include_inactive
    )
    return InterventionLibraryResponse(**result)


@router.post("/interventions", response_model=InterventionResponse, status_code=status.HTTP_201_CREATED)
def create_intervention(
    intervention_data: InterventionCreate,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    return InterventionService(db, current_user).create_intervention(intervention_data.model_dump())


@router.post("/interventions/{intervention_id}/favorite", response_model=FavoriteToggleResponse)
def toggle_favorite(
    intervention_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Add or remove the intervention from the caller's favorites"""
    is_favorite = InterventionService(db, current_user).toggle_favorite(intervention_id)
    return FavoriteToggleResponse(intervention_id=intervention_id, is_favorite=is_favorite)
