from pydantic import Field
from typing import Optional, List, Dict
from datetime import date, datetime

from emhr.api.v1.common import CamelModel
from emhr.domain.treatment.models import GoalStatus


class GoalCreate(CamelModel):
    patient_id: int
    goal_text: str = Field(..., min_length=1)
    goal_category: Optional[str] = Field(None, max_length=100)
    target_date: Optional[date] = None


class GoalStatusUpdate(CamelModel):
    status: GoalStatus


class GoalResponse(CamelModel):
    id: int
    patient_id: int
    goal_text: str
    goal_category: Optional[str] = None
    target_date: Optional[date] = None
    status: GoalStatus
    achieved_at: Optional[datetime] = None
    created_by: Optional[int] = None
    created_at: Optional[datetime] = None


class GoalListResponse(CamelModel):
    success: bool = True
    goals: List[GoalResponse]
    grouped: Dict[str, List[GoalResponse]]
    active_count: int


class InterventionCreate(CamelModel):
    intervention_name: str = Field(..., min_length=1, max_length=200)
    intervention_tier: int = Field(..., ge=1, le=4)
    modality: Optional[str] = Field(None, max_length=100)
    description: Optional[str] = None
    sort_order: int = 0


class InterventionResponse(CamelModel):
    id: int
    intervention_name: str
    intervention_tier: int
    modality: Optional[str] = None
    description: Optional[str] = None
    is_active: bool
    sort_order: Optional[int] = None


class InterventionLibrary(CamelModel):
    tier1: List[InterventionResponse]
    tier2: Dict[str, List[InterventionResponse]]
    tier3: List[InterventionResponse]
    tier4: List[InterventionResponse]


class InterventionLibraryResponse(CamelModel):
    success: bool = True
    interventions: InterventionLibrary
    favorites: List[InterventionResponse]
    total_count: int


class FavoriteToggleResponse(CamelModel):
    success: bool = True
    intervention_id: int
    is_favorite: bool
