"""
Treatment Planning Service Layer

Client treatment goals and the intervention library used when writing
progress notes.
"""

from typing import Optional, List, Dict, Any
from datetime import datetime
import logging

from emhr.core.exceptions import NotFoundError, ValidationError
from emhr.core.permissions import PermissionChecker
from emhr.domain.auth.models import User
from emhr.domain.clients.repository import ClientRepository
from emhr.domain.treatment.models import TreatmentGoal, GoalStatus, Intervention
from emhr.domain.treatment.repository import TreatmentGoalRepository, InterventionRepository

logger = logging.getLogger(__name__)


class TreatmentGoalService:
    """Service layer for client treatment goals"""

    def __init__(self, db, current_user: User):
        self.db = db
        self.current_user = current_user
        self.permissions = PermissionChecker(db, current_user)
        self.goal_repo = TreatmentGoalRepository(db)
        self.client_repo = ClientRepository(db)

    def _ensure_client(self, patient_id: int):
        if not self.client_repo.get_by_id(patient_id):
            raise NotFoundError("Client not found")
        self.permissions.ensure_client_access(patient_id)

    def list_goals(self, patient_id: int, status: Optional[GoalStatus] = None, include_all: bool = False) -> Dict[str, Any]:
        self._ensure_client(patient_id)

        goals = self.goal_repo.get_for_patient(patient_id, status=None if include_all else (status or GoalStatus.ACTIVE))
        grouped: Dict[str, List[TreatmentGoal]] = {}
        for goal in goals:
            grouped.setdefault(goal.status.value, []).append(goal)

        return {
            "goals": goals,
            "grouped": grouped,
            "active_count": self.goal_repo.count_active(patient_id),
        }

    def create_goal(self, patient_id: int, goal_data: Dict[str, Any]) -> TreatmentGoal:
        self._ensure_client(patient_id)
        goal_text = (goal_data.get("goal_text") or "").strip()
        if not goal_text:
            raise ValidationError("Goal text is required")

        goal = self.goal_repo.create({
            "patient_id": patient_id,
            "goal_text": goal_text,
            "goal_category": goal_data.get("goal_category"),
            "target_date": goal_data.get("target_date"),
            "status": GoalStatus.ACTIVE,
            "created_by": self.current_user.id,
        })
        logger.info(f"Treatment goal {goal.id} created for client {patient_id}")
        return goal

    def update_status(self, goal_id: int, status: GoalStatus) -> TreatmentGoal:
        goal = self.goal_repo.get_by_id(goal_id)
        if not goal:
            raise NotFoundError("Goal not found")
        self.permissions.ensure_client_access(goal.patient_id)

        update_data = {"status": status}
        if status == GoalStatus.ACHIEVED:
            update_data["achieved_at"] = datetime.utcnow()
        else:
            update_data["achieved_at"] = None
        return self.goal_repo.update(goal, update_data)


class InterventionService:
    """Service layer for the intervention library"""

    def __init__(self, db, current_user: User):
        self.db = db
        self.current_user = current_user
        self.repo = InterventionRepository(db)

    def get_library(
        self,
        tier: Optional[int] = None,
        modality: Optional[str] = None,
        include_inactive: bool = False
    ) -> Dict[str, Any]:
        """Interventions grouped by tier; tier 2 is further grouped by modality"""
        if tier is not None and tier not in (1, 2, 3, 4):
            raise ValidationError("Tier must be between 1 and 4")

        interventions = self.repo.get_all(tier=tier, modality=modality, include_inactive=include_inactive)
        library: Dict[str, Any] = {"tier1": [], "tier2": {}, "tier3": [], "tier4": []}
        for intervention in interventions:
            if intervention.intervention_tier == 2:
                library["tier2"].setdefault(intervention.modality or "General", []).append(intervention)
            else:
                library[f"tier{intervention.intervention_tier}"].append(intervention)

        return {
            "interventions": library,
            "favorites": self.repo.get_favorites(self.current_user.id),
            "total_count": len(interventions),
        }

    def create_intervention(self, intervention_data: Dict[str, Any]) -> Intervention:
        if intervention_data.get("intervention_tier") not in (1, 2, 3, 4):
            raise ValidationError("Tier must be between 1 and 4")
        return self.repo.create(intervention_data)

    def toggle_favorite(self, intervention_id: int) -> bool:
        """Returns True when the intervention is now a favorite"""
        if not self.repo.get_by_id(intervention_id):
            raise NotFoundError("Intervention not found")

        favorite = self.repo.get_favorite(self.current_user.id, intervention_id)
        if favorite:
            self.repo.remove_favorite(favorite)
            return False
        self.repo.add_favorite(self.current_user.id, intervention_id)
        return True
