from typing import Optional, List

from emhr.domain.treatment.models import (
    TreatmentGoal, GoalStatus, GOAL_STATUS_ORDER, Intervention, InterventionFavorite
)


class TreatmentGoalRepository:
    """Repository for treatment goal data access operations"""

    def __init__(self, db):
        self.db = db

    def create(self, goal_data: dict) -> TreatmentGoal:
        goal = TreatmentGoal(**goal_data)
        self.db.add(goal)
        self.db.commit()
        self.db.refresh(goal)
        return goal

    def get_by_id(self, goal_id: int) -> Optional[TreatmentGoal]:
        return self.db.query(TreatmentGoal).filter(TreatmentGoal.id == goal_id).first()

    def get_for_patient(self, patient_id: int, status: Optional[GoalStatus] = None) -> List[TreatmentGoal]:
        query = self.db.query(TreatmentGoal).filter(TreatmentGoal.patient_id == patient_id)
        if status:
            query = query.filter(TreatmentGoal.status == status)

        goals = query.order_by(TreatmentGoal.created_at.desc(), TreatmentGoal.id.desc()).all()
        return sorted(goals, key=lambda goal: GOAL_STATUS_ORDER.index(goal.status))

    def count_active(self, patient_id: int) -> int:
        return self.db.query(TreatmentGoal).filter(
            TreatmentGoal.patient_id == patient_id,
            TreatmentGoal.status == GoalStatus.ACTIVE
        ).count()

    def update(self, goal: TreatmentGoal, update_data: dict) -> TreatmentGoal:
        for field, value in update_data.items():
            setattr(goal, field, value)
        self.db.commit()
        self.db.refresh(goal)
        return goal


class InterventionRepository:
    """Repository for the intervention library and user favorites"""

    def __init__(self, db):
        self.db = db

    def get_by_id(self, intervention_id: int) -> Optional[Intervention]:
        return self.db.query(Intervention).filter(Intervention.id == intervention_id).first()

    def get_all(
        self,
        tier: Optional[int] = None,
        modality: Optional[str] = None,
        include_inactive: bool = False
    ) -> List[Intervention]:
        query = self.db.query(Intervention)
        if not include_inactive:
            query = query.filter(Intervention.is_active.is_(True))
        if tier:
            query = query.filter(Intervention.intervention_tier == tier)
        if modality:
            query = query.filter(Intervention.modality == modality)
        return query.order_by(
            Intervention.intervention_tier, Intervention.modality, Intervention.sort_order,
            Intervention.intervention_name
        ).all()

    def create(self, intervention_data: dict) -> Intervention:
        intervention = Intervention(**intervention_data)
        self.db.add(intervention)
        self.db.commit()
        self.db.refresh(intervention)
        return intervention

    def get_favorites(self, user_id: int) -> List[Intervention]:
        return self.db.query(Intervention).join(
            InterventionFavorite, InterventionFavorite.intervention_id == Intervention.id
        ).filter(
            InterventionFavorite.user_id == user_id,
            Intervention.is_active.is_(True)
        ).order_by(Intervention.intervention_name).all()

    def get_favorite(self, user_id: int, intervention_id: int) -> Optional[InterventionFavorite]:
        return self.db.query(InterventionFavorite).filter(
            InterventionFavorite.user_id == user_id,
            InterventionFavorite.intervention_id == intervention_id
        ).first()

    def add_favorite(self, user_id: int, intervention_id: int) -> InterventionFavorite:
        favorite = InterventionFavorite(user_id=user_id, intervention_id=intervention_id)
        self.db.add(favorite)
        self.db.commit()
        return favorite

    def remove_favorite(self, favorite: InterventionFavorite):
        self.db.delete(favorite)
        self.db.commit()
