"""
Treatment Planning Domain Models

Treatment goals per client and the shared intervention library with
per-user favorites.
"""

from sqlalchemy import (
    Column, String, Date, Boolean, DateTime, ForeignKey, Integer, Text, Enum, UniqueConstraint
)
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from emhr.infrastructure.database import Base
import enum


class GoalStatus(str, enum.Enum):
    ACTIVE = "active"
    ACHIEVED = "achieved"
    REVISED = "revised"
    DISCONTINUED = "discontinued"


# Display order for goal listings
GOAL_STATUS_ORDER = [GoalStatus.ACTIVE, GoalStatus.ACHIEVED, GoalStatus.REVISED, GoalStatus.DISCONTINUED]


class TreatmentGoal(Base):
    __tablename__ = "treatment_goals"

    id = Column(Integer, primary_key=True, autoincrement=True)
    patient_id = Column(Integer, ForeignKey("clients.id"), nullable=False, index=True)
    goal_text = Column(Text, nullable=False)
    goal_category = Column(String(100))
    target_date = Column(Date)
    status = Column(Enum(GoalStatus), nullable=False, default=GoalStatus.ACTIVE)
    achieved_at = Column(DateTime)
    created_by = Column(Integer, ForeignKey("users.id"))
    created_at = Column(DateTime, default=func.now())
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now())

    patient = relationship("Client")


class Intervention(Base):
    """Intervention library entry, grouped by tier (1-4) and modality"""
    __tablename__ = "intervention_library"

    id = Column(Integer, primary_key=True, autoincrement=True)
    intervention_name = Column(String(200), nullable=False)
    intervention_tier = Column(Integer, nullable=False, default=1)
    modality = Column(String(100))
    description = Column(Text)
    is_active = Column(Boolean, default=True, nullable=False)
    sort_order = Column(Integer, default=0)
    created_at = Column(DateTime, default=func.now())


class InterventionFavorite(Base):
    __tablename__ = "intervention_favorites"
    __table_args__ = (
        UniqueConstraint("user_id", "intervention_id", name="uq_intervention_favorite"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    intervention_id = Column(Integer, ForeignKey("intervention_library.id", ondelete="CASCADE"), nullable=False)
    created_at = Column(DateTime, default=func.now())
