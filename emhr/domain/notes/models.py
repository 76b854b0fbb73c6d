"""
Clinical Notes Domain Models

Implements the database models for:
- Clinical notes (BIRP progress notes, intakes, diagnosis notes, ...)
- Addenda to signed notes
- Auto-saved note drafts
"""

from sqlalchemy import (
    Column, String, Date, Boolean, DateTime, ForeignKey, Integer, Text, Enum, JSON
)
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from emhr.infrastructure.database import Base
import uuid
import enum


class NoteType(str, enum.Enum):
    PROGRESS = "progress"
    INTAKE = "intake"
    DIAGNOSIS = "diagnosis"
    TREATMENT_PLAN = "treatment_plan"
    CRISIS = "crisis"
    DISCHARGE = "discharge"
    CASE_MANAGEMENT = "case_management"
    GROUP = "group"
    COLLATERAL = "collateral"


class NoteStatus(str, enum.Enum):
    """Note lifecycle: draft -> (pending_review) -> signed"""
    DRAFT = "draft"
    IN_PROGRESS = "in_progress"
    PENDING_REVIEW = "pending_review"
    SIGNED = "signed"


class SupervisorReviewStatus(str, enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


EDITABLE_STATUSES = (NoteStatus.DRAFT, NoteStatus.IN_PROGRESS)


def generate_note_uuid() -> str:
    return str(uuid.uuid4())


class ClinicalNote(Base):
    """Clinical documentation for a client encounter"""
    __tablename__ = "clinical_notes"

    id = Column(Integer, primary_key=True, autoincrement=True)
    note_uuid = Column(String(36), unique=True, nullable=False, default=generate_note_uuid, index=True)
    patient_id = Column(Integer, ForeignKey("clients.id"), nullable=False, index=True)
    provider_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    appointment_id = Column(Integer, ForeignKey("appointments.id", ondelete="SET NULL"))
    billing_id = Column(Integer)

    # Note type and metadata
    note_type = Column(Enum(NoteType), nullable=False)
    template_type = Column(String(30), nullable=False, default="BIRP")
    service_date = Column(Date, nullable=False, index=True)
    service_duration = Column(Integer)  # minutes
    service_location = Column(String(100))

    # BIRP
    behavior_problem = Column(Text)
    intervention = Column(Text)
    response = Column(Text)
    plan = Column(Text)

    # Risk
    risk_present = Column(Boolean, default=False)
    risk_assessment = Column(Text)

    goals_addressed = Column(JSON)
    interventions_selected = Column(JSON)
    client_presentation = Column(JSON)

    # Assessment / diagnosis content
    diagnosis_codes = Column(JSON)  # [{"code", "description", "isPrimary"}]
    presenting_concerns = Column(Text)
    clinical_observations = Column(Text)
    mental_status_exam = Column(JSON)
    symptoms_reported = Column(Text)
    symptoms_observed = Column(Text)
    clinical_justification = Column(Text)
    differential_diagnosis = Column(Text)
    severity_specifiers = Column(Text)
    functional_impairment = Column(Text)
    duration_of_symptoms = Column(String(100))
    previous_diagnoses = Column(Text)

    status = Column(Enum(NoteStatus), nullable=False, default=NoteStatus.DRAFT, index=True)

    # Signing/locking
    is_locked = Column(Boolean, default=False, nullable=False)
    signed_at = Column(DateTime)
    signed_by = Column(Integer, ForeignKey("users.id"))
    signature_data = Column(JSON)
    locked_at = Column(DateTime)

    # Supervision
    supervisor_review_required = Column(Boolean, default=False, nullable=False)
    supervisor_review_status = Column(Enum(SupervisorReviewStatus))
    submitted_for_review_at = Column(DateTime)
    supervisor_signed_by = Column(Integer, ForeignKey("users.id"))
    supervisor_signed_at = Column(DateTime)
    supervisor_comments = Column(Text)

    # Addendum support
    is_addendum = Column(Boolean, default=False, nullable=False)
    parent_note_id = Column(Integer, ForeignKey("clinical_notes.id"), index=True)
    addendum_reason = Column(Text)

    last_autosave_at = Column(DateTime)
    created_at = Column(DateTime, default=func.now())
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now())

    # Relationships
    patient = relationship("Client")
    provider = relationship("User", foreign_keys=[provider_id])
    signer = relationship("User", foreign_keys=[signed_by])
    supervisor = relationship("User", foreign_keys=[supervisor_signed_by])
    parent_note = relationship("ClinicalNote", remote_side=[id], back_populates="addenda")
    addenda = relationship(
        "ClinicalNote",
        back_populates="parent_note",
        order_by="ClinicalNote.created_at.desc()",
    )

    @property
    def is_editable(self) -> bool:
        return not self.is_locked and self.status in EDITABLE_STATUSES

    @property
    def provider_name(self):
        return self.provider.full_name if self.provider else None

    @property
    def signer_name(self):
        return self.signer.full_name if self.signer else None

    @property
    def supervisor_name(self):
        return self.supervisor.full_name if self.supervisor else None

    @property
    def patient_name(self):
        return self.patient.full_name if self.patient else None


class NoteDraft(Base):
    """Auto-saved, not yet committed note content"""
    __tablename__ = "note_drafts"

    id = Column(Integer, primary_key=True, autoincrement=True)
    note_id = Column(Integer, ForeignKey("clinical_notes.id", ondelete="CASCADE"), index=True)
    provider_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    patient_id = Column(Integer, ForeignKey("clients.id"), nullable=False, index=True)
    appointment_id = Column(Integer, ForeignKey("appointments.id", ondelete="SET NULL"))
    note_type = Column(String(50))
    service_date = Column(Date)
    draft_content = Column(JSON, nullable=False)
    saved_at = Column(DateTime, default=func.now(), nullable=False)
    created_at = Column(DateTime, default=func.now())
