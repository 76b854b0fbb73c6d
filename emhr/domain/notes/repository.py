"""
Clinical Notes Repository Layer

Provides data access operations for clinical notes and note drafts.
"""

from typing import Optional, List
from datetime import date
from sqlalchemy import and_
from sqlalchemy.orm import joinedload

from emhr.domain.notes.models import (
    ClinicalNote, NoteDraft, NoteStatus, NoteType, SupervisorReviewStatus
)
from emhr.domain.scheduling.models import Appointment, AppointmentStatus, CalendarCategory, CategoryType


class ClinicalNoteRepository:
    """Repository for clinical note data access operations"""

    def __init__(self, db):
        self.db = db

    def create(self, note_data: dict) -> ClinicalNote:
        note = ClinicalNote(**note_data)
        self.db.add(note)
        self.db.flush()
        return note

    def get_by_id(self, note_id: int) -> Optional[ClinicalNote]:
        return self.db.query(ClinicalNote).options(
            joinedload(ClinicalNote.patient),
            joinedload(ClinicalNote.provider),
            joinedload(ClinicalNote.signer),
            joinedload(ClinicalNote.supervisor)
        ).filter(ClinicalNote.id == note_id).first()

    def get_by_uuid(self, note_uuid: str) -> Optional[ClinicalNote]:
        return self.db.query(ClinicalNote).filter(ClinicalNote.note_uuid == note_uuid).first()

    def get_addenda(self, parent_note_id: int) -> List[ClinicalNote]:
        return self.db.query(ClinicalNote).options(
            joinedload(ClinicalNote.provider)
        ).filter(
            ClinicalNote.parent_note_id == parent_note_id,
            ClinicalNote.is_addendum.is_(True)
        ).order_by(ClinicalNote.created_at.desc(), ClinicalNote.id.desc()).all()

    def get_patient_notes(
        self,
        patient_id: int,
        note_type: Optional[NoteType] = None,
        status: Optional[NoteStatus] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None
    ) -> List[ClinicalNote]:
        query = self.db.query(ClinicalNote).options(
            joinedload(ClinicalNote.provider)
        ).filter(ClinicalNote.patient_id == patient_id)

        if note_type:
            query = query.filter(ClinicalNote.note_type == note_type)
        if status:
            query = query.filter(ClinicalNote.status == status)
        if start_date:
            query = query.filter(ClinicalNote.service_date >= start_date)
        if end_date:
            query = query.filter(ClinicalNote.service_date <= end_date)

        return query.order_by(
            ClinicalNote.service_date.desc(), ClinicalNote.created_at.desc(), ClinicalNote.id.desc()
        ).all()

    def get_provider_drafts(self, provider_id: int, limit: int = 20) -> List[ClinicalNote]:
        return self.db.query(ClinicalNote).options(
            joinedload(ClinicalNote.patient)
        ).filter(
            ClinicalNote.provider_id == provider_id,
            ClinicalNote.is_locked.is_(False),
            ClinicalNote.status.in_([NoteStatus.DRAFT, NoteStatus.IN_PROGRESS])
        ).order_by(ClinicalNote.service_date.desc(), ClinicalNote.id.desc()).limit(limit).all()

    def get_appointments_missing_notes(
        self,
        provider_id: int,
        start_date: date,
        end_date: date,
        limit: int = 20
    ) -> List[Appointment]:
        has_note = self.db.query(ClinicalNote.id).filter(
            ClinicalNote.appointment_id == Appointment.id
        ).exists()

        return self.db.query(Appointment).options(
            joinedload(Appointment.patient),
            joinedload(Appointment.category)
        ).join(
            CalendarCategory, CalendarCategory.id == Appointment.category_id
        ).filter(
            Appointment.provider_id == provider_id,
            Appointment.patient_id.isnot(None),
            Appointment.event_date >= start_date,
            Appointment.event_date <= end_date,
            Appointment.status.notin_([AppointmentStatus.CANCELLED, AppointmentStatus.NO_SHOW]),
            CalendarCategory.category_type != CategoryType.AVAILABILITY.value,
            Appointment.clinical_note_id.is_(None),
            ~has_note
        ).order_by(Appointment.event_date.desc(), Appointment.start_time.desc()).limit(limit).all()

    def get_pending_supervisor_review(self, supervisee_ids: List[int]) -> List[ClinicalNote]:
        if not supervisee_ids:
            return []
        return self.db.query(ClinicalNote).options(
            joinedload(ClinicalNote.patient),
            joinedload(ClinicalNote.provider)
        ).filter(
            ClinicalNote.provider_id.in_(supervisee_ids),
            ClinicalNote.supervisor_review_required.is_(True),
            ClinicalNote.supervisor_review_status == SupervisorReviewStatus.PENDING,
            ClinicalNote.status == NoteStatus.PENDING_REVIEW
        ).order_by(ClinicalNote.submitted_for_review_at.asc(), ClinicalNote.id.asc()).all()

    def delete(self, note: ClinicalNote):
        self.db.delete(note)


class NoteDraftRepository:
    """Repository for auto-saved drafts"""

    def __init__(self, db):
        self.db = db

    def find_for_upsert(
        self,
        provider_id: int,
        patient_id: int,
        note_id: Optional[int] = None,
        appointment_id: Optional[int] = None,
        note_type: Optional[str] = None,
        service_date: Optional[date] = None
    ) -> Optional[NoteDraft]:
        query = self.db.query(NoteDraft).filter(
            NoteDraft.provider_id == provider_id,
            NoteDraft.patient_id == patient_id
        )
        if note_id:
            query = query.filter(NoteDraft.note_id == note_id)
        elif appointment_id:
            query = query.filter(NoteDraft.appointment_id == appointment_id)
        else:
            query = query.filter(and_(
                NoteDraft.note_type == note_type,
                NoteDraft.service_date == service_date,
                NoteDraft.note_id.is_(None)
            ))
        return query.order_by(NoteDraft.saved_at.desc()).first()

    def add(self, draft_data: dict) -> NoteDraft:
        draft = NoteDraft(**draft_data)
        self.db.add(draft)
        return draft

    def get_latest(
        self,
        provider_id: int,
        note_id: Optional[int] = None,
        appointment_id: Optional[int] = None,
        patient_id: Optional[int] = None
    ) -> Optional[NoteDraft]:
        query = self.db.query(NoteDraft).filter(NoteDraft.provider_id == provider_id)
        if note_id:
            query = query.filter(NoteDraft.note_id == note_id)
        elif appointment_id:
            query = query.filter(NoteDraft.appointment_id == appointment_id)
        elif patient_id:
            query = query.filter(NoteDraft.patient_id == patient_id)
        return query.order_by(NoteDraft.saved_at.desc(), NoteDraft.id.desc()).first()

    def get_all_for_provider(self, provider_id: int) -> List[NoteDraft]:
        return self.db.query(NoteDraft).filter(
            NoteDraft.provider_id == provider_id
        ).order_by(NoteDraft.saved_at.desc(), NoteDraft.id.desc()).all()

    def delete_for_note(self, note_id: int) -> int:
        return self.db.query(NoteDraft).filter(NoteDraft.note_id == note_id).delete(synchronize_session=False)
