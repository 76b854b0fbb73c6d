"""
Report Repository Layer

Aggregate queries over appointments, clinical notes and client registrations.
"""

from typing import List, Tuple
from datetime import date, datetime, timedelta
from sqlalchemy import func, case, or_

from emhr.domain.auth.models import User
from emhr.domain.clients.models import Client
from emhr.domain.notes.models import ClinicalNote, SupervisorReviewStatus
from emhr.domain.scheduling.models import Appointment, AppointmentStatus, CalendarCategory

TOP_N = 10


def _day_bounds(start_date: date, end_date: date) -> Tuple[datetime, datetime]:
    start = datetime.combine(start_date, datetime.min.time())
    end = datetime.combine(end_date + timedelta(days=1), datetime.min.time())
    return start, end


class ReportRepository:
    """Read-only aggregates for the admin reports"""

    def __init__(self, db):
        self.db = db

    # Appointments

    def appointments_by_status(self, start_date: date, end_date: date) -> List[tuple]:
        return self.db.query(Appointment.status, func.count(Appointment.id)).filter(
            Appointment.event_date.between(start_date, end_date),
            Appointment.patient_id.isnot(None)
        ).group_by(Appointment.status).order_by(func.count(Appointment.id).desc()).all()

    def appointments_by_category(self, start_date: date, end_date: date) -> List[tuple]:
        return self.db.query(
            CalendarCategory.id, CalendarCategory.name, func.count(Appointment.id)
        ).select_from(Appointment).join(
            CalendarCategory, CalendarCategory.id == Appointment.category_id
        ).filter(
            Appointment.event_date.between(start_date, end_date),
            Appointment.patient_id.isnot(None)
        ).group_by(
            CalendarCategory.id, CalendarCategory.name
        ).order_by(func.count(Appointment.id).desc()).limit(TOP_N).all()

    def appointments_by_provider(self, start_date: date, end_date: date) -> List[tuple]:
        return self.db.query(
            User.id, User.fname, User.lname, func.count(Appointment.id)
        ).select_from(Appointment).join(
            User, User.id == Appointment.provider_id
        ).filter(
            Appointment.event_date.between(start_date, end_date),
            Appointment.patient_id.isnot(None)
        ).group_by(
            User.id, User.fname, User.lname
        ).order_by(func.count(Appointment.id).desc()).limit(TOP_N).all()

    # Notes

    def _note_signing_state(self):
        return case(
            (ClinicalNote.signed_at.isnot(None), "signed"),
            (
                ClinicalNote.supervisor_review_required.is_(True) & or_(
                    ClinicalNote.supervisor_review_status.is_(None),
                    ClinicalNote.supervisor_review_status != SupervisorReviewStatus.APPROVED
                ),
                "pending_review"
            ),
            else_="unsigned",
        )

    def notes_by_type(self, start_date: date, end_date: date) -> List[tuple]:
        return self.db.query(ClinicalNote.note_type, func.count(ClinicalNote.id)).filter(
            ClinicalNote.service_date.between(start_date, end_date)
        ).group_by(ClinicalNote.note_type).order_by(func.count(ClinicalNote.id).desc()).all()

    def notes_by_signing_state(self, start_date: date, end_date: date) -> List[tuple]:
        state = self._note_signing_state()
        return self.db.query(state, func.count(ClinicalNote.id)).filter(
            ClinicalNote.service_date.between(start_date, end_date)
        ).group_by(state).all()

    def notes_by_provider(self, start_date: date, end_date: date) -> List[tuple]:
        return self.db.query(
            User.id, User.fname, User.lname, func.count(ClinicalNote.id)
        ).select_from(ClinicalNote).join(
            User, User.id == ClinicalNote.provider_id
        ).filter(
            ClinicalNote.service_date.between(start_date, end_date)
        ).group_by(
            User.id, User.fname, User.lname
        ).order_by(func.count(ClinicalNote.id).desc()).limit(TOP_N).all()

    # Productivity

    def provider_appointment_counts(self, start_date: date, end_date: date) -> List[tuple]:
        completed = func.sum(case((Appointment.status == AppointmentStatus.COMPLETED, 1), else_=0))
        return self.db.query(
            Appointment.provider_id, func.count(Appointment.id), completed
        ).filter(
            Appointment.event_date.between(start_date, end_date),
            Appointment.patient_id.isnot(None)
        ).group_by(Appointment.provider_id).all()

    def provider_note_counts(self, start_date: date, end_date: date) -> List[tuple]:
        signed = func.sum(case((ClinicalNote.signed_at.isnot(None), 1), else_=0))
        return self.db.query(
            ClinicalNote.provider_id, func.count(ClinicalNote.id), signed
        ).filter(
            ClinicalNote.service_date.between(start_date, end_date)
        ).group_by(ClinicalNote.provider_id).all()

    def active_providers(self) -> List[User]:
        return self.db.query(User).filter(
            User.is_provider.is_(True),
            User.is_active.is_(True)
        ).order_by(User.lname, User.fname).all()

    # Client flow

    def new_client_dates(self, start_date: date, end_date: date) -> List[datetime]:
        start, end = _day_bounds(start_date, end_date)
        rows = self.db.query(Client.created_at).filter(
            Client.deleted_at.is_(None),
            Client.created_at >= start,
            Client.created_at < end
        ).all()
        return [row.created_at for row in rows]

    def active_client_ids(self, start_date: date, end_date: date) -> set:
        seen = self.db.query(Appointment.patient_id).filter(
            Appointment.event_date.between(start_date, end_date),
            Appointment.patient_id.isnot(None)
        ).distinct().all()
        documented = self.db.query(ClinicalNote.patient_id).filter(
            ClinicalNote.service_date.between(start_date, end_date)
        ).distinct().all()
        return {row[0] for row in seen} | {row[0] for row in documented}
