from typing import Optional, List
from datetime import date
from sqlalchemy.orm import joinedload

from emhr.domain.scheduling.models import Appointment, CalendarCategory


class CalendarCategoryRepository:
    """Repository for calendar categories"""

    def __init__(self, db):
        self.db = db

    def create(self, category_data: dict) -> CalendarCategory:
        category = CalendarCategory(**category_data)
        self.db.add(category)
        self.db.commit()
        self.db.refresh(category)
        return category

    def get_by_id(self, category_id: int) -> Optional[CalendarCategory]:
        return self.db.query(CalendarCategory).filter(CalendarCategory.id == category_id).first()

    def get_by_name(self, name: str) -> Optional[CalendarCategory]:
        return self.db.query(CalendarCategory).filter(CalendarCategory.name == name).first()

    def get_all(self, include_inactive: bool = False) -> List[CalendarCategory]:
        query = self.db.query(CalendarCategory)
        if not include_inactive:
            query = query.filter(CalendarCategory.is_active.is_(True))
        return query.order_by(CalendarCategory.sort_order, CalendarCategory.name).all()

    def update(self, category: CalendarCategory, update_data: dict) -> CalendarCategory:
        for field, value in update_data.items():
            setattr(category, field, value)
        self.db.commit()
        self.db.refresh(category)
        return category


class AppointmentRepository:
    """Repository for appointment data access operations"""

    def __init__(self, db):
        self.db = db

    def create_many(self, appointments_data: List[dict]) -> List[Appointment]:
        appointments = [Appointment(**data) for data in appointments_data]
        self.db.add_all(appointments)
        self.db.commit()
        for appointment in appointments:
            self.db.refresh(appointment)
        return appointments

    def get_by_id(self, appointment_id: int) -> Optional[Appointment]:
        return self.db.query(Appointment).options(
            joinedload(Appointment.category),
            joinedload(Appointment.patient),
            joinedload(Appointment.provider)
        ).filter(Appointment.id == appointment_id).first()

    def get_all(
        self,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        provider_id: Optional[int] = None,
        patient_id: Optional[int] = None,
        visibility_filter=None
    ) -> List[Appointment]:
        query = self.db.query(Appointment).options(
            joinedload(Appointment.category),
            joinedload(Appointment.patient),
            joinedload(Appointment.provider)
        )
        if start_date:
            query = query.filter(Appointment.event_date >= start_date)
        if end_date:
            query = query.filter(Appointment.event_date <= end_date)
        if provider_id:
            query = query.filter(Appointment.provider_id == provider_id)
        if patient_id:
            query = query.filter(Appointment.patient_id == patient_id)
        if visibility_filter is not None:
            query = query.filter(visibility_filter)
        return query.order_by(Appointment.event_date, Appointment.start_time).all()

    def get_series(self, recurrence_id: str, from_date: Optional[date] = None) -> List[Appointment]:
        query = self.db.query(Appointment).filter(Appointment.recurrence_id == recurrence_id)
        if from_date:
            query = query.filter(Appointment.event_date >= from_date)
        return query.order_by(Appointment.event_date).all()

    def commit(self):
        self.db.commit()

    def delete_many(self, appointments: List[Appointment]):
        for appointment in appointments:
            self.db.delete(appointment)
        self.db.commit()
