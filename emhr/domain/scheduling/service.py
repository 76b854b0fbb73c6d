"""
Scheduling Service Layer

Business logic for appointments, availability blocks, recurring series and
calendar categories.
"""

from typing import Optional, List, Dict, Any
from datetime import date, datetime, time, timedelta
import calendar
import logging
import uuid

from sqlalchemy import or_

from emhr.core.exceptions import AuthorizationError, NotFoundError, ValidationError
from emhr.core.permissions import PermissionChecker
from emhr.domain.auth.models import User
from emhr.domain.auth.repository import UserRepository
from emhr.domain.clients.repository import ClientRepository
from emhr.domain.scheduling.models import (
    Appointment, AppointmentStatus, CalendarCategory, CategoryType, RecurrenceFrequency
)
from emhr.domain.scheduling.repository import AppointmentRepository, CalendarCategoryRepository

logger = logging.getLogger(__name__)

MAX_OCCURRENCES = 52

# Fields a series edit copies to the other occurrences
SERIES_FIELDS = ("start_time", "duration", "end_time", "status", "room", "title",
                 "comments", "category_id", "provider_id", "facility_id")

# Columns an update may change but never clear, keyed to their request names
REQUIRED_FIELDS = {
    "provider_id": "providerId",
    "category_id": "categoryId",
    "event_date": "eventDate",
    "start_time": "startTime",
    "duration": "duration",
    "status": "status",
}


class EditScope:
    SINGLE = "single"
    FUTURE = "future"
    ALL = "all"

    values = (SINGLE, FUTURE, ALL)


def compute_end_time(event_date: date, start_time: time, duration: int) -> time:
    """
    End of an appointment. It may finish at midnight, stored as 00:00,
    but may not run into the next day.
    """
    if duration is None or duration <= 0:
        raise ValidationError("Duration must be a positive number of minutes")
    start = datetime.combine(event_date, start_time)
    end = start + timedelta(minutes=duration)
    if end > datetime.combine(event_date + timedelta(days=1), time(0, 0)):
        raise ValidationError("Appointment cannot extend past midnight")
    return end.time()


def add_months(day: date, months: int) -> date:
    month_index = day.month - 1 + months
    year = day.year + month_index // 12
    month = month_index % 12 + 1
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(day.day, last_day))


def expand_recurrence(
    first_date: date,
    frequency: RecurrenceFrequency,
    count: Optional[int] = None,
    until: Optional[date] = None
) -> List[date]:
    """Occurrence dates for a recurring series, first date included"""
    if count is None and until is None:
        raise ValidationError("Recurrence requires either count or until")
    if count is not None and not 1 <= count <= MAX_OCCURRENCES:
        raise ValidationError(f"Recurrence count must be between 1 and {MAX_OCCURRENCES}")
    if until is not None and until < first_date:
        raise ValidationError("Recurrence end date must be on or after the first appointment")

    step_days = {
        RecurrenceFrequency.DAILY: 1,
        RecurrenceFrequency.WEEKLY: 7,
        RecurrenceFrequency.BIWEEKLY: 14,
    }

    limit = count if count is not None else MAX_OCCURRENCES
    dates = []
    index = 0
    while len(dates) < limit:
        if frequency == RecurrenceFrequency.MONTHLY:
            current = add_months(first_date, index)
        else:
            current = first_date + timedelta(days=step_days[frequency] * index)
        if until is not None and current > until:
            break
        dates.append(current)
        index += 1
    return dates


class CalendarCategoryService:
    """Admin management of appointment categories"""

    def __init__(self, db):
        self.db = db
        self.repo = CalendarCategoryRepository(db)

    def list_categories(self, include_inactive: bool = False) -> List[CalendarCategory]:
        return self.repo.get_all(include_inactive=include_inactive)

    def get_category(self, category_id: int) -> CalendarCategory:
        category = self.repo.get_by_id(category_id)
        if not category:
            raise NotFoundError("Category not found")
        return category

    def create_category(self, category_data: dict) -> CalendarCategory:
        if self.repo.get_by_name(category_data["name"]):
            raise ValidationError("A category with this name already exists")
        return self.repo.create(category_data)

    def update_category(self, category_id: int, update_data: dict) -> CalendarCategory:
        category = self.get_category(category_id)
        if "name" in update_data:
            existing = self.repo.get_by_name(update_data["name"])
            if existing and existing.id != category_id:
                raise ValidationError("A category with this name already exists")
        return self.repo.update(category, update_data)

    def deactivate_category(self, category_id: int) -> CalendarCategory:
        return self.repo.update(self.get_category(category_id), {"is_active": False})


class AppointmentService:
    """Service layer for appointment management"""

    def __init__(self, db, current_user: User):
        self.db = db
        self.current_user = current_user
        self.permissions = PermissionChecker(db, current_user)
        self.appointment_repo = AppointmentRepository(db)
        self.category_repo = CalendarCategoryRepository(db)
        self.client_repo = ClientRepository(db)
        self.user_repo = UserRepository(db)

    def _get_category(self, category_id: int) -> CalendarCategory:
        category = self.category_repo.get_by_id(category_id)
        if not category:
            raise NotFoundError("Category not found")
        return category

    def _validate_participants(self, patient_id: Optional[int], provider_id: int, category: CalendarCategory):
        provider = self.user_repo.get_by_id(provider_id)
        if not provider or not provider.is_active:
            raise NotFoundError("Provider not found")

        if patient_id is None:
            if category.category_type != CategoryType.AVAILABILITY.value:
                raise ValidationError("patientId is required unless the category is an availability block")
            if not self.permissions.is_admin and provider_id != self.current_user.id:
                raise AuthorizationError("You can only create availability blocks for yourself")
            return

        if not self.client_repo.get_by_id(patient_id):
            raise NotFoundError("Client not found")
        self.permissions.ensure_client_access(patient_id)

    def get_appointment(self, appointment_id: int) -> Appointment:
        appointment = self.appointment_repo.get_by_id(appointment_id)
        if not appointment:
            raise NotFoundError("Appointment not found")
        if appointment.patient_id and appointment.provider_id != self.current_user.id:
            self.permissions.ensure_client_access(appointment.patient_id)
        return appointment

    def list_appointments(
        self,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        provider_id: Optional[int] = None,
        patient_id: Optional[int] = None
    ) -> List[Appointment]:
        if start_date and end_date and end_date < start_date:
            raise ValidationError("endDate must be on or after startDate")

        visibility = None
        if not self.permissions.is_admin:
            client_filter = self.permissions.client_access_filter(Appointment.patient_id)
            visibility = or_(Appointment.provider_id == self.current_user.id, client_filter)

        return self.appointment_repo.get_all(
            start_date=start_date,
            end_date=end_date,
            provider_id=provider_id,
            patient_id=patient_id,
            visibility_filter=visibility
        )

    def create_appointment(self, data: Dict[str, Any]) -> List[Appointment]:
        """Create an appointment, or every occurrence of a recurring series"""
        category = self._get_category(data["category_id"])
        self._validate_participants(data.get("patient_id"), data["provider_id"], category)

        duration = data.get("duration")
        if duration is None:
            duration = category.default_duration
        end_time = compute_end_time(data["event_date"], data["start_time"], duration)

        base = {
            "patient_id": data.get("patient_id"),
            "provider_id": data["provider_id"],
            "category_id": category.id,
            "start_time": data["start_time"],
            "end_time": end_time,
            "duration": duration,
            "title": data.get("title") or category.name,
            "comments": data.get("comments"),
            "status": data.get("status") or AppointmentStatus.SCHEDULED,
            "room": data.get("room"),
            "facility_id": data.get("facility_id"),
            "created_by": self.current_user.id,
        }

        recurrence = data.get("recurrence")
        if recurrence:
            dates = expand_recurrence(
                data["event_date"],
                recurrence["frequency"],
                count=recurrence.get("count"),
                until=recurrence.get("until"),
            )
            recurrence_id = str(uuid.uuid4())
            rule = f"{recurrence['frequency'].value}:{len(dates)}"
            rows = [dict(base, event_date=d, recurrence_id=recurrence_id, recurrence_rule=rule) for d in dates]
        else:
            rows = [dict(base, event_date=data["event_date"])]

        appointments = self.appointment_repo.create_many(rows)
        logger.info(f"Created {len(appointments)} appointment(s) for provider {data['provider_id']}")
        return appointments

    def _scope_targets(self, appointment: Appointment, scope: str) -> List[Appointment]:
        if scope not in EditScope.values:
            raise ValidationError(f"Invalid scope: {scope}")
        if scope == EditScope.SINGLE or not appointment.recurrence_id:
            return [appointment]
        from_date = appointment.event_date if scope == EditScope.FUTURE else None
        return self.appointment_repo.get_series(appointment.recurrence_id, from_date)

    def update_appointment(self, appointment_id: int, update_data: Dict[str, Any], scope: str = EditScope.SINGLE) -> List[Appointment]:
        cleared = [name for field, name in REQUIRED_FIELDS.items()
                   if field in update_data and update_data[field] is None]
        if cleared:
            raise ValidationError(f"Fields cannot be empty: {', '.join(cleared)}")

        appointment = self.get_appointment(appointment_id)
        targets = self._scope_targets(appointment, scope)

        if "category_id" in update_data:
            category = self._get_category(update_data["category_id"])
        else:
            category = appointment.category

        patient_id = update_data.get("patient_id", appointment.patient_id)
        provider_id = update_data.get("provider_id", appointment.provider_id)
        if "patient_id" in update_data or "provider_id" in update_data or "category_id" in update_data:
            self._validate_participants(patient_id, provider_id, category)

        event_date = update_data.get("event_date", appointment.event_date)
        start_time = update_data.get("start_time", appointment.start_time)
        duration = update_data.get("duration", appointment.duration)
        update_data["end_time"] = compute_end_time(event_date, start_time, duration)

        # Moving one occurrence in time takes it out of its series
        reschedules = any(
            key in update_data and update_data[key] != getattr(appointment, key)
            for key in ("event_date", "start_time", "duration")
        )

        for field, value in update_data.items():
            setattr(appointment, field, value)
        if scope == EditScope.SINGLE and reschedules and appointment.recurrence_id:
            appointment.recurrence_id = None
            appointment.recurrence_rule = None

        for other in targets:
            if other.id == appointment.id:
                continue
            for field in SERIES_FIELDS:
                if field in update_data:
                    setattr(other, field, update_data[field])

        self.appointment_repo.commit()
        return targets if appointment in targets else [appointment]

    def delete_appointment(self, appointment_id: int, scope: str = EditScope.SINGLE) -> int:
        appointment = self.appointment_repo.get_by_id(appointment_id)
        if not appointment:
            raise NotFoundError("Appointment not found")

        if appointment.patient_id is None:
            if not self.permissions.is_admin and appointment.provider_id != self.current_user.id:
                raise AuthorizationError("You can only delete your own availability blocks")
        elif appointment.provider_id != self.current_user.id:
            self.permissions.ensure_client_access(appointment.patient_id)

        targets = self._scope_targets(appointment, scope)
        self.appointment_repo.delete_many(targets)
        logger.info(f"Deleted {len(targets)} appointment(s) starting at {appointment_id}")
        return len(targets)
