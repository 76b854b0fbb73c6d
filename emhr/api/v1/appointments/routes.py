from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import Optional
from datetime import date

from emhr.domain.auth.models import User
from emhr.domain.scheduling.models import Appointment, CategoryType
from emhr.domain.scheduling.service import AppointmentService, CalendarCategoryService, EditScope
from emhr.api.deps import get_current_user, require_admin
from emhr.api.v1.appointments.schemas import (
    CategoryCreate,
    CategoryUpdate,
    CategoryResponse,
    CategoryListResponse,
    AppointmentCreate,
    AppointmentUpdate,
    AppointmentResponse,
    AppointmentListResponse,
    AppointmentCreatedResponse,
    AppointmentUpdatedResponse,
    AppointmentDeletedResponse,
)
from emhr.infrastructure.database import get_db

router = APIRouter(tags=["Scheduling"])


def _appointment_response(appointment: Appointment) -> AppointmentResponse:
    response = AppointmentResponse.model_validate(appointment)
    response.patient_name = appointment.patient.full_name if appointment.patient else None
    response.provider_name = appointment.provider.full_name if appointment.provider else None
    if appointment.category:
        response.category_name = appointment.category.name
        response.category_color = appointment.category.color
        response.category_type = CategoryType(appointment.category.category_type)
    return response


# ==================== Calendar Category Endpoints ====================

@router.get("/calendar-categories", response_model=CategoryListResponse)
def list_categories(
    include_inactive: bool = Query(False, alias="includeInactive"),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    categories = CalendarCategoryService(db).list_categories(include_inactive=include_inactive)
    return CategoryListResponse(categories=categories)


@router.post("/calendar-categories", response_model=CategoryResponse, status_code=status.HTTP_201_CREATED)
def create_category(
    category_data: CategoryCreate,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    data = category_data.model_dump()
    data["category_type"] = category_data.category_type.value
    return CalendarCategoryService(db).create_category(data)


@router.put("/calendar-categories/{category_id}", response_model=CategoryResponse)
def update_category(
    category_id: int,
    category_data: CategoryUpdate,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    data = category_data.model_dump(exclude_unset=True)
    if data.get("category_type") is not None:
        data["category_type"] = data["category_type"].value
    return CalendarCategoryService(db).update_category(category_id, data)


@router.delete("/calendar-categories/{category_id}", response_model=CategoryResponse)
def deactivate_category(
    category_id: int,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Categories are deactivated, never removed, so history keeps its labels"""
    return CalendarCategoryService(db).deactivate_category(category_id)


# ==================== Appointment Endpoints ====================

@router.get("/appointments", response_model=AppointmentListResponse)
def list_appointments(
    start_date: Optional[date] = Query(None, alias="startDate"),
    end_date: Optional[date] = Query(None, alias="endDate"),
    provider_id: Optional[int] = Query(None, alias="providerId"),
    patient_id: Optional[int] = Query(None, alias="patientId"),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Appointments visible to the caller, ordered by date and time"""
    appointments = AppointmentService(db, current_user).list_appointments(
        start_date=start_date, end_date=end_date, provider_id=provider_id, patient_id=patient_id
    )
    return AppointmentListResponse(
        appointments=[_appointment_response(a) for a in appointments],
        count=len(appointments)
    )


@router.post("/appointments", response_model=AppointmentCreatedResponse, status_code=status.HTTP_201_CREATED)
def create_appointment(
    appointment_data: AppointmentCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Create an appointment; a recurrence creates the whole series"""
    data = appointment_data.model_dump(exclude_none=True)
    appointments = AppointmentService(db, current_user).create_appointment(data)

    first = appointments[0]
    message = "Appointment created successfully"
    if len(appointments) > 1:
        message = f"{len(appointments)} recurring appointments created successfully"
    return AppointmentCreatedResponse(
        appointment_id=first.id,
        appointment_ids=[a.id for a in appointments],
        recurrence_id=first.recurrence_id,
        message=message,
    )


@router.get("/appointments/{appointment_id}", response_model=AppointmentResponse)
def get_appointment(
    appointment_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return _appointment_response(AppointmentService(db, current_user).get_appointment(appointment_id))


@router.put("/appointments/{appointment_id}", response_model=AppointmentUpdatedResponse)
def update_appointment(
    appointment_id: int,
    appointment_data: AppointmentUpdate,
    scope: str = Query(EditScope.SINGLE),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Update one occurrence, this and future occurrences, or the whole series"""
    updated = AppointmentService(db, current_user).update_appointment(
        appointment_id, appointment_data.model_dump(exclude_unset=True), scope=scope
    )
    return AppointmentUpdatedResponse(
        updated_count=len(updated),
        appointments=[_appointment_response(a) for a in updated],
        message="Appointment updated successfully",
    )


@router.delete("/appointments/{appointment_id}", response_model=AppointmentDeletedResponse)
def delete_appointment(
    appointment_id: int,
    scope: str = Query(EditScope.SINGLE),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    deleted = AppointmentService(db, current_user).delete_appointment(appointment_id, scope=scope)
    return AppointmentDeletedResponse(deleted_count=deleted, message="Appointment deleted successfully")
