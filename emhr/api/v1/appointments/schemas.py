from pydantic import Field
from typing import Optional, List
from datetime import date, time, datetime

from emhr.api.v1.common import CamelModel
from emhr.domain.scheduling.models import AppointmentStatus, CategoryType, RecurrenceFrequency


# Calendar category schemas

class CategoryCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=100)
    color: Optional[str] = Field("#6366f1", max_length=10)
    description: Optional[str] = None
    category_type: CategoryType = CategoryType.CLIENT
    default_duration: int = Field(50, gt=0, le=1440)
    is_billable: bool = True
    sort_order: int = 0


class CategoryUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    color: Optional[str] = Field(None, max_length=10)
    description: Optional[str] = None
    category_type: Optional[CategoryType] = None
    default_duration: Optional[int] = Field(None, gt=0, le=1440)
    is_billable: Optional[bool] = None
    is_active: Optional[bool] = None
    sort_order: Optional[int] = None


class CategoryResponse(CamelModel):
    id: int
    name: str
    color: Optional[str] = None
    description: Optional[str] = None
    category_type: CategoryType
    default_duration: int
    is_billable: Optional[bool] = None
    is_active: bool
    sort_order: Optional[int] = None


class CategoryListResponse(CamelModel):
    success: bool = True
    categories: List[CategoryResponse]


# Appointment schemas

class RecurrenceRequest(CamelModel):
    frequency: RecurrenceFrequency
    count: Optional[int] = Field(None, ge=1)
    until: Optional[date] = None


class AppointmentCreate(CamelModel):
    """Schema for creating an appointment or availability block"""
    patient_id: Optional[int] = None
    provider_id: int
    category_id: int
    event_date: date
    start_time: time
    duration: Optional[int] = Field(None, gt=0, le=1440)
    title: Optional[str] = Field(None, max_length=255)
    comments: Optional[str] = None
    status: Optional[AppointmentStatus] = None
    room: Optional[str] = Field(None, max_length=50)
    facility_id: Optional[int] = None
    recurrence: Optional[RecurrenceRequest] = None


class AppointmentUpdate(CamelModel):
    patient_id: Optional[int] = None
    provider_id: Optional[int] = None
    category_id: Optional[int] = None
    event_date: Optional[date] = None
    start_time: Optional[time] = None
    duration: Optional[int] = Field(None, gt=0, le=1440)
    title: Optional[str] = Field(None, max_length=255)
    comments: Optional[str] = None
    status: Optional[AppointmentStatus] = None
    room: Optional[str] = Field(None, max_length=50)
    facility_id: Optional[int] = None


class AppointmentResponse(CamelModel):
    id: int
    patient_id: Optional[int] = None
    patient_name: Optional[str] = None
    provider_id: int
    provider_name: Optional[str] = None
    category_id: int
    category_name: Optional[str] = None
    category_color: Optional[str] = None
    category_type: Optional[CategoryType] = None
    event_date: date
    start_time: time
    end_time: time
    duration: int
    title: Optional[str] = None
    comments: Optional[str] = None
    status: AppointmentStatus
    room: Optional[str] = None
    facility_id: Optional[int] = None
    recurrence_id: Optional[str] = None
    clinical_note_id: Optional[int] = None
    created_at: Optional[datetime] = None


class AppointmentListResponse(CamelModel):
    success: bool = True
    appointments: List[AppointmentResponse]
    count: int


class AppointmentCreatedResponse(CamelModel):
    success: bool = True
    appointment_id: int
    appointment_ids: List[int]
    recurrence_id: Optional[str] = None
    message: str


class AppointmentUpdatedResponse(CamelModel):
    success: bool = True
    updated_count: int
    appointments: List[AppointmentResponse]
    message: str


class AppointmentDeletedResponse(CamelModel):
    success: bool = True
    deleted_count: int
    message: str
