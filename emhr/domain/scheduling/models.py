"""
Scheduling Domain Models

Calendar categories and appointments (including availability blocks and
recurring series).
"""

from sqlalchemy import (
    Column, String, Date, Time, Boolean, DateTime, ForeignKey, Integer, Text, Enum
)
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from emhr.infrastructure.database import Base
import enum


class CategoryType(int, enum.Enum):
    """Calendar category kind"""
    CLIENT = 0
    AVAILABILITY = 1
    GROUP = 2
    CLINIC = 3


class AppointmentStatus(str, enum.Enum):
    SCHEDULED = "scheduled"
    CONFIRMED = "confirmed"
    ARRIVED = "arrived"
    IN_SESSION = "in_session"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    NO_SHOW = "no_show"


class RecurrenceFrequency(str, enum.Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    BIWEEKLY = "biweekly"
    MONTHLY = "monthly"


class CalendarCategory(Base):
    """Appointment category (intake, therapy session, availability block, ...)"""
    __tablename__ = "calendar_categories"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(100), nullable=False, unique=True)
    color = Column(String(10), default="#6366f1")
    description = Column(Text)
    category_type = Column(Integer, nullable=False, default=CategoryType.CLIENT.value)
    default_duration = Column(Integer, nullable=False, default=50)
    is_billable = Column(Boolean, default=True)
    is_active = Column(Boolean, default=True, nullable=False)
    sort_order = Column(Integer, default=0)
    created_at = Column(DateTime, default=func.now())


class Appointment(Base):
    """Calendar event for a provider, optionally with a client"""
    __tablename__ = "appointments"

    id = Column(Integer, primary_key=True, autoincrement=True)
    patient_id = Column(Integer, ForeignKey("clients.id"), index=True)
    provider_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    category_id = Column(Integer, ForeignKey("calendar_categories.id"), nullable=False)

    # Timing
    event_date = Column(Date, nullable=False, index=True)
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)
    duration = Column(Integer, nullable=False)  # minutes

    title = Column(String(255))
    comments = Column(Text)
    status = Column(Enum(AppointmentStatus), nullable=False, default=AppointmentStatus.SCHEDULED)
    room = Column(String(50))
    facility_id = Column(Integer)

    # Recurring series
    recurrence_id = Column(String(36), index=True)
    recurrence_rule = Column(String(100))

    clinical_note_id = Column(Integer, index=True)

    created_by = Column(Integer, ForeignKey("users.id"))
    created_at = Column(DateTime, default=func.now())
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now())

    patient = relationship("Client")
    provider = relationship("User", foreign_keys=[provider_id])
    category = relationship("CalendarCategory")
