"""
Billing Domain Models

CPT code catalogue, billing modifiers, and per-client charges and payments.
"""

from sqlalchemy import (
    Column, String, Date, Boolean, DateTime, ForeignKey, Integer, Text, Numeric
)
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from emhr.infrastructure.database import Base


class CptCode(Base):
    __tablename__ = "cpt_codes"

    id = Column(Integer, primary_key=True, autoincrement=True)
    code = Column(String(10), unique=True, nullable=False, index=True)
    category = Column(String(50), nullable=False)
    type = Column(String(50))
    description = Column(Text, nullable=False)
    standard_duration_minutes = Column(Integer)
    standard_fee = Column(Numeric(10, 2))
    is_active = Column(Boolean, default=True, nullable=False)
    is_addon = Column(Boolean, default=False, nullable=False)
    requires_primary_code = Column(Boolean, default=False, nullable=False)
    sort_order = Column(Integer, default=0)
    created_at = Column(DateTime, default=func.now())
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now())


class BillingModifier(Base):
    __tablename__ = "billing_modifiers"

    id = Column(Integer, primary_key=True, autoincrement=True)
    code = Column(String(5), unique=True, nullable=False)
    description = Column(String(255), nullable=False)
    modifier_type = Column(String(50))
    is_active = Column(Boolean, default=True, nullable=False)
    sort_order = Column(Integer, default=0)
    created_at = Column(DateTime, default=func.now())
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now())


class Charge(Base):
    """Billed line item for a client"""
    __tablename__ = "billing_charges"

    id = Column(Integer, primary_key=True, autoincrement=True)
    patient_id = Column(Integer, ForeignKey("clients.id"), nullable=False, index=True)
    service_date = Column(Date, nullable=False)
    code_type = Column(String(15), nullable=False, default="CPT4")
    code = Column(String(20), nullable=False)
    modifier = Column(String(12))
    units = Column(Integer, nullable=False, default=1)
    fee = Column(Numeric(10, 2), nullable=False, default=0)
    justify = Column(String(255))  # diagnosis pointer(s)
    note_id = Column(Integer, ForeignKey("clinical_notes.id", ondelete="SET NULL"))
    appointment_id = Column(Integer, ForeignKey("appointments.id", ondelete="SET NULL"))
    posted_by = Column(Integer, ForeignKey("users.id"))
    created_at = Column(DateTime, default=func.now())

    patient = relationship("Client")

    @property
    def total(self):
        return (self.fee or 0) * (self.units or 0)


class Payment(Base):
    __tablename__ = "billing_payments"

    id = Column(Integer, primary_key=True, autoincrement=True)
    patient_id = Column(Integer, ForeignKey("clients.id"), nullable=False, index=True)
    payment_date = Column(Date, nullable=False)
    amount = Column(Numeric(10, 2), nullable=False)
    method = Column(String(30), nullable=False, default="cash")
    reference = Column(String(100))
    memo = Column(Text)
    posted_by = Column(Integer, ForeignKey("users.id"))
    created_at = Column(DateTime, default=func.now())
