"""
Insurance Domain Models

Insurance payers and client coverage records.
"""

from sqlalchemy import (
    Column, String, Date, Boolean, DateTime, ForeignKey, Integer, Numeric, Enum
)
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from emhr.infrastructure.database import Base
import enum


class CoverageType(str, enum.Enum):
    PRIMARY = "primary"
    SECONDARY = "secondary"
    TERTIARY = "tertiary"


class InsuranceProvider(Base):
    """Insurance payer"""
    __tablename__ = "insurance_providers"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), unique=True, nullable=False)
    payer_id = Column(String(50))
    phone = Column(String(30))
    fax = Column(String(30))
    email = Column(String(255))
    website = Column(String(255))

    # Address
    address_line1 = Column(String(255))
    address_line2 = Column(String(255))
    city = Column(String(100))
    state = Column(String(50))
    zip = Column(String(20))

    # Claims contact
    claims_address = Column(String(255))
    claims_phone = Column(String(30))
    claims_email = Column(String(255))

    insurance_type = Column(String(30), nullable=False, default="commercial")
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=func.now())
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now())


class ClientInsurance(Base):
    """Client coverage, one row per coverage type"""
    __tablename__ = "client_insurance"

    id = Column(Integer, primary_key=True, autoincrement=True)
    patient_id = Column(Integer, ForeignKey("clients.id"), nullable=False, index=True)
    provider_id = Column(Integer, ForeignKey("insurance_providers.id"), nullable=False)
    coverage_type = Column(Enum(CoverageType), nullable=False, default=CoverageType.PRIMARY)

    policy_number = Column(String(100))
    group_number = Column(String(100))

    # Subscriber
    subscriber_fname = Column(String(100))
    subscriber_lname = Column(String(100))
    subscriber_dob = Column(Date)
    subscriber_relationship = Column(String(30), default="self")

    effective_date = Column(Date)
    end_date = Column(Date)
    copay = Column(Numeric(10, 2))

    created_at = Column(DateTime, default=func.now())
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now())

    provider = relationship("InsuranceProvider")
