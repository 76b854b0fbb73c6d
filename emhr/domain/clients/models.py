"""
Client Domain Models

Client demographics and care team assignments.
"""

from datetime import date
from sqlalchemy import (
    Column, String, Date, DateTime, ForeignKey, Integer, Text, Enum, Index
)
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from emhr.infrastructure.database import Base
import enum


class CareTeamStatus(str, enum.Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    DISCHARGED = "discharged"


class CareTeamRole(str, enum.Enum):
    """Role on a client's care team, in precedence order"""
    PRIMARY_CLINICIAN = "primary_clinician"
    CLINICIAN = "clinician"
    SOCIAL_WORKER = "social_worker"
    SUPERVISOR = "supervisor"
    INTERN = "intern"


class Client(Base):
    """Client (patient) record"""
    __tablename__ = "clients"

    id = Column(Integer, primary_key=True, autoincrement=True)

    # Name
    fname = Column(String(100), nullable=False)
    mname = Column(String(100))
    lname = Column(String(100), nullable=False, index=True)
    preferred_name = Column(String(100))

    # Identity
    dob = Column(Date, nullable=False)
    sex = Column(String(20))
    gender_identity = Column(String(50))
    pronouns = Column(String(30))
    ssn_encrypted = Column(Text)

    # Contact
    phone_cell = Column(String(30))
    phone_home = Column(String(30))
    email = Column(String(255))
    street = Column(String(255))
    city = Column(String(100))
    state = Column(String(50))
    postal_code = Column(String(20))

    # Emergency contact
    emergency_contact_name = Column(String(200))
    emergency_contact_phone = Column(String(30))
    emergency_contact_relationship = Column(String(50))

    care_team_status = Column(Enum(CareTeamStatus), nullable=False, default=CareTeamStatus.ACTIVE)

    created_by = Column(Integer, ForeignKey("users.id"))
    created_at = Column(DateTime, default=func.now())
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now())
    deleted_at = Column(DateTime)

    care_team = relationship("ClientProvider", back_populates="client")

    @property
    def full_name(self) -> str:
        return f"{self.fname} {self.lname}"

    def age(self, as_of: date = None) -> int:
        as_of = as_of or date.today()
        return as_of.year - self.dob.year - ((as_of.month, as_of.day) < (self.dob.month, self.dob.day))


class ClientProvider(Base):
    """Care team membership"""
    __tablename__ = "client_providers"
    __table_args__ = (
        Index("ix_client_providers_client_provider", "client_id", "provider_id"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    client_id = Column(Integer, ForeignKey("clients.id"), nullable=False)
    provider_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    role = Column(Enum(CareTeamRole), nullable=False, default=CareTeamRole.CLINICIAN)
    assigned_at = Column(Date, default=date.today, nullable=False)
    ended_at = Column(Date)
    assigned_by = Column(Integer, ForeignKey("users.id"))

    client = relationship("Client", back_populates="care_team")
    provider = relationship("User", foreign_keys=[provider_id])
