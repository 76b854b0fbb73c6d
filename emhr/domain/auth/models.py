"""
Authentication & Staff Domain Models

Users (clinicians, social workers, supervisors, admins), their login
sessions and supervision relationships.
"""

from datetime import datetime, date
from sqlalchemy import (
    Column, String, Date, Boolean, DateTime, ForeignKey, Integer, Enum
)
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from emhr.infrastructure.database import Base
import enum


class UserType(str, enum.Enum):
    """Account type"""
    ADMIN = "admin"
    USER = "user"
    SOCIAL_WORKER = "social_worker"


class User(Base):
    """Staff user account"""
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String(50), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    email = Column(String(255))
    fname = Column(String(100), nullable=False, default="")
    lname = Column(String(100), nullable=False, default="")
    title = Column(String(50))
    npi = Column(String(20))

    user_type = Column(Enum(UserType), nullable=False, default=UserType.USER)
    is_provider = Column(Boolean, default=False, nullable=False)
    is_supervisor = Column(Boolean, default=False, nullable=False)
    is_social_worker = Column(Boolean, default=False, nullable=False)

    # Login security
    failed_login_attempts = Column(Integer, default=0, nullable=False)
    locked_until = Column(DateTime)
    last_login = Column(DateTime)

    is_active = Column(Boolean, default=True, nullable=False)
    deleted_at = Column(DateTime)
    created_at = Column(DateTime, default=func.now())
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now())

    sessions = relationship("UserSession", back_populates="user", cascade="all, delete-orphan")

    @property
    def full_name(self) -> str:
        return f"{self.fname or ''} {self.lname or ''}".strip() or self.username

    @property
    def is_admin(self) -> bool:
        return self.user_type == UserType.ADMIN

    def is_locked(self) -> bool:
        return self.locked_until is not None and self.locked_until > datetime.utcnow()


class UserSession(Base):
    """Server-side login session referenced by the session cookie"""
    __tablename__ = "user_sessions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    user = relationship("User", back_populates="sessions")

    session_token = Column(String(255), unique=True, nullable=False, index=True)

    ip_address = Column(String(45))
    user_agent = Column(String(500))

    is_active = Column(Boolean, default=True, nullable=False)
    expires_at = Column(DateTime, nullable=False)
    created_at = Column(DateTime, default=func.now())
    last_accessed_at = Column(DateTime, default=func.now())

    def is_expired(self) -> bool:
        """Check if session is expired"""
        return datetime.utcnow() > self.expires_at

    def revoke(self):
        """Revoke the session"""
        self.is_active = False


class UserSupervisor(Base):
    """Supervision link: ``user_id`` is supervised by ``supervisor_id``"""
    __tablename__ = "user_supervisors"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    supervisor_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    started_at = Column(Date, default=date.today, nullable=False)
    ended_at = Column(Date)
    created_at = Column(DateTime, default=func.now())

    user = relationship("User", foreign_keys=[user_id])
    supervisor = relationship("User", foreign_keys=[supervisor_id])

    def is_current(self, as_of: date = None) -> bool:
        as_of = as_of or date.today()
        return self.ended_at is None or self.ended_at > as_of
