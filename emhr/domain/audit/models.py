from sqlalchemy import Column, String, DateTime, ForeignKey, JSON, Integer
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from emhr.infrastructure.database import Base


class AuditLog(Base):
    """HIPAA access/change audit trail"""
    __tablename__ = "audit_logs"

    id = Column(Integer, primary_key=True, autoincrement=True)

    # Event details
    action = Column(String(50), nullable=False, index=True)
    resource_type = Column(String(50), nullable=False, index=True)
    resource_id = Column(Integer, index=True)
    details = Column(JSON)

    # User information
    user_id = Column(Integer, ForeignKey("users.id"), index=True)
    user = relationship("User", foreign_keys=[user_id])
    username = Column(String(50), index=True)  # Kept when the user row is gone

    ip_address = Column(String(45))
    user_agent = Column(String(500))
    request_id = Column(String(64))

    created_at = Column(DateTime, default=func.now(), index=True)
