"""
Problem List Domain Model

Client diagnoses (ICD-10) with active date ranges.
"""

from sqlalchemy import (
    Column, String, Date, Boolean, DateTime, ForeignKey, Integer, Text
)
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from emhr.infrastructure.database import Base


class Diagnosis(Base):
    """Problem list entry"""
    __tablename__ = "diagnoses"

    id = Column(Integer, primary_key=True, autoincrement=True)
    patient_id = Column(Integer, ForeignKey("clients.id"), nullable=False, index=True)
    code = Column(String(20), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    begdate = Column(Date, nullable=False)
    enddate = Column(Date)
    activity = Column(Boolean, default=True, nullable=False)
    is_primary = Column(Boolean, default=False, nullable=False)
    comments = Column(Text)

    source_note_id = Column(Integer, ForeignKey("clinical_notes.id", ondelete="SET NULL"))
    created_by = Column(Integer, ForeignKey("users.id"))
    created_at = Column(DateTime, default=func.now())
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now())

    patient = relationship("Client")

    def append_comment(self, line: str):
        self.comments = f"{self.comments}\n{line}" if self.comments else line
