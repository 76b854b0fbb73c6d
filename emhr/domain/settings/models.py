"""
Settings Domain Models

System-wide settings (grouped by category, admin editable) and clinical
documentation settings.
"""

from sqlalchemy import Column, String, Boolean, DateTime, Integer, Text
from sqlalchemy.sql import func
from emhr.infrastructure.database import Base


class SystemSetting(Base):
    __tablename__ = "settings"

    id = Column(Integer, primary_key=True, autoincrement=True)
    setting_key = Column(String(100), unique=True, nullable=False, index=True)
    setting_value = Column(Text)
    setting_type = Column(String(20), nullable=False, default="string")  # string|integer|boolean|json
    category = Column(String(50), nullable=False, default="general", index=True)
    description = Column(Text)
    is_editable = Column(Boolean, default=True, nullable=False)
    updated_by = Column(Integer)
    created_at = Column(DateTime, default=func.now())
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now())


class ClinicalSetting(Base):
    __tablename__ = "clinical_settings"

    id = Column(Integer, primary_key=True, autoincrement=True)
    setting_key = Column(String(100), unique=True, nullable=False, index=True)
    setting_value = Column(Text)
    setting_type = Column(String(20), nullable=False, default="string")  # boolean|json|number|integer|string
    description = Column(Text)
    created_at = Column(DateTime, default=func.now())
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now())
