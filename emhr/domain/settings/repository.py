from typing import Optional, List

from emhr.domain.settings.models import SystemSetting, ClinicalSetting


class SettingsRepository:
    """Repository for system settings"""

    def __init__(self, db):
        self.db = db

    def get_by_key(self, key: str) -> Optional[SystemSetting]:
        return self.db.query(SystemSetting).filter(SystemSetting.setting_key == key).first()

    def get_by_category(self, category: str) -> List[SystemSetting]:
        return self.db.query(SystemSetting).filter(
            SystemSetting.category == category
        ).order_by(SystemSetting.setting_key).all()

    def get_categories(self) -> List[str]:
        rows = self.db.query(SystemSetting.category).distinct().order_by(SystemSetting.category).all()
        return [row.category for row in rows]

    def update_value(self, setting: SystemSetting, value: str, updated_by: Optional[int] = None):
        setting.setting_value = value
        setting.updated_by = updated_by
        self.db.commit()

    def create(self, setting_data: dict) -> SystemSetting:
        setting = SystemSetting(**setting_data)
        self.db.add(setting)
        self.db.commit()
        return setting


class ClinicalSettingsRepository:
    """Repository for clinical documentation settings"""

    def __init__(self, db):
        self.db = db

    def get_all(self) -> List[ClinicalSetting]:
        return self.db.query(ClinicalSetting).order_by(ClinicalSetting.setting_key).all()

    def get_by_key(self, key: str) -> Optional[ClinicalSetting]:
        return self.db.query(ClinicalSetting).filter(ClinicalSetting.setting_key == key).first()

    def update_value(self, setting: ClinicalSetting, value: str):
        setting.setting_value = value
        self.db.commit()

    def create(self, setting_data: dict) -> ClinicalSetting:
        setting = ClinicalSetting(**setting_data)
        self.db.add(setting)
        self.db.commit()
        return setting
