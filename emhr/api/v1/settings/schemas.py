from typing import Optional, List, Dict, Any

from emhr.api.v1.common import CamelModel


class SettingItem(CamelModel):
    key: str
    value: Any = None
    type: str
    description: Optional[str] = None
    is_editable: bool = True


class SettingsCategoryResponse(CamelModel):
    success: bool = True
    category: str
    settings: List[SettingItem]


class SettingsCategoriesResponse(CamelModel):
    success: bool = True
    categories: List[str]


class SettingsUpdateRequest(CamelModel):
    settings: Dict[str, Any]


class SettingsUpdateResponse(CamelModel):
    success: bool = True
    updated: List[str]
    failed: Dict[str, str]


class ClinicalSettingItem(CamelModel):
    key: str
    value: Any = None
    type: str
    description: Optional[str] = None


class ClinicalSettingsResponse(CamelModel):
    success: bool = True
    settings: Dict[str, Any]
    settings_detailed: List[ClinicalSettingItem]
    total_count: int


class ClinicalSettingUpdate(CamelModel):
    value: Any = None
