"""
Settings Service Layer

Typed access to system and clinical settings. Values are stored as text and
converted according to each row's declared type.
"""

from typing import Any, Dict, List, Optional
import json
import logging

from emhr.core.exceptions import AuthorizationError, NotFoundError, ValidationError
from emhr.domain.settings.models import SystemSetting, ClinicalSetting
from emhr.domain.settings.repository import SettingsRepository, ClinicalSettingsRepository

logger = logging.getLogger(__name__)

REQUIRE_COSIGN_KEY = "supervision.require_cosign"
ALLOW_POST_SIGNATURE_EDITS_KEY = "allow_post_signature_edits"

DEFAULT_SYSTEM_SETTINGS = [
    {
        "setting_key": REQUIRE_COSIGN_KEY,
        "setting_value": "false",
        "setting_type": "boolean",
        "category": "supervision",
        "description": "Notes by supervised clinicians require supervisor co-signature",
    },
    {
        "setting_key": "security.session_timeout_minutes",
        "setting_value": "480",
        "setting_type": "integer",
        "category": "security",
        "description": "Idle session lifetime",
        "is_editable": False,
    },
    {
        "setting_key": "practice.name",
        "setting_value": "",
        "setting_type": "string",
        "category": "general",
        "description": "Practice display name",
    },
]

DEFAULT_CLINICAL_SETTINGS = [
    {
        "setting_key": ALLOW_POST_SIGNATURE_EDITS_KEY,
        "setting_value": "true",
        "setting_type": "boolean",
        "description": "Allow addenda on signed notes",
    },
    {
        "setting_key": "autosave_interval_seconds",
        "setting_value": "30",
        "setting_type": "integer",
        "description": "Note editor autosave interval",
    },
    {
        "setting_key": "default_note_template",
        "setting_value": "BIRP",
        "setting_type": "string",
        "description": "Template used for new progress notes",
    },
]

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off", ""}


def cast_setting_value(value: Optional[str], setting_type: str) -> Any:
    """Convert a stored text value to its declared type"""
    if value is None:
        return None
    if setting_type == "boolean":
        return str(value).strip().lower() in _TRUE_VALUES
    if setting_type == "integer":
        return int(value)
    if setting_type == "number":
        number = float(value)
        return int(number) if number.is_integer() else number
    if setting_type == "json":
        return json.loads(value) if value else None
    return value


def serialize_setting_value(value: Any, setting_type: str) -> str:
    """Validate an incoming value against the declared type and render it as text"""
    try:
        if setting_type == "boolean":
            if isinstance(value, bool):
                return "true" if value else "false"
            text = str(value).strip().lower()
            if text in _TRUE_VALUES:
                return "true"
            if text in _FALSE_VALUES:
                return "false"
            raise ValueError(value)
        if setting_type == "integer":
            return str(int(value))
        if setting_type == "number":
            return str(float(value))
        if setting_type == "json":
            return json.dumps(value)
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid value for {setting_type} setting")
    return "" if value is None else str(value)


class SettingsService:
    """System settings with a cache scoped to this service instance (one request)"""

    def __init__(self, db, current_user=None):
        self.db = db
        self.current_user = current_user
        self.repo = SettingsRepository(db)
        self._cache: Dict[str, Optional[SystemSetting]] = {}

    def _load(self, key: str) -> Optional[SystemSetting]:
        if key not in self._cache:
            self._cache[key] = self.repo.get_by_key(key)
        return self._cache[key]

    def clear_cache(self):
        self._cache.clear()

    def get(self, key: str, default: Any = None) -> Any:
        setting = self._load(key)
        if setting is None or setting.setting_value is None:
            return default
        return cast_setting_value(setting.setting_value, setting.setting_type)

    def get_int(self, key: str, default: int = 0) -> int:
        value = self.get(key, default)
        try:
            return int(value)
        except (TypeError, ValueError):
            return default

    def get_bool(self, key: str, default: bool = False) -> bool:
        value = self.get(key, default)
        if isinstance(value, bool):
            return value
        return str(value).strip().lower() in _TRUE_VALUES

    def get_by_category(self, category: str) -> List[Dict[str, Any]]:
        return [
            {
                "key": s.setting_key,
                "value": cast_setting_value(s.setting_value, s.setting_type),
                "type": s.setting_type,
                "description": s.description,
                "is_editable": s.is_editable,
            }
            for s in self.repo.get_by_category(category)
        ]

    def get_categories(self) -> List[str]:
        return self.repo.get_categories()

    def set(self, key: str, value: Any) -> bool:
        setting = self.repo.get_by_key(key)
        if not setting:
            raise NotFoundError(f"Setting '{key}' not found")
        if not setting.is_editable:
            raise AuthorizationError(f"Setting '{key}' is not editable")

        self.repo.update_value(
            setting,
            serialize_setting_value(value, setting.setting_type),
            updated_by=self.current_user.id if self.current_user else None,
        )
        self.clear_cache()
        logger.info(f"Setting {key} updated")
        return True

    def update_many(self, values: Dict[str, Any]) -> Dict[str, Any]:
        updated, failed = [], {}
        for key, value in values.items():
            try:
                self.set(key, value)
                updated.append(key)
            except (NotFoundError, AuthorizationError, ValidationError) as e:
                failed[key] = e.message
        return {"updated": updated, "failed": failed}

    def seed_defaults(self):
        for default in DEFAULT_SYSTEM_SETTINGS:
            if self.repo.get_by_key(default["setting_key"]) is None:
                self.repo.create(dict(default))
        self.clear_cache()


class ClinicalSettingsService:
    """Clinical documentation settings"""

    def __init__(self, db):
        self.db = db
        self.repo = ClinicalSettingsRepository(db)

    def get_all(self) -> Dict[str, Any]:
        rows = self.repo.get_all()
        settings_map = {}
        detailed = []
        for row in rows:
            value = cast_setting_value(row.setting_value, row.setting_type)
            settings_map[row.setting_key] = value
            detailed.append({
                "key": row.setting_key,
                "value": value,
                "type": row.setting_type,
                "description": row.description,
            })
        return {"settings": settings_map, "settings_detailed": detailed, "total_count": len(rows)}

    def get_bool(self, key: str, default: bool = False) -> bool:
        row = self.repo.get_by_key(key)
        if row is None or row.setting_value is None:
            return default
        return str(row.setting_value).strip().lower() in _TRUE_VALUES

    def update(self, key: str, value: Any) -> ClinicalSetting:
        row = self.repo.get_by_key(key)
        if not row:
            raise NotFoundError(f"Clinical setting '{key}' not found")
        self.repo.update_value(row, serialize_setting_value(value, row.setting_type))
        return row

    def seed_defaults(self):
        for default in DEFAULT_CLINICAL_SETTINGS:
            if self.repo.get_by_key(default["setting_key"]) is None:
                self.repo.create(dict(default))


def seed_default_settings(db):
    """Insert default settings rows that do not exist yet"""
    SettingsService(db).seed_defaults()
    ClinicalSettingsService(db).seed_defaults()
