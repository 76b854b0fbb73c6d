from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from emhr.domain.auth.models import User
from emhr.domain.settings.service import SettingsService, ClinicalSettingsService
from emhr.api.deps import get_current_user, require_admin
from emhr.api.v1.common import SuccessResponse
from emhr.api.v1.settings.schemas import (
    SettingsCategoryResponse,
    SettingsCategoriesResponse,
    SettingsUpdateRequest,
    SettingsUpdateResponse,
    ClinicalSettingsResponse,
    ClinicalSettingUpdate,
)
from emhr.infrastructure.database import get_db

router = APIRouter(tags=["Settings"])


# ==================== System Settings Endpoints ====================

@router.get("/settings", response_model=SettingsCategoryResponse)
def get_settings(
    category: str = Query("general"),
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Settings in one category (admin only)"""
    settings = SettingsService(db, current_user).get_by_category(category)
    return SettingsCategoryResponse(category=category, settings=settings)


@router.get("/settings/categories", response_model=SettingsCategoriesResponse)
def get_setting_categories(
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    return SettingsCategoriesResponse(categories=SettingsService(db, current_user).get_categories())


@router.put("/settings", response_model=SettingsUpdateResponse)
def update_settings(
    update_data: SettingsUpdateRequest,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Update several settings; keys that cannot be changed are reported in ``failed``"""
    result = SettingsService(db, current_user).update_many(update_data.settings)
    return SettingsUpdateResponse(success=not result["failed"], **result)


# ==================== Clinical Settings Endpoints ====================

@router.get("/clinical-settings", response_model=ClinicalSettingsResponse)
def get_clinical_settings(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return ClinicalSettingsResponse(**ClinicalSettingsService(db).get_all())


@router.put("/clinical-settings/{setting_key}", response_model=SuccessResponse)
def update_clinical_setting(
    setting_key: str,
    update_data: ClinicalSettingUpdate,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    ClinicalSettingsService(db).update(setting_key, update_data.value)
    return SuccessResponse(message=f"Clinical setting '{setting_key}' updated")
