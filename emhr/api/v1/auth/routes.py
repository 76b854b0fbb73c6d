from fastapi import APIRouter, Depends, Response, status
from typing import Tuple

from emhr.core.config import settings
from emhr.domain.auth.models import User, UserSession
from emhr.domain.auth.service import AuthenticationService
from emhr.api.deps import get_auth_service, get_current_session, get_current_user
from emhr.api.v1.common import SuccessResponse
from emhr.api.v1.auth.schemas import LoginRequest, LoginResponse, SessionResponse, SessionUser

router = APIRouter(prefix="/auth", tags=["Authentication"])


def _set_session_cookie(response: Response, value: str):
    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=value,
        max_age=settings.SESSION_LIFETIME_MINUTES * 60,
        httponly=True,
        secure=settings.SESSION_COOKIE_SECURE,
        samesite="lax",
    )


@router.post("/login", response_model=LoginResponse, status_code=status.HTTP_200_OK)
def login(
    login_data: LoginRequest,
    response: Response,
    auth_service: AuthenticationService = Depends(get_auth_service)
):
    """Authenticate and open a session cookie"""
    user, cookie = auth_service.login(login_data.username, login_data.password)
    _set_session_cookie(response, cookie)
    return LoginResponse(user=SessionUser.model_validate(user))


@router.post("/logout", response_model=SuccessResponse, status_code=status.HTTP_200_OK)
def logout(
    response: Response,
    current: Tuple[User, UserSession] = Depends(get_current_session),
    auth_service: AuthenticationService = Depends(get_auth_service)
):
    """Revoke the current session"""
    user, session = current
    auth_service.logout(user, session)
    response.delete_cookie(settings.SESSION_COOKIE_NAME)
    return SuccessResponse(message="Logged out successfully")


@router.get("/session", response_model=SessionResponse)
def session_user(current_user: User = Depends(get_current_user)):
    """Current user's profile"""
    return SessionResponse(user=SessionUser.model_validate(current_user))
