from typing import Optional, Tuple
from fastapi import Depends, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from emhr.core.config import settings
from emhr.core.exceptions import AuthorizationError
from emhr.domain.audit.service import AuditLogger
from emhr.domain.auth.models import User, UserSession
from emhr.domain.auth.service import AuthenticationService
from emhr.infrastructure.database import get_db

# The session cookie is the primary credential; API clients may send the
# same signed value as a bearer token instead.
bearer_scheme = HTTPBearer(auto_error=False)


def get_client_ip(request: Request) -> Optional[str]:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else None


def get_user_agent(request: Request) -> Optional[str]:
    return request.headers.get("user-agent")


def get_auth_service(request: Request, db: Session = Depends(get_db)) -> AuthenticationService:
    return AuthenticationService(db, ip_address=get_client_ip(request), user_agent=get_user_agent(request))


def get_current_session(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    auth_service: AuthenticationService = Depends(get_auth_service),
) -> Tuple[User, UserSession]:
    token = request.cookies.get(settings.SESSION_COOKIE_NAME)
    if not token and credentials:
        token = credentials.credentials
    return auth_service.resolve_session(token)


def get_current_user(
    current: Tuple[User, UserSession] = Depends(get_current_session),
) -> User:
    return current[0]


def require_admin(current_user: User = Depends(get_current_user)) -> User:
    if not current_user.is_admin:
        raise AuthorizationError("Access denied - admin role required")
    return current_user


def get_audit_logger(
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> AuditLogger:
    return AuditLogger(db, current_user, ip_address=get_client_ip(request), user_agent=get_user_agent(request))
