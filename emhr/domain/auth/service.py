from typing import Optional, List, Tuple
from datetime import date
import logging

from emhr.core.config import settings
from emhr.core.exceptions import (
    AuthenticationError, ConflictError, NotFoundError, ValidationError
)
from emhr.core.security import (
    verify_password,
    get_password_hash,
    generate_session_token,
    session_expiry,
    create_session_cookie,
    verify_session_cookie,
)
from emhr.domain.auth.models import User, UserSession, UserSupervisor
from emhr.domain.auth.repository import UserRepository, UserSessionRepository, SupervisionRepository
from emhr.domain.audit.service import AuditLogger

logger = logging.getLogger(__name__)


class AuthenticationService:
    """Service layer for session login/logout"""

    def __init__(self, db, ip_address: Optional[str] = None, user_agent: Optional[str] = None):
        self.db = db
        self.ip_address = ip_address
        self.user_agent = user_agent
        self.user_repo = UserRepository(db)
        self.session_repo = UserSessionRepository(db)
        self.audit = AuditLogger(db, ip_address=ip_address, user_agent=user_agent)

    def login(self, username: Optional[str], password: Optional[str]) -> Tuple[User, str]:
        """Authenticate and open a session; returns the user and cookie value"""
        if not username or not password:
            raise ValidationError("Username and password are required")

        user = self.user_repo.get_by_username(username)
        if not user or not user.is_active:
            self.audit.login_failure(username, "unknown_or_inactive_user")
            raise AuthenticationError("Invalid username or password")

        if user.locked_until is not None:
            if user.is_locked():
                self.audit.login_failure(username, "account_locked")
                raise AuthenticationError(
                    "Account is locked due to too many failed login attempts. Try again later.",
                    error_code="ACCOUNT_LOCKED"
                )
            # Lockout window has passed
            self.user_repo.unlock(user)

        if not verify_password(password, user.password_hash):
            locked = self.user_repo.record_failed_login(
                user, settings.MAX_LOGIN_ATTEMPTS, settings.LOCKOUT_DURATION_MINUTES
            )
            if locked:
                logger.warning(f"Account {username} locked after {user.failed_login_attempts} failed attempts")
                self.audit.account_locked(user.id, username)
            else:
                self.audit.login_failure(username)
            raise AuthenticationError("Invalid username or password")

        self.user_repo.record_successful_login(user)

        session_token = generate_session_token()
        self.session_repo.create({
            "user_id": user.id,
            "session_token": session_token,
            "ip_address": self.ip_address,
            "user_agent": (self.user_agent or "")[:500] or None,
            "expires_at": session_expiry(),
        })
        self.audit.login_success(user.id, user.username)
        logger.info(f"User {user.username} logged in")

        return user, create_session_cookie(session_token, user.id)

    def resolve_session(self, cookie_value: Optional[str]) -> Tuple[User, UserSession]:
        """Validate the cookie and slide the session expiry"""
        if not cookie_value:
            raise AuthenticationError("Not authenticated")

        payload = verify_session_cookie(cookie_value)
        if not payload:
            raise AuthenticationError("Not authenticated")

        session = self.session_repo.get_active_by_token(payload["sid"])
        if not session or session.is_expired():
            raise AuthenticationError("Session expired", error_code="SESSION_EXPIRED")

        user = self.user_repo.get_by_id(session.user_id)
        if not user or not user.is_active:
            raise AuthenticationError("Not authenticated")

        self.session_repo.touch(session, session_expiry())
        return user, session

    def logout(self, user: User, session: UserSession):
        self.session_repo.revoke(session)
        AuditLogger(self.db, user, self.ip_address, self.user_agent).logout()
        logger.info(f"User {user.username} logged out")


class UserService:
    """Staff administration and supervision links"""

    def __init__(self, db, current_user: Optional[User] = None):
        self.db = db
        self.current_user = current_user
        self.user_repo = UserRepository(db)
        self.supervision_repo = SupervisionRepository(db)
        self.audit = AuditLogger(db, current_user)

    def get_user(self, user_id: int) -> User:
        user = self.user_repo.get_by_id(user_id)
        if not user:
            raise NotFoundError("User not found")
        return user

    def list_users(self, include_inactive: bool = False) -> List[User]:
        return self.user_repo.get_all(include_inactive=include_inactive)

    def list_providers(self) -> List[User]:
        return self.user_repo.get_providers()

    def _validate_password(self, password: str):
        if len(password) < settings.PASSWORD_MIN_LENGTH:
            raise ValidationError(
                f"Password must be at least {settings.PASSWORD_MIN_LENGTH} characters"
            )

    def create_user(self, user_data: dict) -> User:
        if self.user_repo.get_by_username(user_data["username"]):
            raise ConflictError("Username already exists")

        password = user_data.pop("password")
        self._validate_password(password)
        user_data["password_hash"] = get_password_hash(password)

        user = self.user_repo.create(user_data)
        self.audit.create_user(user.id, user.username, user.user_type.value)
        return user

    def update_user(self, user_id: int, update_data: dict) -> User:
        user = self.get_user(user_id)

        password = update_data.pop("password", None)
        if password is not None:
            self._validate_password(password)
            update_data["password_hash"] = get_password_hash(password)

        if update_data.get("is_active") is True:
            update_data.setdefault("locked_until", None)
            update_data.setdefault("failed_login_attempts", 0)

        changed = sorted(k for k in update_data if k != "password_hash") + (["password"] if password else [])
        user = self.user_repo.update(user, update_data)
        self.audit.edit_user(user.id, changed)
        return user

    # Supervision

    def get_supervisors(self, user_id: int) -> List[UserSupervisor]:
        self.get_user(user_id)
        return self.supervision_repo.get_supervisors(user_id)

    def get_supervisees(self, supervisor_id: int) -> List[UserSupervisor]:
        return self.supervision_repo.get_supervisees(supervisor_id)

    def assign_supervisor(self, user_id: int, supervisor_id: int) -> UserSupervisor:
        self.get_user(user_id)
        supervisor = self.get_user(supervisor_id)

        if user_id == supervisor_id:
            raise ValidationError("A user cannot supervise themselves")
        if not supervisor.is_supervisor:
            raise ValidationError("Selected user is not a supervisor")
        if self.supervision_repo.get_active_link(user_id, supervisor_id):
            raise ConflictError("Supervision relationship already exists")

        return self.supervision_repo.create({
            "user_id": user_id,
            "supervisor_id": supervisor_id,
            "started_at": date.today(),
        })

    def end_supervision(self, user_id: int, supervisor_id: int) -> UserSupervisor:
        link = self.supervision_repo.get_active_link(user_id, supervisor_id)
        if not link:
            raise NotFoundError("Supervision relationship not found")
        self.supervision_repo.end(link, date.today())
        return link

