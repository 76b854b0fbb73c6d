from typing import Optional, List
from datetime import datetime, timedelta

from emhr.core.permissions import active_on
from emhr.domain.auth.models import User, UserSession, UserSupervisor


class UserRepository:
    """Repository for staff user data access operations"""

    def __init__(self, db):
        self.db = db

    def create(self, user_data: dict) -> User:
        user = User(**user_data)
        self.db.add(user)
        self.db.commit()
        self.db.refresh(user)
        return user

    def get_by_id(self, user_id: int) -> Optional[User]:
        return self.db.query(User).filter(User.id == user_id, User.deleted_at.is_(None)).first()

    def get_by_username(self, username: str) -> Optional[User]:
        return self.db.query(User).filter(User.username == username, User.deleted_at.is_(None)).first()

    def get_all(self, include_inactive: bool = False) -> List[User]:
        query = self.db.query(User).filter(User.deleted_at.is_(None))
        if not include_inactive:
            query = query.filter(User.is_active.is_(True))
        return query.order_by(User.lname, User.fname).all()

    def get_providers(self) -> List[User]:
        return self.db.query(User).filter(
            User.deleted_at.is_(None),
            User.is_active.is_(True),
            User.is_provider.is_(True)
        ).order_by(User.lname, User.fname).all()

    def update(self, user: User, update_data: dict) -> User:
        for field, value in update_data.items():
            setattr(user, field, value)
        self.db.commit()
        self.db.refresh(user)
        return user

    def record_failed_login(self, user: User, max_attempts: int, lockout_minutes: int) -> bool:
        """Increment the failure counter; returns True when the account got locked"""
        user.failed_login_attempts = (user.failed_login_attempts or 0) + 1
        locked = user.failed_login_attempts >= max_attempts
        if locked:
            user.locked_until = datetime.utcnow() + timedelta(minutes=lockout_minutes)
        self.db.commit()
        return locked

    def unlock(self, user: User):
        user.locked_until = None
        user.failed_login_attempts = 0
        self.db.commit()

    def record_successful_login(self, user: User):
        user.failed_login_attempts = 0
        user.locked_until = None
        user.last_login = datetime.utcnow()
        self.db.commit()


class UserSessionRepository:
    """Repository for login sessions"""

    def __init__(self, db):
        self.db = db

    def create(self, session_data: dict) -> UserSession:
        session = UserSession(**session_data)
        self.db.add(session)
        self.db.commit()
        self.db.refresh(session)
        return session

    def get_active_by_token(self, session_token: str) -> Optional[UserSession]:
        return self.db.query(UserSession).filter(
            UserSession.session_token == session_token,
            UserSession.is_active.is_(True)
        ).first()

    def touch(self, session: UserSession, expires_at: datetime):
        session.last_accessed_at = datetime.utcnow()
        session.expires_at = expires_at
        self.db.commit()

    def revoke(self, session: UserSession):
        session.revoke()
        self.db.commit()


class SupervisionRepository:
    """Repository for supervisor/supervisee links"""

    def __init__(self, db):
        self.db = db

    def create(self, link_data: dict) -> UserSupervisor:
        link = UserSupervisor(**link_data)
        self.db.add(link)
        self.db.commit()
        self.db.refresh(link)
        return link

    def get_active_link(self, user_id: int, supervisor_id: int) -> Optional[UserSupervisor]:
        return self.db.query(UserSupervisor).filter(
            UserSupervisor.user_id == user_id,
            UserSupervisor.supervisor_id == supervisor_id,
            active_on(UserSupervisor.ended_at)
        ).first()

    def get_supervisors(self, user_id: int) -> List[UserSupervisor]:
        return self.db.query(UserSupervisor).filter(
            UserSupervisor.user_id == user_id,
            active_on(UserSupervisor.ended_at)
        ).all()

    def get_supervisees(self, supervisor_id: int) -> List[UserSupervisor]:
        return self.db.query(UserSupervisor).filter(
            UserSupervisor.supervisor_id == supervisor_id,
            active_on(UserSupervisor.ended_at)
        ).all()

    def has_active_supervisor(self, user_id: int) -> bool:
        return self.db.query(UserSupervisor.id).filter(
            UserSupervisor.user_id == user_id,
            active_on(UserSupervisor.ended_at)
        ).first() is not None

    def end(self, link: UserSupervisor, ended_at):
        link.ended_at = ended_at
        self.db.commit()
