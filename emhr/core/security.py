from datetime import datetime, timedelta
from typing import Optional, Dict, Any
import secrets
import jwt
from passlib.context import CryptContext
from emhr.core.config import settings

# Password hashing
pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.BCRYPT_ROUNDS,
)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against its hash"""
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    """Generate password hash"""
    return pwd_context.hash(password)


def generate_session_token() -> str:
    """Random identifier for a server-side session row"""
    return secrets.token_urlsafe(32)


def session_expiry(now: Optional[datetime] = None) -> datetime:
    """Expiry timestamp for a session touched at ``now``"""
    return (now or datetime.utcnow()) + timedelta(minutes=settings.SESSION_LIFETIME_MINUTES)


def create_session_cookie(session_token: str, user_id: int) -> str:
    """Sign the session id into the cookie value"""
    to_encode: Dict[str, Any] = {
        "sid": session_token,
        "sub": str(user_id),
        "iat": datetime.utcnow(),
        "token_type": "session"
    }
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_token(token: str) -> Optional[Dict[str, Any]]:
    """Decode and validate JWT token"""
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
        return payload
    except jwt.PyJWTError:
        return None


def verify_session_cookie(token: str) -> Optional[Dict[str, Any]]:
    """Verify cookie signature and type, returning the payload"""
    payload = decode_token(token)
    if not payload:
        return None

    if payload.get("token_type") != "session" or not payload.get("sid"):
        return None

    return payload
