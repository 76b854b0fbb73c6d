from pydantic import Field
from typing import Optional

from emhr.api.v1.common import CamelModel
from emhr.domain.auth.models import UserType


class LoginRequest(CamelModel):
    """Schema for login request. Missing fields are reported by the service."""
    username: Optional[str] = None
    password: Optional[str] = None


class SessionUser(CamelModel):
    """Profile of the logged-in user"""
    id: int
    username: str
    fname: str
    lname: str
    full_name: str
    email: Optional[str] = None
    user_type: UserType
    is_provider: bool
    is_supervisor: bool
    is_social_worker: bool
    admin: bool = Field(False, validation_alias="is_admin", serialization_alias="admin")


class LoginResponse(CamelModel):
    success: bool = True
    user: SessionUser


class SessionResponse(CamelModel):
    success: bool = True
    user: SessionUser
