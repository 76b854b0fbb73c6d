from pydantic import EmailStr, Field
from typing import Optional, List
from datetime import date, datetime

from emhr.api.v1.common import CamelModel
from emhr.domain.auth.models import UserType


class UserCreate(CamelModel):
    """Schema for creating a staff user"""
    username: str = Field(..., min_length=3, max_length=50)
    password: str = Field(..., max_length=128)
    fname: str = Field(..., min_length=1, max_length=100)
    lname: str = Field(..., min_length=1, max_length=100)
    email: Optional[EmailStr] = None
    title: Optional[str] = Field(None, max_length=50)
    npi: Optional[str] = Field(None, max_length=20)
    user_type: UserType = UserType.USER
    is_provider: bool = False
    is_supervisor: bool = False
    is_social_worker: bool = False


class UserUpdate(CamelModel):
    """Schema for updating a staff user"""
    fname: Optional[str] = Field(None, min_length=1, max_length=100)
    lname: Optional[str] = Field(None, min_length=1, max_length=100)
    email: Optional[EmailStr] = None
    title: Optional[str] = Field(None, max_length=50)
    npi: Optional[str] = Field(None, max_length=20)
    user_type: Optional[UserType] = None
    is_provider: Optional[bool] = None
    is_supervisor: Optional[bool] = None
    is_social_worker: Optional[bool] = None
    is_active: Optional[bool] = None
    password: Optional[str] = Field(None, max_length=128)


class UserResponse(CamelModel):
    id: int
    username: str
    fname: str
    lname: str
    full_name: str
    email: Optional[str] = None
    title: Optional[str] = None
    npi: Optional[str] = None
    user_type: UserType
    is_provider: bool
    is_supervisor: bool
    is_social_worker: bool
    is_active: bool
    last_login: Optional[datetime] = None
    created_at: Optional[datetime] = None


class UserListResponse(CamelModel):
    success: bool = True
    users: List[UserResponse]
    count: int


class UserDetailResponse(CamelModel):
    success: bool = True
    user: UserResponse


class SupervisorAssign(CamelModel):
    supervisor_id: int


class SupervisionResponse(CamelModel):
    """One supervision link with both parties' names"""
    id: int
    user_id: int
    supervisor_id: int
    user_name: Optional[str] = None
    supervisor_name: Optional[str] = None
    started_at: date
    ended_at: Optional[date] = None


class SupervisionListResponse(CamelModel):
    success: bool = True
    relationships: List[SupervisionResponse]
    count: int
