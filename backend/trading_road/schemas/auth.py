"""Registration and login schemas"""
from typing import Optional, List
from pydantic import BaseModel, EmailStr, Field

from trading_road.schemas.user import UserResponse
from trading_road.schemas.employee import EmployeeResponse


class RegisterRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=6)
    name: str = Field(..., min_length=1, max_length=255)
    phone: str = Field(..., min_length=1, max_length=50)
    role: str
    address: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    logo_url: Optional[str] = None
    banner_url: Optional[str] = None
    facebook: Optional[str] = None
    instagram: Optional[str] = None
    twitter: Optional[str] = None
    linkedin: Optional[str] = None
    youtube: Optional[str] = None
    tiktok: Optional[str] = None
    website: Optional[str] = None


class AdminUserCreate(RegisterRequest):
    """POST /users/register - an admin creating an account"""
    admin_level: Optional[int] = None


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class UnifiedLoginRequest(BaseModel):
    """Owners log in with their e-mail, employees with their username"""
    email_or_username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class EmployeeLoginRequest(BaseModel):
    owner_email: EmailStr
    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class AuthResponse(BaseModel):
    token: str
    user: UserResponse
    feature_flags: List[str] = Field(default_factory=list)


class EmployeeAuthResponse(BaseModel):
    token: str
    user: UserResponse
    employee: EmployeeResponse
