"""User schemas - profiles, profile updates and the supplier/store directory"""
from typing import Optional, List
from pydantic import BaseModel, Field, field_validator
from datetime import datetime

from trading_road.services.business_hours import parse_hhmm, validate_closed_days


class UserBrief(BaseModel):
    """Counterparty summary embedded in orders, messages and ratings"""
    id: int
    email: str
    name: str
    phone: Optional[str] = None
    address: Optional[str] = None
    role: str
    logo_url: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None

    class Config:
        from_attributes = True


class UserResponse(UserBrief):
    """Full profile; the password hash is never part of it"""
    banner_url: Optional[str] = None
    facebook: Optional[str] = None
    instagram: Optional[str] = None
    twitter: Optional[str] = None
    linkedin: Optional[str] = None
    youtube: Optional[str] = None
    tiktok: Optional[str] = None
    website: Optional[str] = None
    admin_level: Optional[int] = None
    opening_time: Optional[str] = None
    closing_time: Optional[str] = None
    closed_days_of_week: Optional[str] = None
    is_open: bool = True
    fcm_token: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    last_login: Optional[datetime] = None

    class Config:
        from_attributes = True


class UserUpdate(BaseModel):
    """PUT /me - every field optional, only the ones sent are applied"""
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    phone: Optional[str] = Field(None, max_length=50)
    address: Optional[str] = Field(None, max_length=500)
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)
    logo_url: Optional[str] = None
    banner_url: Optional[str] = None
    facebook: Optional[str] = None
    instagram: Optional[str] = None
    twitter: Optional[str] = None
    linkedin: Optional[str] = None
    youtube: Optional[str] = None
    tiktok: Optional[str] = None
    website: Optional[str] = None
    opening_time: Optional[str] = None
    closing_time: Optional[str] = None
    closed_days_of_week: Optional[str] = None
    fcm_token: Optional[str] = None

    @field_validator("opening_time", "closing_time")
    @classmethod
    def check_time(cls, v: Optional[str]) -> Optional[str]:
        if v is None or not v.strip():
            return v
        try:
            parse_hhmm(v)
        except ValueError:
            raise ValueError("time must be in HH:MM format")
        return v.strip()

    @field_validator("closed_days_of_week")
    @classmethod
    def check_closed_days(cls, v: Optional[str]) -> Optional[str]:
        return validate_closed_days(v)


class DirectoryEntry(BaseModel):
    """A supplier or store as listed to its trading counterparts"""
    id: int
    name: str
    email: str
    phone: Optional[str] = None
    address: Optional[str] = None
    logo_url: Optional[str] = None
    banner_url: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    opening_time: Optional[str] = None
    closing_time: Optional[str] = None
    closed_days_of_week: Optional[str] = None
    is_open: bool
    average_rating: Optional[float] = None
    rating_count: int = 0


class SupplierEntry(DirectoryEntry):
    product_count: int = 0


class StoreEntry(DirectoryEntry):
    pass
