"""Employee schemas"""
from typing import Optional
from pydantic import BaseModel, Field
from datetime import datetime


class EmployeeCreate(BaseModel):
    username: str = Field(..., min_length=1, max_length=100)
    password: str = Field(..., min_length=6)
    name: Optional[str] = None
    phone: Optional[str] = None
    role: Optional[str] = None
    can_manage_inventory: bool = True
    can_manage_orders: bool = True
    can_chat: bool = True
    can_change_status: bool = True
    can_rate: bool = False
    status_active: bool = True


class EmployeeUpdate(BaseModel):
    username: Optional[str] = Field(None, min_length=1, max_length=100)
    password: Optional[str] = Field(None, min_length=6)
    name: Optional[str] = None
    phone: Optional[str] = None
    role: Optional[str] = None
    profile_pic_url: Optional[str] = None
    can_manage_inventory: Optional[bool] = None
    can_manage_orders: Optional[bool] = None
    can_chat: Optional[bool] = None
    can_change_status: Optional[bool] = None
    can_rate: Optional[bool] = None
    status_active: Optional[bool] = None


class EmployeeResponse(BaseModel):
    id: int
    owner_user_id: int
    username: str
    name: Optional[str] = None
    phone: Optional[str] = None
    role: Optional[str] = None
    profile_pic_url: Optional[str] = None
    can_manage_inventory: bool
    can_manage_orders: bool
    can_chat: bool
    can_change_status: bool
    can_rate: bool
    status_active: bool
    last_login: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
