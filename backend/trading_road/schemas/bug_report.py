"""Bug report schemas"""
from typing import Optional, List
from pydantic import BaseModel, Field, field_validator
from datetime import datetime

from trading_road.models.bug_report import BUG_STATUSES
from trading_road.schemas.pagination import Pagination
from trading_road.schemas.user import UserBrief


class BugReportCreate(BaseModel):
    platform: str = Field(..., min_length=1, max_length=50)
    title: str = Field(..., min_length=1, max_length=255)
    description: str = Field(..., min_length=1)
    error_type: Optional[str] = Field(None, max_length=100)
    stack_trace: Optional[str] = None
    device_info: Optional[str] = None
    app_version: Optional[str] = Field(None, max_length=50)
    os_version: Optional[str] = Field(None, max_length=50)


class BugReportUpdate(BaseModel):
    status: Optional[str] = None
    notes: Optional[str] = None

    @field_validator("status")
    @classmethod
    def check_status(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and v not in BUG_STATUSES:
            raise ValueError(f"status must be one of: {', '.join(BUG_STATUSES)}")
        return v


class BugReportResponse(BaseModel):
    id: int
    user_id: Optional[int] = None
    user: Optional[UserBrief] = None
    platform: str
    title: str
    description: str
    error_type: Optional[str] = None
    stack_trace: Optional[str] = None
    device_info: Optional[str] = None
    app_version: Optional[str] = None
    os_version: Optional[str] = None
    status: str
    resolved_by: Optional[int] = None
    resolved_by_user: Optional[UserBrief] = None
    resolved_at: Optional[datetime] = None
    notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class BugReportListResponse(BaseModel):
    data: List[BugReportResponse]
    pagination: Pagination
