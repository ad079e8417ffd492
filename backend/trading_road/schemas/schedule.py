"""Schedule exception schemas"""
from typing import Optional, List
from pydantic import BaseModel, Field, field_validator
from datetime import date, datetime

from trading_road.services.business_hours import parse_hhmm


def _check_hhmm(v: Optional[str]) -> Optional[str]:
    if v is None or not v.strip():
        return None
    try:
        parse_hhmm(v)
    except ValueError:
        raise ValueError("time must be in HH:MM format")
    return v.strip()


class ScheduleExceptionCreate(BaseModel):
    # Parsed in the endpoint so a bad date gets a specific message
    date: str = Field(..., min_length=1)
    is_closed: bool = False
    opening_time: Optional[str] = None
    closing_time: Optional[str] = None
    notes: Optional[str] = None

    @field_validator("opening_time", "closing_time")
    @classmethod
    def check_time(cls, v: Optional[str]) -> Optional[str]:
        return _check_hhmm(v)


class ScheduleExceptionBulkCreate(BaseModel):
    dates: List[str] = Field(..., min_length=1)
    is_closed: bool = False
    notes: Optional[str] = None


class ScheduleExceptionUpdate(BaseModel):
    is_closed: Optional[bool] = None
    opening_time: Optional[str] = None
    closing_time: Optional[str] = None
    notes: Optional[str] = None

    @field_validator("opening_time", "closing_time")
    @classmethod
    def check_time(cls, v: Optional[str]) -> Optional[str]:
        return _check_hhmm(v)


class ScheduleExceptionResponse(BaseModel):
    id: int
    user_id: int
    date: date
    is_closed: bool
    opening_time: Optional[str] = None
    closing_time: Optional[str] = None
    notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class ScheduleExceptionBulkResponse(BaseModel):
    created: int
    exceptions: List[ScheduleExceptionResponse]
