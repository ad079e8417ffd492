"""Audit log schemas"""

from datetime import datetime
from typing import Optional, List
from pydantic import BaseModel

from trading_road.schemas.pagination import Pagination


class AuditLogResponse(BaseModel):
    id: int
    user_id: Optional[int] = None
    employee_id: Optional[int] = None
    role: Optional[str] = None
    action: str
    endpoint: str
    method: str
    status_code: int
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    request_body: Optional[str] = None
    response_body: Optional[str] = None
    error_message: Optional[str] = None
    duration_ms: Optional[int] = None
    created_at: datetime

    class Config:
        from_attributes = True


class AuditLogListResponse(BaseModel):
    data: List[AuditLogResponse]
    pagination: Pagination
