"""Audit log browsing for level 1 admins"""

from typing import Any, Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from trading_road.core.deps import get_db, require_admin_level, Principal
from trading_road.models.audit_log import AuditLog
from trading_road.schemas.audit_log import AuditLogResponse, AuditLogListResponse
from trading_road.schemas.pagination import build_pagination, normalize_paging

router = APIRouter()


@router.get("", response_model=AuditLogListResponse)
async def read_audit_logs(
    *,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(require_admin_level(1)),
    page: int = Query(1),
    limit: int = Query(50),
    role: Optional[str] = Query(None),
    user_id: Optional[str] = Query(None),
    endpoint: Optional[str] = Query(None)) -> Any:
    page, limit = normalize_paging(page, limit)

    conditions = []
    if role:
        conditions.append(AuditLog.role == role)
    # Non-numeric ids are ignored rather than rejected
    if user_id and user_id.isdigit():
        conditions.append(AuditLog.user_id == int(user_id))
    if endpoint:
        conditions.append(AuditLog.endpoint.contains(endpoint, autoescape=True))

    total = (await db.execute(select(func.count(AuditLog.id)).where(*conditions))).scalar() or 0

    result = await db.execute(
        select(AuditLog)
        .where(*conditions)
        .order_by(AuditLog.created_at.desc(), AuditLog.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
    )
    logs = [AuditLogResponse.model_validate(row) for row in result.scalars().all()]
    return AuditLogListResponse(data=logs, pagination=build_pagination(page, limit, total))
