"""Bug reports - any signed-in client files them, level 1 admins triage them"""

from datetime import datetime
from typing import Any, Optional
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from trading_road.core.deps import get_db, get_current_principal, require_admin_level, Principal
from trading_road.core.logging_config import get_logger
from trading_road.models.bug_report import BugReport, BUG_OPEN, RESOLVING_STATUSES
from trading_road.schemas.bug_report import (
    BugReportCreate, BugReportUpdate, BugReportResponse, BugReportListResponse
)
from trading_road.schemas.pagination import build_pagination, normalize_paging

logger = get_logger(__name__)

router = APIRouter()


async def _load_report(db: AsyncSession, report_id: int) -> BugReport:
    result = await db.execute(
        select(BugReport)
        .options(selectinload(BugReport.user), selectinload(BugReport.resolved_by_user))
        .where(BugReport.id == report_id, BugReport.deleted_at.is_(None))
        .execution_options(populate_existing=True)
    )
    report = result.scalar_one_or_none()
    if not report:
        raise HTTPException(status_code=404, detail="bug report not found")
    return report


@router.post("", response_model=BugReportResponse, status_code=201)
async def create_bug_report(
    *,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
    report_in: BugReportCreate) -> Any:
    report = BugReport(**report_in.model_dump(), user_id=principal.user_id, status=BUG_OPEN)
    db.add(report)
    await db.commit()
    logger.info(f"Bug report {report.id} filed from {report.platform} by user {principal.user_id}")
    return await _load_report(db, report.id)


@router.get("", response_model=BugReportListResponse)
async def read_bug_reports(
    *,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(require_admin_level(1)),
    page: int = Query(1),
    limit: int = Query(50),
    status: Optional[str] = Query(None),
    platform: Optional[str] = Query(None)) -> Any:
    page, limit = normalize_paging(page, limit)

    conditions = [BugReport.deleted_at.is_(None)]
    if status:
        conditions.append(BugReport.status == status)
    if platform:
        conditions.append(BugReport.platform == platform)

    total = (await db.execute(select(func.count(BugReport.id)).where(*conditions))).scalar() or 0

    result = await db.execute(
        select(BugReport)
        .options(selectinload(BugReport.user), selectinload(BugReport.resolved_by_user))
        .where(*conditions)
        .order_by(BugReport.created_at.desc(), BugReport.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
    )
    reports = [BugReportResponse.model_validate(r) for r in result.scalars().all()]
    return BugReportListResponse(data=reports, pagination=build_pagination(page, limit, total))


@router.get("/{report_id}", response_model=BugReportResponse)
async def read_bug_report(
    *,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(require_admin_level(1)),
    report_id: int) -> Any:
    return await _load_report(db, report_id)


@router.put("/{report_id}", response_model=BugReportResponse)
async def update_bug_report(
    *,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(require_admin_level(1)),
    report_id: int,
    report_in: BugReportUpdate) -> Any:
    report = await _load_report(db, report_id)
    update_data = report_in.model_dump(exclude_unset=True)

    status = update_data.get("status")
    if status:
        if status in RESOLVING_STATUSES:
            report.resolved_by = principal.user_id
            report.resolved_at = datetime.utcnow()
        report.status = status
    if update_data.get("notes") is not None:
        report.notes = update_data["notes"]

    await db.commit()
    return await _load_report(db, report_id)


@router.delete("/{report_id}")
async def delete_bug_report(
    *,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(require_admin_level(1)),
    report_id: int) -> Any:
    report = await _load_report(db, report_id)
    report.deleted_at = datetime.utcnow()
    await db.commit()
    return {"message": "bug report deleted"}
