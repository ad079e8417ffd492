"""Admin dashboard and public landing page counters"""

from typing import Any
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from trading_road.core.deps import get_db, require_admin_level, Principal
from trading_road.schemas.analytics import DashboardAnalytics, PublicMetrics
from trading_road.services.analytics import dashboard_analytics, public_metrics

router = APIRouter()


@router.get("/dashboard/analytics", response_model=DashboardAnalytics)
async def read_dashboard_analytics(
    *,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(require_admin_level(3))) -> Any:
    return await dashboard_analytics(db)


@router.get("/public/metrics", response_model=PublicMetrics)
async def read_public_metrics(
    *,
    db: AsyncSession = Depends(get_db)) -> Any:
    return await public_metrics(db)
