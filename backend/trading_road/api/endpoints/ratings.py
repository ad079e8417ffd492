"""Ratings overview for platform admins"""

from typing import Any
from fastapi import APIRouter, Depends
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased

from trading_road.core.deps import get_db, require_admin_level, Principal
from trading_road.models.order import Order
from trading_road.models.rating import Rating
from trading_road.models.user import User, ROLE_SUPPLIER, ROLE_STORE
from trading_road.schemas.rating import (
    RatingsSummaryResponse, SupplierRatingSummary, StoreRatingSummary, OrderWithRatings,
    RatedOrdersResponse,
)

router = APIRouter()


async def _averages_by_role(db: AsyncSession, role: str):
    result = await db.execute(
        select(Rating.rated_id, User.name, func.avg(Rating.rating), func.count(Rating.id))
        .join(User, User.id == Rating.rated_id)
        .where(User.role == role)
        .group_by(Rating.rated_id, User.name)
        .order_by(Rating.rated_id)
    )
    return result.all()


@router.get("/summary", response_model=RatingsSummaryResponse)
async def ratings_summary(
    *,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(require_admin_level(1))) -> Any:
    suppliers = [
        SupplierRatingSummary(
            supplier_id=rated_id, supplier_name=name,
            average_rating=round(float(average), 2), rating_count=count,
        )
        for rated_id, name, average, count in await _averages_by_role(db, ROLE_SUPPLIER)
    ]
    stores = [
        StoreRatingSummary(
            store_id=rated_id, store_name=name,
            average_rating=round(float(average), 2), rating_count=count,
        )
        for rated_id, name, average, count in await _averages_by_role(db, ROLE_STORE)
    ]

    store_user = aliased(User)
    supplier_user = aliased(User)
    result = await db.execute(
        select(Rating.order_id, store_user.name, supplier_user.name, func.count(Rating.id))
        .join(Order, Order.id == Rating.order_id)
        .join(store_user, store_user.id == Order.store_id)
        .join(supplier_user, supplier_user.id == Order.supplier_id)
        .group_by(Rating.order_id, store_user.name, supplier_user.name)
        .order_by(Rating.order_id)
    )
    orders = [
        OrderWithRatings(order_id=order_id, store_name=store_name, supplier_name=supplier_name, rating_count=count)
        for order_id, store_name, supplier_name, count in result.all()
    ]

    return RatingsSummaryResponse(suppliers=suppliers, stores=stores, orders_with_ratings=orders)


@router.get("/orders", response_model=RatedOrdersResponse)
async def rated_orders(
    *,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(require_admin_level(1))) -> Any:
    result = await db.execute(select(Rating.order_id).distinct().order_by(Rating.order_id))
    return RatedOrdersResponse(order_ids=list(result.scalars().all()))
