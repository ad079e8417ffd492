"""
Order core helpers
- base query with the relations every response needs
- ownership scoping
- response building
- total recalculation
"""

from typing import List, Optional
from fastapi import HTTPException
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from trading_road.core.deps import Principal
from trading_road.models.order import Order, OrderItem
from trading_road.models.rating import Rating
from trading_road.schemas.order import OrderResponse
from trading_road.schemas.rating import RatingResponse


def base_order_query():
    """Order query with store, supplier, items and item products loaded"""
    return select(Order).options(
        selectinload(Order.store),
        selectinload(Order.supplier),
        selectinload(Order.order_items).selectinload(OrderItem.product))


def scope_to_principal(query, principal: Principal):
    """Suppliers and stores only see their own orders; admins see everything"""
    if principal.is_supplier:
        return query.where(Order.supplier_id == principal.user_id)
    if principal.is_store:
        return query.where(Order.store_id == principal.user_id)
    return query


async def load_order(
    db: AsyncSession,
    order_id: int,
    principal: Optional[Principal] = None) -> Optional[Order]:
    """Load an order with its relations, refreshing anything already in the session"""
    query = base_order_query().where(Order.id == order_id)
    if principal is not None:
        query = scope_to_principal(query, principal)
    result = await db.execute(query.execution_options(populate_existing=True))
    return result.scalar_one_or_none()


async def get_order_or_404(
    db: AsyncSession,
    order_id: int,
    principal: Principal,
    detail: str = "order not found") -> Order:
    order = await load_order(db, order_id, principal)
    if not order:
        raise HTTPException(status_code=404, detail=detail)
    return order


async def load_ratings(db: AsyncSession, order_id: int) -> List[Rating]:
    result = await db.execute(
        select(Rating)
        .options(selectinload(Rating.rater), selectinload(Rating.rated))
        .where(Rating.order_id == order_id)
        .order_by(Rating.created_at)
    )
    return list(result.scalars().all())


async def recalculate_total(db: AsyncSession, order: Order) -> float:
    """Draft total is the sum of its line subtotals"""
    await db.flush()
    result = await db.execute(
        select(func.coalesce(func.sum(OrderItem.subtotal), 0)).where(OrderItem.order_id == order.id)
    )
    order.total_amount = round(float(result.scalar() or 0), 2)
    return order.total_amount


def build_order_response(order: Order, ratings: Optional[List[Rating]] = None) -> OrderResponse:
    resp = OrderResponse.model_validate(order)
    if ratings is not None:
        resp.ratings = [RatingResponse.model_validate(r) for r in ratings]
    return resp
