"""Rating a delivered order - each party rates the other once"""

from typing import Any
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from trading_road.core.deps import get_db, get_current_principal, ensure_permission, Principal
from trading_road.models.order import Order, STATUS_DELIVERED
from trading_road.models.rating import Rating
from trading_road.schemas.rating import RatingCreate, RatingResponse

router = APIRouter()


@router.post("/{order_id}/rating", response_model=RatingResponse, status_code=201)
async def create_rating(
    *,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
    order_id: int,
    body: RatingCreate) -> Any:
    order = await db.get(Order, order_id)
    if not order:
        raise HTTPException(status_code=404, detail="order not found")

    if principal.is_supplier and order.supplier_id != principal.user_id:
        raise HTTPException(status_code=403, detail="access denied")
    if principal.is_store and order.store_id != principal.user_id:
        raise HTTPException(status_code=403, detail="access denied")

    if order.status != STATUS_DELIVERED:
        raise HTTPException(status_code=400, detail="can only rate delivered orders")

    # Store rates the supplier, supplier rates the store
    if principal.is_store:
        rated_id = order.supplier_id
    elif principal.is_supplier:
        rated_id = order.store_id
    else:
        raise HTTPException(status_code=400, detail="invalid role for rating")
    ensure_permission(principal, "can_rate")

    result = await db.execute(
        select(Rating.id).where(Rating.order_id == order.id, Rating.rater_id == principal.user_id)
    )
    if result.scalar_one_or_none() is not None:
        raise HTTPException(status_code=400, detail="you have already rated this order")

    rating = Rating(
        order_id=order.id,
        rater_id=principal.user_id,
        rated_id=rated_id,
        rating=body.rating,
        comment=body.comment,
    )
    db.add(rating)
    await db.commit()

    result = await db.execute(
        select(Rating)
        .options(selectinload(Rating.rater), selectinload(Rating.rated))
        .where(Rating.id == rating.id)
    )
    return result.scalar_one()
