"""
Order reads and drafts
- list / detail
- the store's draft per supplier
"""

from typing import Any, List, Optional
from fastapi import APIRouter, Depends, HTTPException, Query, Response
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from trading_road.core.deps import get_db, get_current_principal, ensure_permission, Principal
from trading_road.core.logging_config import get_logger
from trading_road.models.order import Order, STATUS_DRAFT
from trading_road.models.user import User, ROLE_SUPPLIER
from trading_road.schemas.order import OrderResponse, DraftOrderCreate

from .core import (
    base_order_query, scope_to_principal, load_order, get_order_or_404,
    load_ratings, build_order_response,
)

logger = get_logger(__name__)

router = APIRouter()


@router.get("", response_model=List[OrderResponse])
async def list_orders(
    *,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
    status: Optional[str] = Query(None)) -> Any:
    """Orders visible to the caller, newest first; drafts only when asked for by status"""
    query = scope_to_principal(base_order_query(), principal)
    if status:
        query = query.where(Order.status == status)
    else:
        query = query.where(Order.status != STATUS_DRAFT)

    result = await db.execute(query.order_by(Order.created_at.desc(), Order.id.desc()))
    return [build_order_response(o) for o in result.scalars().all()]


@router.get("/draft", response_model=OrderResponse)
async def get_draft_order(
    *,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
    supplier_id: Optional[int] = Query(None)) -> Any:
    if not principal.is_store:
        raise HTTPException(status_code=403, detail="only stores can view draft orders")

    query = base_order_query().where(
        Order.store_id == principal.user_id,
        Order.status == STATUS_DRAFT,
    )
    if supplier_id:
        query = query.where(Order.supplier_id == supplier_id)

    result = await db.execute(query.order_by(Order.id.desc()).limit(1))
    order = result.scalar_one_or_none()
    if not order:
        raise HTTPException(status_code=404, detail="draft order not found")
    return build_order_response(order)


@router.post("/draft", response_model=OrderResponse)
async def create_draft_order(
    *,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
    body: DraftOrderCreate,
    response: Response) -> Any:
    """Return the open draft for this supplier, or start a new one (201)"""
    if not principal.is_store:
        raise HTTPException(status_code=403, detail="only stores can create orders")
    ensure_permission(principal, "can_manage_orders")

    result = await db.execute(
        select(User.id).where(User.id == body.supplier_id, User.role == ROLE_SUPPLIER)
    )
    if result.scalar_one_or_none() is None:
        raise HTTPException(status_code=404, detail="supplier not found")

    result = await db.execute(
        select(Order.id).where(
            Order.store_id == principal.user_id,
            Order.supplier_id == body.supplier_id,
            Order.status == STATUS_DRAFT,
        ).limit(1)
    )
    existing_id = result.scalar_one_or_none()
    if existing_id is not None:
        return build_order_response(await load_order(db, existing_id))

    order = Order(
        store_id=principal.user_id,
        supplier_id=body.supplier_id,
        status=STATUS_DRAFT,
        total_amount=0,
    )
    db.add(order)
    await db.commit()
    logger.info(f"Draft order {order.id} created: store={principal.user_id} supplier={body.supplier_id}")

    response.status_code = 201
    return build_order_response(await load_order(db, order.id))


@router.get("/{order_id}", response_model=OrderResponse)
async def get_order(
    *,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
    order_id: int) -> Any:
    order = await get_order_or_404(db, order_id, principal)
    ratings = await load_ratings(db, order.id)
    return build_order_response(order, ratings)
