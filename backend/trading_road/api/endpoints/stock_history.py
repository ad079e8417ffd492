"""Stock history API - read-only view of stock movements"""

from typing import Any, Optional, List
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from trading_road.core.deps import get_db, get_current_principal, ensure_permission, Principal
from trading_road.models.product import Product
from trading_road.models.stock_history import StockHistory
from trading_road.schemas.stock_history import StockHistoryResponse

router = APIRouter()

DEFAULT_LIMIT = 100
MAX_LIMIT = 1000


def _window(limit: int, offset: int):
    if limit < 1 or limit > MAX_LIMIT:
        limit = DEFAULT_LIMIT
    if offset < 0:
        offset = 0
    return limit, offset


def _history_query(change_type: Optional[str]):
    query = select(StockHistory).options(selectinload(StockHistory.product))
    if change_type:
        query = query.where(StockHistory.change_type == change_type)
    return query


@router.get("/stock-history", response_model=List[StockHistoryResponse])
async def list_stock_history(
    *,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
    product_id: Optional[int] = Query(None),
    change_type: Optional[str] = Query(None),
    limit: int = Query(DEFAULT_LIMIT),
    offset: int = Query(0)) -> Any:
    ensure_permission(principal, "can_manage_inventory")
    limit, offset = _window(limit, offset)
    query = _history_query(change_type)

    if product_id:
        product = await db.get(Product, product_id)
        if product and principal.is_supplier and product.supplier_id != principal.user_id:
            raise HTTPException(status_code=403, detail="access denied")
        query = query.where(StockHistory.product_id == product_id)
    elif principal.is_supplier:
        own_products = select(Product.id).where(Product.supplier_id == principal.user_id)
        query = query.where(StockHistory.product_id.in_(own_products))

    result = await db.execute(
        query.order_by(StockHistory.created_at.desc(), StockHistory.id.desc()).limit(limit).offset(offset)
    )
    return result.scalars().all()


@router.get("/products/{product_id}/stock-history", response_model=List[StockHistoryResponse])
async def product_stock_history(
    *,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
    product_id: int,
    change_type: Optional[str] = Query(None),
    limit: int = Query(DEFAULT_LIMIT),
    offset: int = Query(0)) -> Any:
    ensure_permission(principal, "can_manage_inventory")
    limit, offset = _window(limit, offset)

    query = select(Product.id).where(Product.id == product_id)
    if principal.is_supplier:
        query = query.where(Product.supplier_id == principal.user_id)
    result = await db.execute(query)
    if result.scalar_one_or_none() is None:
        raise HTTPException(status_code=404, detail="product not found")

    result = await db.execute(
        _history_query(change_type)
        .where(StockHistory.product_id == product_id)
        .order_by(StockHistory.created_at.desc(), StockHistory.id.desc())
        .limit(limit)
        .offset(offset)
    )
    return result.scalars().all()
