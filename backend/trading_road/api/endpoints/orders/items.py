"""
Draft line items
Stock is reserved when a line is added or grown and released when it shrinks or is removed.
"""

from typing import Any
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from trading_road.core.deps import get_db, get_current_principal, ensure_permission, Principal
from trading_road.models.order import Order, OrderItem, STATUS_DRAFT
from trading_road.models.product import Product
from trading_road.models.stock_history import CHANGE_ORDER_RESERVED, CHANGE_ORDER_RELEASED
from trading_road.schemas.order import OrderResponse, OrderItemAdd, OrderItemUpdate
from trading_road.services.stock import adjust_stock

from .core import load_order, recalculate_total, build_order_response

router = APIRouter()


def _insufficient_stock(available: int, unit) -> HTTPException:
    unit = f" {unit}" if unit else ""
    return HTTPException(status_code=400, detail=f"insufficient stock: only {available}{unit} available")


def _stock_context(principal: Principal, order_id: int) -> dict:
    return {
        "user_id": principal.user_id,
        "employee_id": principal.employee_id,
        "order_id": order_id,
    }


async def _load_own_item(db: AsyncSession, principal: Principal, item_id: int, verb: str) -> OrderItem:
    if not principal.is_store:
        raise HTTPException(status_code=403, detail=f"only stores can {verb} order items")
    ensure_permission(principal, "can_manage_orders")

    result = await db.execute(
        select(OrderItem)
        .options(selectinload(OrderItem.order), selectinload(OrderItem.product))
        .where(OrderItem.id == item_id)
    )
    item = result.scalar_one_or_none()
    if not item:
        raise HTTPException(status_code=404, detail="order item not found")
    if item.order.store_id != principal.user_id or item.order.status != STATUS_DRAFT:
        raise HTTPException(status_code=403, detail=f"cannot {verb} this order item")
    if not item.product or item.product.deleted_at is not None:
        raise HTTPException(status_code=404, detail="product not found")
    return item


@router.post("/{order_id}/items", response_model=OrderResponse)
async def add_order_item(
    *,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
    order_id: int,
    body: OrderItemAdd) -> Any:
    if not principal.is_store:
        raise HTTPException(status_code=403, detail="only stores can add items to orders")
    ensure_permission(principal, "can_manage_orders")

    result = await db.execute(
        select(Order).where(
            Order.id == order_id,
            Order.store_id == principal.user_id,
            Order.status == STATUS_DRAFT,
        )
    )
    order = result.scalar_one_or_none()
    if not order:
        raise HTTPException(status_code=404, detail="draft order not found")

    result = await db.execute(
        select(Product).where(
            Product.id == body.product_id,
            Product.supplier_id == order.supplier_id,
            Product.deleted_at.is_(None),
        )
    )
    product = result.scalar_one_or_none()
    if not product:
        raise HTTPException(status_code=404, detail="product not found")

    result = await db.execute(
        select(OrderItem).where(OrderItem.order_id == order.id, OrderItem.product_id == product.id)
    )
    item = result.scalar_one_or_none()

    total_quantity = body.quantity + (item.quantity if item else 0)
    if total_quantity > product.stock_quantity:
        raise _insufficient_stock(product.stock_quantity, product.unit)

    reserved = await adjust_stock(
        db, product, -body.quantity, CHANGE_ORDER_RESERVED,
        notes=f"Reserved for order #{order.id}", **_stock_context(principal, order.id),
    )
    if not reserved:
        raise _insufficient_stock(product.stock_quantity, product.unit)

    if item:
        item.quantity = total_quantity
        item.recalculate()
    else:
        item = OrderItem(
            order_id=order.id,
            product_id=product.id,
            quantity=body.quantity,
            unit_price=product.price,
        )
        item.recalculate()
        db.add(item)

    await recalculate_total(db, order)
    await db.commit()

    return build_order_response(await load_order(db, order.id))


@router.put("/items/{item_id}", response_model=OrderResponse)
async def update_order_item(
    *,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
    item_id: int,
    body: OrderItemUpdate) -> Any:
    item = await _load_own_item(db, principal, item_id, "update")
    product = item.product

    diff = body.quantity - item.quantity
    if diff > product.stock_quantity:
        raise _insufficient_stock(product.stock_quantity + item.quantity, product.unit)

    change_type = CHANGE_ORDER_RESERVED if diff > 0 else CHANGE_ORDER_RELEASED
    adjusted = await adjust_stock(
        db, product, -diff, change_type,
        notes=f"Quantity changed on order #{item.order_id}", **_stock_context(principal, item.order_id),
    )
    if not adjusted:
        raise _insufficient_stock(product.stock_quantity + item.quantity, product.unit)

    item.quantity = body.quantity
    item.recalculate()
    await recalculate_total(db, item.order)
    await db.commit()

    return build_order_response(await load_order(db, item.order_id))


@router.delete("/items/{item_id}")
async def remove_order_item(
    *,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
    item_id: int) -> Any:
    item = await _load_own_item(db, principal, item_id, "remove")
    product = item.product
    order = item.order

    await adjust_stock(
        db, product, item.quantity, CHANGE_ORDER_RELEASED,
        notes=f"Removed from order #{order.id}", **_stock_context(principal, order.id),
    )
    await db.delete(item)
    await recalculate_total(db, order)
    await db.commit()

    return {"message": "item removed"}
