"""
Order state changes
- submit a draft
- fulfilment status
- payment confirmation / revert
- invoice e-mail
"""

from typing import Any
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from trading_road.core.config import settings
from trading_road.core.deps import get_db, get_current_principal, ensure_permission, Principal
from trading_road.core.logging_config import get_logger
from trading_road.models.order import (
    Order, ORDER_STATUSES, REQUIRED_PREVIOUS_STATUS, STATUS_DRAFT, STATUS_PREPARING,
    PAYMENT_METHODS, PAYMENT_GCASH, PAYMENT_PENDING, PAYMENT_PAID,
    DELIVERY_OPTIONS, DELIVERY_DELIVER,
)
from trading_road.models.user import User
from trading_road.schemas.order import OrderResponse, OrderSubmit, OrderStatusUpdate, InvoiceResponse

from .core import load_order, get_order_or_404, build_order_response

logger = get_logger(__name__)

router = APIRouter()

STATUS_LABELS = {
    "in_transit": "in transit",
}


@router.post("/{order_id}/submit", response_model=OrderResponse)
async def submit_order(
    *,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
    order_id: int,
    body: OrderSubmit) -> Any:
    """Turn the store's draft into a real order for the supplier to prepare"""
    if not principal.is_store:
        raise HTTPException(status_code=403, detail="only stores can submit orders")
    ensure_permission(principal, "can_manage_orders")

    order = await load_order(db, order_id)
    if not order or order.store_id != principal.user_id or order.status != STATUS_DRAFT:
        raise HTTPException(status_code=404, detail="draft order not found")
    if not order.order_items:
        raise HTTPException(status_code=400, detail="cannot submit order with no items")

    if body.payment_method not in PAYMENT_METHODS:
        raise HTTPException(status_code=400, detail="invalid payment method")
    if body.delivery_option not in DELIVERY_OPTIONS:
        raise HTTPException(status_code=400, detail="invalid delivery option")

    subtotal = order.items_subtotal
    minimum = settings.MINIMUM_ORDER_AMOUNT
    if subtotal < minimum:
        raise HTTPException(
            status_code=400,
            detail=f"minimum order amount is ₱{minimum:.2f}. Current total: ₱{subtotal:.2f}",
        )

    if body.delivery_option == DELIVERY_DELIVER:
        address = (body.shipping_address or "").strip()
        if not address:
            store = await db.get(User, order.store_id)
            address = (store.address or "").strip() if store else ""
        if not address:
            raise HTTPException(
                status_code=400,
                detail="shipping address is required when delivery option is 'deliver'. "
                       "Please update your address in your profile.",
            )
        order.shipping_address = address

    if body.payment_method == PAYMENT_GCASH:
        order.payment_status = PAYMENT_PENDING
        if body.payment_proof_url:
            order.payment_proof_url = body.payment_proof_url
    else:
        order.payment_status = PAYMENT_PAID

    order.status = STATUS_PREPARING
    order.payment_method = body.payment_method
    order.delivery_option = body.delivery_option
    order.delivery_fee = body.delivery_fee
    order.distance = body.distance
    order.total_amount = round(subtotal + body.delivery_fee, 2)
    if body.notes:
        order.notes = body.notes

    await db.commit()
    logger.info(f"Order {order.id} submitted: {body.payment_method}/{body.delivery_option} total={order.total_amount:.2f}")

    return build_order_response(await load_order(db, order.id))


@router.put("/{order_id}/status", response_model=OrderResponse)
async def update_order_status(
    *,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
    order_id: int,
    body: OrderStatusUpdate) -> Any:
    order = await get_order_or_404(db, order_id, principal)
    ensure_permission(principal, "can_change_status")

    if body.status not in ORDER_STATUSES:
        raise HTTPException(status_code=400, detail="invalid status")

    required = REQUIRED_PREVIOUS_STATUS.get(body.status)
    if required and order.status != required:
        target = STATUS_LABELS.get(body.status, body.status)
        previous = STATUS_LABELS.get(required, required)
        raise HTTPException(
            status_code=400,
            detail=f"order must be {previous} before it can be marked as {target}",
        )

    previous_status = order.status
    order.status = body.status
    await db.commit()
    logger.info(f"Order {order.id} status {previous_status} -> {body.status} by user {principal.user_id}")

    return build_order_response(await load_order(db, order.id))


async def _supplier_order(db: AsyncSession, principal: Principal, order_id: int, action: str) -> Order:
    if not principal.is_supplier:
        raise HTTPException(status_code=403, detail=f"only suppliers can {action}")
    ensure_permission(principal, "can_manage_orders")
    result = await db.execute(
        select(Order).where(Order.id == order_id, Order.supplier_id == principal.user_id)
    )
    order = result.scalar_one_or_none()
    if not order:
        raise HTTPException(status_code=404, detail="order not found or access denied")
    return order


@router.post("/{order_id}/payment/paid", response_model=OrderResponse)
async def mark_payment_paid(
    *,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
    order_id: int) -> Any:
    order = await _supplier_order(db, principal, order_id, "mark payment as paid")

    if order.payment_method != PAYMENT_GCASH:
        raise HTTPException(status_code=400, detail="payment confirmation is only applicable for GCash orders")
    if order.payment_status == PAYMENT_PAID:
        raise HTTPException(status_code=400, detail="payment is already marked as paid")

    order.payment_status = PAYMENT_PAID
    await db.commit()
    logger.info(f"Order {order.id} payment marked as paid by supplier {principal.user_id}")

    return build_order_response(await load_order(db, order.id))


@router.post("/{order_id}/payment/pending", response_model=OrderResponse)
async def mark_payment_pending(
    *,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
    order_id: int) -> Any:
    order = await _supplier_order(db, principal, order_id, "revert payment")

    if order.payment_method not in PAYMENT_METHODS:
        raise HTTPException(
            status_code=400,
            detail="payment revert is only applicable for GCash or cash on delivery orders",
        )
    if order.payment_status == PAYMENT_PENDING:
        raise HTTPException(status_code=400, detail="payment is already pending")

    order.payment_status = PAYMENT_PENDING
    await db.commit()
    logger.info(f"Order {order.id} payment reverted to pending by supplier {principal.user_id}")

    return build_order_response(await load_order(db, order.id))


@router.post("/{order_id}/send-invoice", response_model=InvoiceResponse)
async def send_invoice(
    *,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
    order_id: int) -> Any:
    """Reports where the invoice goes; rendering and delivery happen outside this service"""
    order = await get_order_or_404(db, order_id, principal)
    if not order.store or not order.store.email:
        raise HTTPException(status_code=400, detail="store email not found")

    logger.info(f"Invoice for order {order.id} requested for {order.store.email}")
    return InvoiceResponse(message="Invoice email sent successfully", to=order.store.email)
