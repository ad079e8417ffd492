"""
Order chat between the store and the supplier
Messaging closes a fixed number of hours after delivery.
"""

from datetime import datetime, timedelta
from typing import Any, List
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from trading_road.core.config import settings
from trading_road.core.deps import get_db, get_current_principal, ensure_permission, Principal
from trading_road.core.logging_config import get_logger
from trading_road.models.message import Message
from trading_road.models.order import Order, STATUS_DELIVERED
from trading_road.schemas.message import MessageCreate, MessageResponse

logger = get_logger(__name__)

router = APIRouter()


def is_messaging_closed(order: Order, now: datetime = None) -> bool:
    if order.status != STATUS_DELIVERED or order.updated_at is None:
        return False
    now = now or datetime.utcnow()
    return now - order.updated_at >= timedelta(hours=settings.MESSAGING_WINDOW_HOURS)


async def _party_order(db: AsyncSession, principal: Principal, order_id: int) -> Order:
    query = select(Order).where(Order.id == order_id)
    if principal.is_supplier:
        query = query.where(Order.supplier_id == principal.user_id)
    elif principal.is_store:
        query = query.where(Order.store_id == principal.user_id)
    result = await db.execute(query)
    return result.scalar_one_or_none()


@router.get("/{order_id}/messages", response_model=List[MessageResponse])
async def list_messages(
    *,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
    order_id: int) -> Any:
    if not (principal.is_supplier or principal.is_store):
        raise HTTPException(status_code=403, detail="only suppliers and stores can view messages")

    order = await _party_order(db, principal, order_id)
    if not order:
        raise HTTPException(status_code=404, detail="order not found")

    result = await db.execute(
        select(Message)
        .options(selectinload(Message.sender))
        .where(Message.order_id == order.id)
        .order_by(Message.created_at.asc(), Message.id.asc())
    )
    return result.scalars().all()


@router.post("/{order_id}/messages", response_model=MessageResponse, status_code=201)
async def create_message(
    *,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
    order_id: int,
    body: MessageCreate) -> Any:
    if not (principal.is_supplier or principal.is_store):
        raise HTTPException(status_code=403, detail="only suppliers and stores can send messages")
    ensure_permission(principal, "can_chat")

    order = await _party_order(db, principal, order_id)
    if not order:
        raise HTTPException(status_code=404, detail="order not found or access denied")

    if is_messaging_closed(order):
        raise HTTPException(
            status_code=403,
            detail=f"messaging is closed. order was delivered more than {settings.MESSAGING_WINDOW_HOURS} hours ago",
        )

    content = body.content or ""
    if not content and not body.image_url:
        raise HTTPException(status_code=400, detail="message must have either content or an image")
    if len(content) > settings.MESSAGE_MAX_LENGTH:
        raise HTTPException(
            status_code=400,
            detail=f"message content must be between 1 and {settings.MESSAGE_MAX_LENGTH} characters",
        )

    message = Message(
        order_id=order.id,
        sender_id=principal.user_id,
        content=content,
        image_url=body.image_url or None,
    )
    db.add(message)
    await db.commit()

    result = await db.execute(
        select(Message).options(selectinload(Message.sender)).where(Message.id == message.id)
    )
    return result.scalar_one()
