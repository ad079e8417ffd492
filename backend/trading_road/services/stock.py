"""Stock movement helpers shared by the product and order endpoints"""

import logging
from typing import Optional

from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession

from trading_road.models.product import Product
from trading_road.models.stock_history import StockHistory

logger = logging.getLogger(__name__)


def log_stock_change(
    db: AsyncSession,
    product: Product,
    previous_stock: int,
    new_stock: int,
    change_type: str,
    user_id: Optional[int] = None,
    employee_id: Optional[int] = None,
    order_id: Optional[int] = None,
    notes: Optional[str] = None,
) -> Optional[StockHistory]:
    """Add a history row to the session; the caller commits. No-op changes are skipped."""
    change_amount = new_stock - previous_stock
    if change_amount == 0:
        return None

    entry = StockHistory(
        product_id=product.id,
        previous_stock=previous_stock,
        new_stock=new_stock,
        change_amount=change_amount,
        change_type=change_type,
        user_id=user_id,
        employee_id=employee_id,
        order_id=order_id,
        notes=notes,
    )
    db.add(entry)
    logger.info(f"Stock {change_type} for product {product.id}: {previous_stock} -> {new_stock}")
    return entry


def set_stock(
    db: AsyncSession,
    product: Product,
    new_stock: int,
    change_type: str,
    **context,
) -> Optional[StockHistory]:
    previous = product.stock_quantity or 0
    product.stock_quantity = new_stock
    return log_stock_change(db, product, previous, new_stock, change_type, **context)


async def adjust_stock(
    db: AsyncSession,
    product: Product,
    delta: int,
    change_type: str,
    **context,
) -> bool:
    """Add delta to the stock in one UPDATE and log the movement.

    A negative delta only applies while at least that much stock remains, so two
    requests racing for the last units cannot both win. Returns False when the
    guard rejects the change.
    """
    if delta == 0:
        return True

    stmt = (
        update(Product)
        .where(Product.id == product.id)
        .values(stock_quantity=Product.stock_quantity + delta)
        .execution_options(synchronize_session=False)
    )
    if delta < 0:
        stmt = stmt.where(Product.stock_quantity >= -delta)

    result = await db.execute(stmt)
    await db.refresh(product, ["stock_quantity"])
    if result.rowcount == 0:
        return False

    new_stock = product.stock_quantity
    log_stock_change(db, product, new_stock - delta, new_stock, change_type, **context)
    return True
