"""
Analytics queries
- per-user analytics for stores and suppliers
- platform dashboard for admins
- public landing page counters
"""

from datetime import datetime, timedelta
from typing import Dict, List

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from trading_road.models.order import Order, OrderItem, STATUS_DRAFT
from trading_road.models.product import Product
from trading_road.models.user import User, ROLE_SUPPLIER, ROLE_STORE
from trading_road.schemas.analytics import (
    UserAnalytics, ProductBought, DashboardAnalytics, DailyStat, PublicMetrics
)
from trading_road.schemas.order import OrderResponse

DASHBOARD_RECENT_ORDERS = 100
DAILY_STATS_DAYS = 30


def _orders_with_relations():
    return select(Order).options(
        selectinload(Order.store),
        selectinload(Order.supplier),
        selectinload(Order.order_items).selectinload(OrderItem.product))


async def _count(db: AsyncSession, query) -> int:
    result = await db.execute(query)
    return int(result.scalar() or 0)


async def _sum_total(db: AsyncSession, *conditions) -> float:
    result = await db.execute(
        select(func.coalesce(func.sum(Order.total_amount), 0)).where(*conditions)
    )
    return round(float(result.scalar() or 0), 2)


async def user_analytics(db: AsyncSession, user: User) -> UserAnalytics:
    """Totals over the user's non-draft orders, on whichever side of the order the user sits"""
    side = Order.store_id if user.role == ROLE_STORE else Order.supplier_id
    conditions = (side == user.id, Order.status != STATUS_DRAFT)

    total_orders = await _count(db, select(func.count(Order.id)).where(*conditions))
    total_earnings = await _sum_total(db, *conditions)

    result = await db.execute(
        _orders_with_relations().where(*conditions).order_by(Order.created_at.desc(), Order.id.desc())
    )
    orders = list(result.scalars().all())

    products_bought: List[ProductBought] = []
    total_products_bought = 0

    if user.role == ROLE_STORE:
        per_product: Dict[int, ProductBought] = {}
        for order in orders:
            for item in order.order_items:
                total_products_bought += item.quantity
                entry = per_product.get(item.product_id)
                if entry is None:
                    entry = ProductBought(
                        product_id=item.product_id,
                        product_name=item.product.name if item.product else "",
                        quantity=0,
                        total_spent=0,
                    )
                    per_product[item.product_id] = entry
                entry.quantity += item.quantity
                entry.total_spent = round(entry.total_spent + (item.subtotal or 0), 2)
        products_bought = list(per_product.values())
    elif user.role == ROLE_SUPPLIER:
        result = await db.execute(
            select(Product)
            .where(Product.supplier_id == user.id, Product.deleted_at.is_(None))
            .order_by(Product.id)
        )
        for product in result.scalars().all():
            products_bought.append(ProductBought(
                product_id=product.id,
                product_name=product.name,
                price=product.price,
                stock=product.stock_quantity,
                unit=product.unit,
                category=product.category,
                sku=product.sku,
            ))
            total_products_bought += product.stock_quantity or 0

    since = datetime.utcnow() - timedelta(days=30)
    recent = [o for o in orders if o.created_at and o.created_at >= since]

    return UserAnalytics(
        total_orders=total_orders,
        total_earnings=total_earnings,
        total_products_bought=total_products_bought,
        orders=[OrderResponse.model_validate(o) for o in orders],
        products_bought=products_bought,
        recent_orders=[OrderResponse.model_validate(o) for o in recent],
    )


async def dashboard_analytics(db: AsyncSession, now: datetime = None) -> DashboardAnalytics:
    now = now or datetime.utcnow()
    not_draft = Order.status != STATUS_DRAFT

    total_users = await _count(db, select(func.count(User.id)))
    total_suppliers = await _count(db, select(func.count(User.id)).where(User.role == ROLE_SUPPLIER))
    total_stores = await _count(db, select(func.count(User.id)).where(User.role == ROLE_STORE))
    total_orders = await _count(db, select(func.count(Order.id)).where(not_draft))
    total_earnings = await _sum_total(db, not_draft)

    result = await db.execute(
        _orders_with_relations()
        .where(not_draft)
        .order_by(Order.created_at.desc(), Order.id.desc())
        .limit(DASHBOARD_RECENT_ORDERS)
    )
    recent_orders = [OrderResponse.model_validate(o) for o in result.scalars().all()]

    # One 24h window per day, oldest first, the last one ending now
    start = now - timedelta(days=DAILY_STATS_DAYS)
    daily_stats = []
    for offset in range(DAILY_STATS_DAYS):
        day_start = start + timedelta(days=offset)
        day_end = day_start + timedelta(days=1)
        in_window = (not_draft, Order.created_at >= day_start, Order.created_at < day_end)
        daily_stats.append(DailyStat(
            date=day_start.strftime("%Y-%m-%d"),
            orders=await _count(db, select(func.count(Order.id)).where(*in_window)),
            earnings=await _sum_total(db, *in_window),
        ))

    return DashboardAnalytics(
        total_users=total_users,
        total_suppliers=total_suppliers,
        total_stores=total_stores,
        total_orders=total_orders,
        total_earnings=total_earnings,
        recent_orders=recent_orders,
        daily_stats=daily_stats,
    )


async def public_metrics(db: AsyncSession) -> PublicMetrics:
    return PublicMetrics(
        total_users=await _count(db, select(func.count(User.id))),
        total_suppliers=await _count(db, select(func.count(User.id)).where(User.role == ROLE_SUPPLIER)),
        total_orders=await _count(db, select(func.count(Order.id)).where(Order.status != STATUS_DRAFT)),
    )
