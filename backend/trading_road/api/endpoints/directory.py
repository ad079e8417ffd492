"""
Supplier and store directory
Stores browse suppliers, suppliers browse stores; admins see both.
"""

from typing import Any, List, Optional, Type
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from trading_road.core.deps import get_db, get_current_principal, Principal
from trading_road.models.product import Product
from trading_road.models.rating import Rating
from trading_road.models.user import User, ROLE_SUPPLIER, ROLE_STORE
from trading_road.schemas.product import ProductResponse
from trading_road.schemas.user import DirectoryEntry, SupplierEntry, StoreEntry
from trading_road.services.business_hours import is_open_now, now_in_business_tz

router = APIRouter()


async def _rating_stats(db: AsyncSession, user_id: int):
    result = await db.execute(
        select(func.avg(Rating.rating), func.count(Rating.id)).where(Rating.rated_id == user_id)
    )
    average, count = result.one()
    if not count:
        return None, 0
    return round(float(average), 2), int(count)


async def _product_count(db: AsyncSession, supplier_id: int) -> int:
    result = await db.execute(
        select(func.count(Product.id)).where(
            Product.supplier_id == supplier_id,
            Product.deleted_at.is_(None),
        )
    )
    return int(result.scalar() or 0)


async def _directory(
    db: AsyncSession,
    role: str,
    entry_class: Type[DirectoryEntry],
    search: Optional[str],
    status: Optional[str]) -> List[DirectoryEntry]:
    search = (search or "").strip().lower()
    status = (status or "").strip().lower()
    now = now_in_business_tz()

    query = select(User).where(User.role == role)
    if search:
        query = query.where(func.lower(User.name).like(f"%{search}%"))
    result = await db.execute(query.order_by(User.name))

    entries = []
    for user in result.scalars().all():
        open_now = is_open_now(user, now)
        if status == "open" and not open_now:
            continue
        if status == "closed" and open_now:
            continue

        average_rating, rating_count = await _rating_stats(db, user.id)
        extra = {}
        if entry_class is SupplierEntry:
            extra["product_count"] = await _product_count(db, user.id)

        entries.append(entry_class(
            id=user.id,
            name=user.name,
            email=user.email,
            phone=user.phone,
            address=user.address,
            logo_url=user.logo_url,
            banner_url=user.banner_url,
            latitude=user.latitude,
            longitude=user.longitude,
            opening_time=user.opening_time,
            closing_time=user.closing_time,
            closed_days_of_week=user.closed_days_of_week,
            is_open=open_now,
            average_rating=average_rating,
            rating_count=rating_count,
            **extra,
        ))

    # Open first, then alphabetical
    entries.sort(key=lambda e: (not e.is_open, e.name.lower()))
    return entries


@router.get("/suppliers", response_model=List[SupplierEntry])
async def read_suppliers(
    *,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
    search: Optional[str] = Query(None),
    status: Optional[str] = Query(None)) -> Any:
    if not (principal.is_store or principal.is_admin):
        raise HTTPException(status_code=403, detail="only stores and admins can view suppliers")
    return await _directory(db, ROLE_SUPPLIER, SupplierEntry, search, status)


@router.get("/suppliers/{supplier_id}/products", response_model=List[ProductResponse])
async def read_supplier_products(
    *,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
    supplier_id: int) -> Any:
    if not (principal.is_store or principal.is_admin):
        raise HTTPException(status_code=403, detail="only stores and admins can view supplier products")

    result = await db.execute(select(User.id).where(User.id == supplier_id, User.role == ROLE_SUPPLIER))
    if result.scalar_one_or_none() is None:
        raise HTTPException(status_code=404, detail="supplier not found")

    result = await db.execute(
        select(Product)
        .where(Product.supplier_id == supplier_id, Product.deleted_at.is_(None))
        .order_by(Product.name)
    )
    return result.scalars().all()


@router.get("/stores", response_model=List[StoreEntry])
async def read_stores(
    *,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
    search: Optional[str] = Query(None),
    status: Optional[str] = Query(None)) -> Any:
    if not (principal.is_supplier or principal.is_admin):
        raise HTTPException(status_code=403, detail="only suppliers and admins can view stores")
    return await _directory(db, ROLE_STORE, StoreEntry, search, status)
