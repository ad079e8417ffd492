"""Product catalog API"""

from datetime import datetime
from typing import Any, Optional, List, Dict
from fastapi import APIRouter, Body, Depends, HTTPException, Query, Response
from pydantic import ValidationError
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from trading_road.core.deps import get_db, get_current_principal, ensure_permission, Principal
from trading_road.core.errors import error_response
from trading_road.core.logging_config import get_logger
from trading_road.models.product import Product
from trading_road.models.stock_history import (
    CHANGE_INITIAL_STOCK, CHANGE_MANUAL_ADJUSTMENT, CHANGE_STOCK_RESET,
)
from trading_road.models.user import User, ROLE_SUPPLIER
from trading_road.schemas.product import (
    ProductCreate, ProductUpdate, ProductResponse, BulkProductResponse
)
from trading_road.services.stock import log_stock_change, set_stock

logger = get_logger(__name__)

router = APIRouter()


def _scoped(query, principal: Principal):
    """Suppliers and stores manage their own catalog; admins see every product"""
    if principal.is_supplier or principal.is_store:
        return query.where(Product.supplier_id == principal.user_id)
    return query


def _history_actor(principal: Principal) -> dict:
    return {
        "user_id": None if principal.is_admin else principal.user_id,
        "employee_id": principal.employee_id if principal.is_employee else None,
    }


async def _get_product(
    db: AsyncSession,
    principal: Principal,
    product_id: int,
    include_deleted: bool = False) -> Product:
    query = _scoped(select(Product).where(Product.id == product_id), principal)
    if not include_deleted:
        query = query.where(Product.deleted_at.is_(None))
    result = await db.execute(query)
    product = result.scalar_one_or_none()
    if not product:
        raise HTTPException(status_code=404, detail="product not found")
    return product


async def _sku_taken(db: AsyncSession, sku: str, exclude_id: Optional[int] = None) -> bool:
    query = select(Product.id).where(Product.sku == sku)
    if exclude_id is not None:
        query = query.where(Product.id != exclude_id)
    result = await db.execute(query.limit(1))
    return result.scalar_one_or_none() is not None


async def _resolve_supplier_id(db: AsyncSession, principal: Principal, requested: Optional[int]) -> int:
    """Admins create on behalf of a supplier; everyone else owns what they create"""
    if principal.is_admin:
        if requested is None:
            raise ValueError("supplier_id is required when creating product as admin")
        result = await db.execute(
            select(User.id).where(User.id == requested, User.role == ROLE_SUPPLIER)
        )
        if result.scalar_one_or_none() is None:
            raise ValueError("invalid supplier_id")
        return requested
    if principal.is_supplier or principal.is_store:
        return principal.user_id
    raise PermissionError("only suppliers, stores, and admins can create products")


def _new_product(supplier_id: int, data: ProductCreate) -> Product:
    return Product(
        supplier_id=supplier_id,
        name=data.name,
        description=data.description,
        sku=data.sku,
        price=data.price,
        stock_quantity=data.stock_quantity,
        unit=data.unit,
        category=data.category,
        image_url=data.image_url,
    )


@router.get("", response_model=List[ProductResponse])
async def list_products(
    *,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
    search: Optional[str] = Query(None),
    include_deleted: bool = Query(False)) -> Any:
    ensure_permission(principal, "can_manage_inventory")

    query = _scoped(select(Product), principal)
    if not include_deleted:
        query = query.where(Product.deleted_at.is_(None))
    if search and search.strip():
        query = query.where(func.lower(Product.name).contains(search.strip().lower()))

    result = await db.execute(query.order_by(Product.id))
    return result.scalars().all()


@router.post("", response_model=ProductResponse, status_code=201)
async def create_product(
    *,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
    product_in: ProductCreate) -> Any:
    ensure_permission(principal, "can_manage_inventory")

    try:
        supplier_id = await _resolve_supplier_id(db, principal, product_in.supplier_id)
    except PermissionError as e:
        raise HTTPException(status_code=403, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    if await _sku_taken(db, product_in.sku):
        raise HTTPException(status_code=409, detail="SKU already exists")

    product = _new_product(supplier_id, product_in)
    db.add(product)
    await db.flush()

    if product.stock_quantity > 0:
        log_stock_change(db, product, 0, product.stock_quantity, CHANGE_INITIAL_STOCK, **_history_actor(principal))

    await db.commit()
    await db.refresh(product)
    return product


@router.post("/bulk", response_model=BulkProductResponse)
async def bulk_create_products(
    *,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
    rows: List[Dict[str, Any]] = Body(...),
    response: Response) -> Any:
    """Create many products; each row succeeds or fails on its own"""
    ensure_permission(principal, "can_manage_inventory")

    if not rows:
        raise HTTPException(status_code=400, detail="no products provided")

    created: List[Product] = []
    errors: List[str] = []

    for index, row in enumerate(rows, start=1):
        try:
            product_in = ProductCreate.model_validate(row)
        except ValidationError as e:
            first = e.errors()[0]
            field = ".".join(str(p) for p in first.get("loc", ()))
            errors.append(f"Product {index}: {field} {first.get('msg', 'is invalid')}".strip())
            continue

        try:
            supplier_id = await _resolve_supplier_id(db, principal, product_in.supplier_id)
        except (PermissionError, ValueError) as e:
            errors.append(f"Product {index}: {e}")
            continue

        if await _sku_taken(db, product_in.sku):
            errors.append(f"Product {index}: SKU {product_in.sku} already exists")
            continue

        product = _new_product(supplier_id, product_in)
        db.add(product)
        await db.flush()
        if product.stock_quantity > 0:
            log_stock_change(db, product, 0, product.stock_quantity, CHANGE_INITIAL_STOCK, **_history_actor(principal))
        created.append(product)

    if not created:
        await db.rollback()
        return error_response(400, "failed to create any products", errors)

    await db.commit()
    for product in created:
        await db.refresh(product)
    logger.info(f"Bulk product import by user {principal.user_id}: {len(created)} created, {len(errors)} failed")

    response.status_code = 206 if errors else 201
    return BulkProductResponse(
        created=len(created),
        failed=len(errors),
        products=[ProductResponse.model_validate(p) for p in created],
        errors=errors,
    )


@router.post("/reset-stocks")
async def reset_stocks(
    *,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(get_current_principal)) -> Any:
    """Zero every non-empty stock in the supplier's live catalog"""
    ensure_permission(principal, "can_manage_inventory")
    if not principal.is_supplier:
        raise HTTPException(status_code=403, detail="only suppliers can reset stocks")

    result = await db.execute(
        select(Product).where(
            Product.supplier_id == principal.user_id,
            Product.deleted_at.is_(None),
            Product.stock_quantity != 0,
        )
    )
    products = result.scalars().all()
    for product in products:
        set_stock(db, product, 0, CHANGE_STOCK_RESET, **_history_actor(principal))

    await db.commit()
    logger.info(f"Supplier {principal.user_id} reset stock on {len(products)} products")
    return {"updated": len(products)}


@router.get("/{product_id}", response_model=ProductResponse)
async def get_product(
    *,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
    product_id: int) -> Any:
    ensure_permission(principal, "can_manage_inventory")
    return await _get_product(db, principal, product_id)


@router.put("/{product_id}", response_model=ProductResponse)
async def update_product(
    *,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
    product_id: int,
    product_in: ProductUpdate) -> Any:
    ensure_permission(principal, "can_manage_inventory")
    product = await _get_product(db, principal, product_id)
    update_data = product_in.model_dump(exclude_unset=True)

    # Employees only count stock
    if principal.is_employee:
        if update_data.get("stock_quantity") is None:
            raise HTTPException(status_code=400, detail="employees can only update stock quantity")
        update_data = {"stock_quantity": update_data["stock_quantity"]}

    new_sku = update_data.get("sku")
    if new_sku and new_sku != product.sku and await _sku_taken(db, new_sku, exclude_id=product.id):
        raise HTTPException(status_code=409, detail="SKU already exists")

    new_stock = update_data.pop("stock_quantity", None)
    for field, value in update_data.items():
        if value is None and field in ("name", "sku", "price"):
            continue
        setattr(product, field, value)

    if new_stock is not None:
        set_stock(db, product, new_stock, CHANGE_MANUAL_ADJUSTMENT, **_history_actor(principal))

    await db.commit()
    await db.refresh(product)
    return product


@router.delete("/{product_id}")
async def delete_product(
    *,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
    product_id: int) -> Any:
    if principal.is_employee:
        raise HTTPException(status_code=403, detail="employees cannot delete products")
    product = await _get_product(db, principal, product_id)
    product.deleted_at = datetime.utcnow()
    await db.commit()
    return {"message": "product deleted"}


@router.post("/{product_id}/restore", response_model=ProductResponse)
async def restore_product(
    *,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
    product_id: int) -> Any:
    ensure_permission(principal, "can_manage_inventory")
    product = await _get_product(db, principal, product_id, include_deleted=True)
    product.deleted_at = None
    await db.commit()
    await db.refresh(product)
    return product
