"""Admin user management"""

from typing import Any, List
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from trading_road.core.deps import (
    get_db, get_current_principal, require_admin_level, can_create_users, can_create_admin_users,
    Principal,
)
from trading_road.models.user import User, ROLES, ROLE_ADMIN
from trading_road.schemas.analytics import UserAnalytics
from trading_road.schemas.auth import AdminUserCreate, AuthResponse
from trading_road.schemas.user import UserResponse
from trading_road.services.analytics import user_analytics

from .auth import create_user

router = APIRouter()


async def _get_user_or_404(db: AsyncSession, user_id: int) -> User:
    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()
    if not user:
        raise HTTPException(status_code=404, detail="user not found")
    return user


@router.post("/register", response_model=AuthResponse, status_code=201)
async def admin_register_user(
    *,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
    user_in: AdminUserCreate) -> Any:
    """
    Create a user on behalf of the platform

    Level 1 creates anything, level 2 creates suppliers, stores and level 3 admins,
    level 3 is read-only.
    """
    if not principal.is_admin:
        raise HTTPException(status_code=403, detail="only admin can register users")
    if not can_create_users(principal):
        raise HTTPException(status_code=403, detail="level 3 admins cannot register users")

    if user_in.role not in ROLES:
        raise HTTPException(status_code=400, detail="role must be 'supplier', 'store', or 'admin'")

    admin_level = None
    if user_in.role == ROLE_ADMIN:
        level = principal.effective_admin_level
        if level > 2:
            raise HTTPException(status_code=403, detail="only level 1 admins can create admin users")
        if user_in.admin_level is None:
            raise HTTPException(status_code=400, detail="admin_level is required when creating admin users")
        if user_in.admin_level not in (2, 3):
            raise HTTPException(status_code=400, detail="admin_level must be 2 or 3")
        if not can_create_admin_users(principal) and user_in.admin_level < 3:
            raise HTTPException(status_code=403, detail="level 2 admins can only create level 3 admin users")
        admin_level = user_in.admin_level

    user = await create_user(db, user_in, admin_level=admin_level)
    return AuthResponse(token="", user=UserResponse.model_validate(user), feature_flags=[])


@router.get("", response_model=List[UserResponse])
async def read_users(
    *,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(require_admin_level(3))) -> Any:
    result = await db.execute(select(User).order_by(User.id))
    return result.scalars().all()


@router.get("/{user_id}", response_model=UserResponse)
async def read_user(
    *,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(require_admin_level(3)),
    user_id: int) -> Any:
    return await _get_user_or_404(db, user_id)


@router.get("/{user_id}/analytics", response_model=UserAnalytics)
async def read_user_analytics(
    *,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(require_admin_level(3)),
    user_id: int) -> Any:
    user = await _get_user_or_404(db, user_id)
    if user.is_admin:
        raise HTTPException(status_code=400, detail="analytics only available for stores and suppliers")
    return await user_analytics(db, user)
