"""The caller's own account"""

from typing import Any
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from trading_road.core.deps import get_db, get_current_principal, Principal
from trading_road.core.logging_config import get_logger
from trading_road.models.rating import Rating
from trading_road.models.user import User
from trading_road.schemas.analytics import UserAnalytics
from trading_road.schemas.rating import MyRatingsResponse, RatingResponse
from trading_road.schemas.user import UserResponse, UserUpdate
from trading_road.services.analytics import user_analytics

logger = get_logger(__name__)

router = APIRouter()


async def _current_user(db: AsyncSession, principal: Principal) -> User:
    result = await db.execute(select(User).where(User.id == principal.user_id))
    user = result.scalar_one_or_none()
    if not user:
        raise HTTPException(status_code=404, detail="user not found")
    return user


async def _set_open(db: AsyncSession, principal: Principal, is_open: bool) -> User:
    if not (principal.is_supplier or principal.is_store):
        raise HTTPException(status_code=403, detail="only suppliers and stores can change open status")
    user = await _current_user(db, principal)
    user.is_open = is_open
    await db.commit()
    await db.refresh(user)
    logger.info(f"User {user.id} marked {'open' if is_open else 'closed'}")
    return user


@router.get("", response_model=UserResponse)
async def read_me(
    *,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(get_current_principal)) -> Any:
    return await _current_user(db, principal)


@router.put("", response_model=UserResponse)
async def update_me(
    *,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
    user_in: UserUpdate) -> Any:
    user = await _current_user(db, principal)
    update_data = user_in.model_dump(exclude_unset=True)

    phone = update_data.get("phone")
    if phone and phone != user.phone:
        result = await db.execute(select(User.id).where(User.phone == phone, User.id != user.id))
        if result.scalar_one_or_none() is not None:
            raise HTTPException(status_code=409, detail="phone already exists")

    for field, value in update_data.items():
        if field == "name" and value is None:
            continue
        setattr(user, field, value)

    await db.commit()
    await db.refresh(user)
    return user


@router.post("/open", response_model=UserResponse)
async def open_me(
    *,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(get_current_principal)) -> Any:
    return await _set_open(db, principal, True)


@router.post("/close", response_model=UserResponse)
async def close_me(
    *,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(get_current_principal)) -> Any:
    return await _set_open(db, principal, False)


@router.get("/analytics", response_model=UserAnalytics)
async def read_my_analytics(
    *,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(get_current_principal)) -> Any:
    if not (principal.is_supplier or principal.is_store):
        raise HTTPException(status_code=403, detail="analytics only available for stores and suppliers")
    return await user_analytics(db, await _current_user(db, principal))


@router.get("/ratings", response_model=MyRatingsResponse)
async def read_my_ratings(
    *,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(get_current_principal)) -> Any:
    """Ratings other parties left for the caller, newest first"""
    result = await db.execute(
        select(Rating)
        .options(selectinload(Rating.rater), selectinload(Rating.rated))
        .where(Rating.rated_id == principal.user_id)
        .order_by(Rating.created_at.desc(), Rating.id.desc())
    )
    ratings = [RatingResponse.model_validate(r) for r in result.scalars().all()]
    return MyRatingsResponse(ratings=ratings)
