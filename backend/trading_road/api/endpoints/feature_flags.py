"""Per-user feature flags"""

from typing import Any
from fastapi import APIRouter, Depends, Response
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from trading_road.core.deps import get_db, get_current_principal, Principal
from trading_road.models.feature_flag import FeatureFlag

router = APIRouter()


async def _find_flag(db: AsyncSession, user_id: int, flag: str):
    result = await db.execute(
        select(FeatureFlag).where(FeatureFlag.user_id == user_id, FeatureFlag.flag == flag)
    )
    return result.scalar_one_or_none()


@router.get("/{flag}")
async def check_feature_flag(
    *,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
    flag: str) -> Any:
    return {"exists": await _find_flag(db, principal.user_id, flag) is not None}


@router.post("/{flag}", status_code=201)
async def set_feature_flag(
    *,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
    response: Response,
    flag: str) -> Any:
    if await _find_flag(db, principal.user_id, flag) is not None:
        response.status_code = 200
        return {"message": "Feature flag already exists"}

    feature_flag = FeatureFlag(user_id=principal.user_id, flag=flag)
    db.add(feature_flag)
    await db.commit()
    await db.refresh(feature_flag)
    return {
        "message": "Feature flag created",
        "flag": {
            "id": feature_flag.id,
            "user_id": feature_flag.user_id,
            "flag": feature_flag.flag,
            "created_at": feature_flag.created_at.isoformat(),
        },
    }
