"""Schedule exceptions - holidays and one-off opening hours"""

from datetime import date, datetime
from typing import Any, List
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from trading_road.core.deps import get_db, get_current_principal, Principal
from trading_road.models.schedule_exception import ScheduleException
from trading_road.schemas.schedule import (
    ScheduleExceptionCreate, ScheduleExceptionBulkCreate, ScheduleExceptionUpdate,
    ScheduleExceptionResponse, ScheduleExceptionBulkResponse,
)

router = APIRouter()


def _parse_date(value: str) -> date:
    try:
        return datetime.strptime(value.strip(), "%Y-%m-%d").date()
    except ValueError:
        raise HTTPException(status_code=400, detail="invalid date format. Use YYYY-MM-DD")


def _owned(principal: Principal):
    return select(ScheduleException).where(
        ScheduleException.user_id == principal.user_id,
        ScheduleException.deleted_at.is_(None),
    )


async def _date_taken(db: AsyncSession, principal: Principal, day: date) -> bool:
    result = await db.execute(_owned(principal).where(ScheduleException.date == day))
    return result.scalars().first() is not None


async def _get_owned_or_404(db: AsyncSession, principal: Principal, exception_id: int) -> ScheduleException:
    result = await db.execute(_owned(principal).where(ScheduleException.id == exception_id))
    exception = result.scalar_one_or_none()
    if not exception:
        raise HTTPException(status_code=404, detail="schedule exception not found")
    return exception


@router.get("", response_model=List[ScheduleExceptionResponse])
async def read_schedule_exceptions(
    *,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(get_current_principal)) -> Any:
    result = await db.execute(_owned(principal).order_by(ScheduleException.date))
    return result.scalars().all()


@router.post("", response_model=ScheduleExceptionResponse, status_code=201)
async def create_schedule_exception(
    *,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
    exception_in: ScheduleExceptionCreate) -> Any:
    day = _parse_date(exception_in.date)
    if await _date_taken(db, principal, day):
        raise HTTPException(status_code=409, detail="schedule exception already exists for this date")

    exception = ScheduleException(
        user_id=principal.user_id,
        date=day,
        is_closed=exception_in.is_closed,
        opening_time=exception_in.opening_time,
        closing_time=exception_in.closing_time,
        notes=exception_in.notes,
    )
    db.add(exception)
    await db.commit()
    await db.refresh(exception)
    return exception


@router.post("/bulk", response_model=ScheduleExceptionBulkResponse, status_code=201)
async def bulk_create_schedule_exceptions(
    *,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
    bulk_in: ScheduleExceptionBulkCreate) -> Any:
    """Dates that already have an exception are skipped"""
    days = []
    for value in bulk_in.dates:
        day = _parse_date(value)
        if day not in days:
            days.append(day)

    exceptions = []
    for day in days:
        if await _date_taken(db, principal, day):
            continue
        exception = ScheduleException(
            user_id=principal.user_id,
            date=day,
            is_closed=bulk_in.is_closed,
            notes=bulk_in.notes,
        )
        db.add(exception)
        exceptions.append(exception)

    await db.commit()
    for exception in exceptions:
        await db.refresh(exception)

    return ScheduleExceptionBulkResponse(
        created=len(exceptions),
        exceptions=[ScheduleExceptionResponse.model_validate(e) for e in exceptions],
    )


@router.put("/{exception_id}", response_model=ScheduleExceptionResponse)
async def update_schedule_exception(
    *,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
    exception_id: int,
    exception_in: ScheduleExceptionUpdate) -> Any:
    exception = await _get_owned_or_404(db, principal, exception_id)

    update_data = exception_in.model_dump(exclude_unset=True)
    for field, value in update_data.items():
        setattr(exception, field, value)

    await db.commit()
    await db.refresh(exception)
    return exception


@router.delete("/{exception_id}")
async def delete_schedule_exception(
    *,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
    exception_id: int) -> Any:
    exception = await _get_owned_or_404(db, principal, exception_id)
    exception.deleted_at = datetime.utcnow()
    await db.commit()
    return {"message": "schedule exception deleted"}
