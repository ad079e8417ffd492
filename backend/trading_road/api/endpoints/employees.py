"""
Employee accounts
Owners manage their staff; an employee may read and edit its own profile but not its permissions.
"""

from typing import Any, List
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from trading_road.core.deps import get_db, get_current_principal, require_owner, Principal
from trading_road.core.logging_config import get_logger
from trading_road.core.security import get_password_hash
from trading_road.models.employee import Employee, PERMISSION_FLAGS
from trading_road.schemas.employee import EmployeeCreate, EmployeeUpdate, EmployeeResponse

logger = get_logger(__name__)

router = APIRouter()

# Fields an employee may not change on its own record
OWNER_ONLY_FIELDS = PERMISSION_FLAGS + ("status_active",)


async def _username_taken(db: AsyncSession, owner_id: int, username: str) -> bool:
    result = await db.execute(
        select(Employee.id).where(Employee.owner_user_id == owner_id, Employee.username == username)
    )
    return result.scalars().first() is not None


async def _get_employee_or_404(db: AsyncSession, owner_id: int, employee_id: int) -> Employee:
    result = await db.execute(
        select(Employee).where(Employee.id == employee_id, Employee.owner_user_id == owner_id)
    )
    employee = result.scalar_one_or_none()
    if not employee:
        raise HTTPException(status_code=404, detail="employee not found")
    return employee


@router.get("", response_model=List[EmployeeResponse])
async def read_employees(
    *,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(require_owner)) -> Any:
    result = await db.execute(
        select(Employee).where(Employee.owner_user_id == principal.user_id).order_by(Employee.id)
    )
    return result.scalars().all()


@router.get("/me", response_model=EmployeeResponse)
async def read_my_employee(
    *,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(get_current_principal)) -> Any:
    if not principal.is_employee or not principal.employee_id:
        raise HTTPException(status_code=403, detail="not an employee")
    return await _get_employee_or_404(db, principal.user_id, principal.employee_id)


@router.post("", response_model=EmployeeResponse, status_code=201)
async def create_employee(
    *,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(require_owner),
    employee_in: EmployeeCreate) -> Any:
    if await _username_taken(db, principal.user_id, employee_in.username):
        raise HTTPException(status_code=409, detail="username already exists for this owner")

    data = employee_in.model_dump()
    data["password"] = get_password_hash(data["password"])
    employee = Employee(owner_user_id=principal.user_id, **data)
    db.add(employee)
    await db.commit()
    await db.refresh(employee)
    logger.info(f"Employee {employee.id} ({employee.username}) created for owner {principal.user_id}")
    return employee


@router.put("/{employee_id}", response_model=EmployeeResponse)
async def update_employee(
    *,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
    employee_id: int,
    employee_in: EmployeeUpdate) -> Any:
    if principal.is_employee:
        if principal.employee_id != employee_id:
            raise HTTPException(status_code=403, detail="employees can only update their own profile")
    elif not (principal.is_supplier or principal.is_store):
        raise HTTPException(status_code=403, detail="only suppliers and stores can manage employees")

    employee = await _get_employee_or_404(db, principal.user_id, employee_id)
    update_data = employee_in.model_dump(exclude_unset=True)

    username = update_data.get("username")
    if username and username != employee.username:
        if await _username_taken(db, principal.user_id, username):
            raise HTTPException(status_code=409, detail="username already exists for this owner")

    if update_data.get("password"):
        update_data["password"] = get_password_hash(update_data["password"])

    for field, value in update_data.items():
        if value is None:
            continue
        if principal.is_employee and field in OWNER_ONLY_FIELDS:
            continue
        setattr(employee, field, value)

    await db.commit()
    await db.refresh(employee)
    return employee


@router.delete("/{employee_id}")
async def delete_employee(
    *,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(require_owner),
    employee_id: int) -> Any:
    employee = await _get_employee_or_404(db, principal.user_id, employee_id)
    await db.delete(employee)
    await db.commit()
    logger.info(f"Employee {employee_id} removed by owner {principal.user_id}")
    return {"message": "employee deleted"}
