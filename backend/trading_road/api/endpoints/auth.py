"""Registration and login"""

from datetime import datetime
from typing import Any, List, Optional
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from trading_road.core.deps import get_db
from trading_road.core.logging_config import get_logger
from trading_road.core.security import (
    get_password_hash, verify_password, create_access_token, create_employee_token
)
from trading_road.models.employee import Employee
from trading_road.models.feature_flag import FeatureFlag
from trading_road.models.user import User, TRADING_ROLES
from trading_road.schemas.auth import (
    RegisterRequest, LoginRequest, UnifiedLoginRequest, EmployeeLoginRequest,
    AuthResponse, EmployeeAuthResponse,
)
from trading_road.schemas.employee import EmployeeResponse
from trading_road.schemas.user import UserResponse

logger = get_logger(__name__)

router = APIRouter()

PROFILE_FIELDS = (
    "address", "latitude", "longitude", "logo_url", "banner_url",
    "facebook", "instagram", "twitter", "linkedin", "youtube", "tiktok", "website",
)


async def ensure_unique_identity(db: AsyncSession, email: str, phone: Optional[str]) -> None:
    result = await db.execute(select(User.id).where(User.email == email))
    if result.scalar_one_or_none() is not None:
        raise HTTPException(status_code=409, detail="email already exists")
    if phone:
        result = await db.execute(select(User.id).where(User.phone == phone))
        if result.scalar_one_or_none() is not None:
            raise HTTPException(status_code=409, detail="phone already exists")


async def create_user(
    db: AsyncSession,
    data: RegisterRequest,
    admin_level: Optional[int] = None) -> User:
    await ensure_unique_identity(db, data.email, data.phone)

    user = User(
        email=data.email,
        password=get_password_hash(data.password),
        name=data.name,
        phone=data.phone,
        role=data.role,
        admin_level=admin_level,
        **{field: getattr(data, field) for field in PROFILE_FIELDS},
    )
    db.add(user)
    await db.commit()
    await db.refresh(user)
    logger.info(f"User {user.id} registered as {user.role}")
    return user


async def get_feature_flags(db: AsyncSession, user_id: int) -> List[str]:
    result = await db.execute(
        select(FeatureFlag.flag).where(FeatureFlag.user_id == user_id).order_by(FeatureFlag.id)
    )
    return list(result.scalars().all())


async def _owner_login(db: AsyncSession, email: str, password: str) -> Optional[AuthResponse]:
    result = await db.execute(select(User).where(User.email == email))
    user = result.scalar_one_or_none()
    if not user or not verify_password(password, user.password):
        return None

    user.last_login = datetime.utcnow()
    await db.commit()
    await db.refresh(user)

    return AuthResponse(
        token=create_access_token(user),
        user=UserResponse.model_validate(user),
        feature_flags=await get_feature_flags(db, user.id),
    )


async def _employee_response(db: AsyncSession, owner: User, employee: Employee) -> EmployeeAuthResponse:
    employee.last_login = datetime.utcnow()
    await db.commit()
    await db.refresh(employee)
    logger.info(f"Employee {employee.id} logged in for owner {owner.id}")
    return EmployeeAuthResponse(
        token=create_employee_token(owner, employee),
        user=UserResponse.model_validate(owner),
        employee=EmployeeResponse.model_validate(employee),
    )


@router.post("/register", response_model=AuthResponse, status_code=201)
async def register(
    *,
    db: AsyncSession = Depends(get_db),
    user_in: RegisterRequest) -> Any:
    """Self-registration for suppliers and stores"""
    if user_in.role not in TRADING_ROLES:
        raise HTTPException(status_code=400, detail="role must be 'supplier' or 'store'")

    user = await create_user(db, user_in)
    return AuthResponse(
        token=create_access_token(user),
        user=UserResponse.model_validate(user),
        feature_flags=[],
    )


@router.post("/login", response_model=AuthResponse)
async def login(
    *,
    db: AsyncSession = Depends(get_db),
    credentials: LoginRequest) -> Any:
    response = await _owner_login(db, credentials.email, credentials.password)
    if response is None:
        raise HTTPException(status_code=401, detail="invalid email or password")
    return response


@router.post("/login/unified")
async def unified_login(
    *,
    db: AsyncSession = Depends(get_db),
    credentials: UnifiedLoginRequest) -> Any:
    """An identifier with "@" is an owner e-mail, anything else an employee username"""
    identifier = credentials.email_or_username.strip()

    if "@" in identifier:
        response = await _owner_login(db, identifier, credentials.password)
        if response is not None:
            return response
    else:
        result = await db.execute(
            select(Employee, User)
            .join(User, User.id == Employee.owner_user_id)
            .where(Employee.username == identifier, User.role.in_(TRADING_ROLES))
            .order_by(Employee.id)
        )
        for employee, owner in result.all():
            if employee.status_active and verify_password(credentials.password, employee.password):
                return await _employee_response(db, owner, employee)

    raise HTTPException(status_code=401, detail="invalid credentials")


@router.post("/login/employee", response_model=EmployeeAuthResponse)
async def employee_login(
    *,
    db: AsyncSession = Depends(get_db),
    credentials: EmployeeLoginRequest) -> Any:
    result = await db.execute(
        select(User).where(User.email == credentials.owner_email, User.role.in_(TRADING_ROLES))
    )
    owner = result.scalar_one_or_none()
    if not owner:
        raise HTTPException(status_code=401, detail="invalid credentials")

    result = await db.execute(
        select(Employee).where(
            Employee.owner_user_id == owner.id,
            Employee.username == credentials.username,
        )
    )
    employee = result.scalar_one_or_none()
    if not employee:
        raise HTTPException(status_code=401, detail="invalid credentials")
    if not employee.status_active:
        raise HTTPException(status_code=403, detail="employee account is inactive")
    if not verify_password(credentials.password, employee.password):
        raise HTTPException(status_code=401, detail="invalid credentials")

    return await _employee_response(db, owner, employee)
