"""Request dependencies - database session and the authenticated caller"""
from typing import Any, Dict, Generator, Optional

import jwt
from fastapi import Depends, Header, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from trading_road.core.security import decode_token
from trading_road.db.session import SessionLocal
from trading_road.models.employee import PERMISSION_FLAGS
from trading_road.models.user import ROLE_ADMIN, ROLE_STORE, ROLE_SUPPLIER


async def get_db() -> Generator:
    """
    Database session dependency
    """
    async with SessionLocal() as session:
        yield session


class Principal:
    """The caller resolved from the bearer token

    Employee tokens carry the owner's user_id and role, so an employee acts as
    the owner limited by its permission flags.
    """

    def __init__(self, claims: Dict[str, Any]):
        self.user_id: int = int(claims["user_id"])
        self.email: str = claims.get("email", "")
        self.role: str = claims.get("role", "")
        admin_level = claims.get("admin_level")
        self.admin_level: Optional[int] = int(admin_level) if admin_level is not None else None
        self.is_employee: bool = bool(claims.get("is_employee", False))
        employee_id = claims.get("employee_id")
        self.employee_id: Optional[int] = int(employee_id) if employee_id is not None else None
        self.permissions: Dict[str, bool] = {
            flag: bool(claims.get(flag, False)) for flag in PERMISSION_FLAGS
        }

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN

    @property
    def is_supplier(self) -> bool:
        return self.role == ROLE_SUPPLIER

    @property
    def is_store(self) -> bool:
        return self.role == ROLE_STORE

    @property
    def effective_admin_level(self) -> int:
        # Tokens issued before levels existed have no claim
        return self.admin_level or 1

    def has_permission(self, flag: str) -> bool:
        if not self.is_employee:
            return True
        return self.permissions.get(flag, False)


def get_current_principal(authorization: Optional[str] = Header(None)) -> Principal:
    if not authorization:
        raise HTTPException(status_code=401, detail="authorization header required")

    parts = authorization.split(" ")
    if len(parts) != 2 or parts[0] != "Bearer" or not parts[1]:
        raise HTTPException(status_code=401, detail="invalid authorization header format")

    try:
        claims = decode_token(parts[1])
        return Principal(claims)
    except (jwt.InvalidTokenError, KeyError, TypeError, ValueError):
        raise HTTPException(status_code=401, detail="invalid token")


def require_roles(*roles: str):
    def dependency(principal: Principal = Depends(get_current_principal)) -> Principal:
        if principal.role not in roles:
            raise HTTPException(status_code=403, detail="insufficient permissions")
        return principal

    return dependency


def require_admin_level(max_level: int):
    """Admins whose level is at most max_level; level 1 is the most privileged"""

    def dependency(principal: Principal = Depends(get_current_principal)) -> Principal:
        if not principal.is_admin:
            raise HTTPException(status_code=403, detail="only admin can access this resource")
        if principal.effective_admin_level > max_level:
            raise HTTPException(status_code=403, detail="insufficient admin level")
        return principal

    return dependency


def require_owner(principal: Principal = Depends(get_current_principal)) -> Principal:
    """Supplier or store account holders, not their employees"""
    if principal.is_employee:
        raise HTTPException(status_code=403, detail="employees cannot manage employees")
    if not (principal.is_supplier or principal.is_store):
        raise HTTPException(status_code=403, detail="only suppliers and stores can manage employees")
    return principal


def ensure_permission(principal: Principal, flag: str) -> None:
    if not principal.has_permission(flag):
        raise HTTPException(status_code=403, detail=f"employee does not have permission: {flag}")


def can_create_users(principal: Principal) -> bool:
    return principal.is_admin and principal.effective_admin_level <= 2


def can_create_admin_users(principal: Principal) -> bool:
    return principal.is_admin and principal.effective_admin_level == 1


def is_read_only(principal: Principal) -> bool:
    return principal.is_admin and principal.effective_admin_level == 3
