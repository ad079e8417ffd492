"""Password hashing and bearer tokens"""

from datetime import datetime, timedelta
from typing import Any, Dict, Optional

import bcrypt
import jwt

from trading_road.core.config import settings
from trading_road.models.employee import PERMISSION_FLAGS

ALGORITHM = "HS256"


def get_password_hash(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    try:
        return bcrypt.checkpw(plain_password.encode("utf-8"), hashed_password.encode("utf-8"))
    except ValueError:
        # Malformed hash or a password over bcrypt's 72 byte limit
        return False


def _encode(claims: Dict[str, Any], expires_delta: Optional[timedelta]) -> str:
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    claims["exp"] = datetime.utcnow() + expires_delta
    return jwt.encode(claims, settings.SECRET_KEY, algorithm=ALGORITHM)


def create_access_token(user, expires_delta: Optional[timedelta] = None) -> str:
    """Token for a supplier, store or admin account"""
    claims: Dict[str, Any] = {
        "user_id": user.id,
        "email": user.email,
        "role": user.role,
    }
    if user.admin_level is not None:
        claims["admin_level"] = user.admin_level
    return _encode(claims, expires_delta)


def create_employee_token(owner, employee, expires_delta: Optional[timedelta] = None) -> str:
    """Token that acts on behalf of the owner with the employee's permissions"""
    claims: Dict[str, Any] = {
        "user_id": owner.id,
        "email": owner.email,
        "role": owner.role,
        "is_employee": True,
        "employee_id": employee.id,
    }
    for name in PERMISSION_FLAGS:
        claims[name] = bool(getattr(employee, name))
    return _encode(claims, expires_delta)


def decode_token(token: str) -> Dict[str, Any]:
    """Raises jwt.InvalidTokenError on a bad signature, expiry or malformed token"""
    return jwt.decode(token, settings.SECRET_KEY, algorithms=[ALGORITHM])
