"""
User model - suppliers, stores and platform admins share one table.
The role decides which side of an order a user sits on.
"""

from datetime import datetime
from sqlalchemy import Column, Integer, String, Boolean, DateTime, Numeric

from trading_road.db.base import Base

ROLE_SUPPLIER = "supplier"
ROLE_STORE = "store"
ROLE_ADMIN = "admin"

ROLES = (ROLE_SUPPLIER, ROLE_STORE, ROLE_ADMIN)
TRADING_ROLES = (ROLE_SUPPLIER, ROLE_STORE)


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(255), unique=True, index=True, nullable=False)
    password = Column(String(255), nullable=False)
    name = Column(String(255), nullable=False)
    phone = Column(String(50), index=True)
    address = Column(String(500))
    latitude = Column(Numeric(10, 8, asdecimal=False))
    longitude = Column(Numeric(11, 8, asdecimal=False))

    logo_url = Column(String(500))
    banner_url = Column(String(500))
    facebook = Column(String(255))
    instagram = Column(String(255))
    twitter = Column(String(255))
    linkedin = Column(String(255))
    youtube = Column(String(255))
    tiktok = Column(String(255))
    website = Column(String(255))

    # supplier / store / admin
    role = Column(String(20), nullable=False, index=True)
    # 1 = full access, 2 = limited user creation, 3 = read-only; admins only
    admin_level = Column(Integer)

    # Business hours, "HH:MM" in business time
    opening_time = Column(String(5))
    closing_time = Column(String(5))
    # Comma separated weekday numbers, 0 = Sunday
    closed_days_of_week = Column(String(20))
    # Manual switch used when no hours are configured
    is_open = Column(Boolean, nullable=False, default=True)

    fcm_token = Column(String(255))

    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)
    last_login = Column(DateTime)

    def __repr__(self):
        return f"<User {self.email} ({self.role})>"

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
        """Admins without a stored level are treated as level 1"""
        return self.admin_level or 1
