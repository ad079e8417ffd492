"""
Employee model - staff accounts that act on behalf of a supplier or store owner.
"""

from datetime import datetime
from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship

from trading_road.db.base import Base

# Permission flags carried by employee tokens
PERMISSION_FLAGS = (
    "can_manage_inventory",
    "can_manage_orders",
    "can_chat",
    "can_change_status",
    "can_rate",
)


class Employee(Base):
    __tablename__ = "employees"
    __table_args__ = (
        UniqueConstraint("owner_user_id", "username", name="uq_employee_owner_username"),
    )

    id = Column(Integer, primary_key=True, index=True)
    owner_user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    username = Column(String(100), nullable=False, index=True)
    password = Column(String(255), nullable=False)
    name = Column(String(255))
    phone = Column(String(50))
    role = Column(String(50))
    profile_pic_url = Column(String(500))

    can_manage_inventory = Column(Boolean, nullable=False, default=True)
    can_manage_orders = Column(Boolean, nullable=False, default=True)
    can_chat = Column(Boolean, nullable=False, default=True)
    can_change_status = Column(Boolean, nullable=False, default=True)
    can_rate = Column(Boolean, nullable=False, default=False)
    status_active = Column(Boolean, nullable=False, default=True)

    last_login = Column(DateTime)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    owner = relationship("User", foreign_keys=[owner_user_id])

    def __repr__(self):
        return f"<Employee {self.username} of {self.owner_user_id}>"

    @property
    def permissions(self) -> dict:
        return {flag: bool(getattr(self, flag)) for flag in PERMISSION_FLAGS}
