"""
Product model - a supplier's catalog entry.
stock_quantity is reserved as soon as a store adds the product to a draft order.
"""

from datetime import datetime
from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, Numeric
from sqlalchemy.orm import relationship

from trading_road.db.base import Base


class Product(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True)
    supplier_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    name = Column(String(255), nullable=False, index=True)
    description = Column(Text)
    sku = Column(String(100), unique=True, index=True, nullable=False)
    price = Column(Numeric(10, 2, asdecimal=False), nullable=False)
    stock_quantity = Column(Integer, nullable=False, default=0)
    unit = Column(String(20))
    category = Column(String(50))
    image_url = Column(String(500))

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
    # Soft delete; restored by clearing the timestamp
    deleted_at = Column(DateTime, index=True)

    supplier = relationship("User", foreign_keys=[supplier_id])

    def __repr__(self):
        return f"<Product {self.sku} stock={self.stock_quantity}>"

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None
