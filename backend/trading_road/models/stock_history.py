"""
Stock history model - append-only log of product stock movements.
"""

from datetime import datetime
from sqlalchemy import Column, Integer, Text, String, DateTime, ForeignKey
from sqlalchemy.orm import relationship

from trading_road.db.base import Base

CHANGE_INITIAL_STOCK = "initial_stock"
CHANGE_MANUAL_ADJUSTMENT = "manual_adjustment"
CHANGE_STOCK_RESET = "stock_reset"
CHANGE_ORDER_RESERVED = "order_reserved"
CHANGE_ORDER_RELEASED = "order_released"

CHANGE_TYPES = (
    CHANGE_INITIAL_STOCK,
    CHANGE_MANUAL_ADJUSTMENT,
    CHANGE_STOCK_RESET,
    CHANGE_ORDER_RESERVED,
    CHANGE_ORDER_RELEASED,
)


class StockHistory(Base):
    __tablename__ = "products_stocks_history"

    id = Column(Integer, primary_key=True, index=True)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False, index=True)
    order_id = Column(Integer, ForeignKey("orders.id"), index=True)

    previous_stock = Column(Integer, nullable=False)
    new_stock = Column(Integer, nullable=False)
    # new_stock - previous_stock, never zero
    change_amount = Column(Integer, nullable=False)
    change_type = Column(String(30), nullable=False, index=True)

    # Who made the change; employee_id is set when acting through an employee token
    user_id = Column(Integer, ForeignKey("users.id"), index=True)
    employee_id = Column(Integer, ForeignKey("employees.id"), index=True)
    notes = Column(Text)

    created_at = Column(DateTime, default=datetime.utcnow, index=True)

    product = relationship("Product")

    def __repr__(self):
        return f"<StockHistory {self.product_id} {self.change_type} {self.change_amount:+d}>"

    @property
    def product_name(self):
        # Only safe when the product relation was eager loaded
        product = self.__dict__.get("product")
        return product.name if product is not None else None
