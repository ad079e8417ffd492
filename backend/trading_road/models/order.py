"""
Order model - one store buying from one supplier.

Lifecycle:
- draft: the store's cart, at most one per (store, supplier)
- preparing: submitted, supplier is packing
- in_transit: on the road (only from preparing)
- delivered: received (only from in_transit)
- cancelled
"""

from datetime import datetime
from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, Numeric
from sqlalchemy.orm import relationship

from trading_road.db.base import Base

STATUS_DRAFT = "draft"
STATUS_PREPARING = "preparing"
STATUS_IN_TRANSIT = "in_transit"
STATUS_DELIVERED = "delivered"
STATUS_CANCELLED = "cancelled"

ORDER_STATUSES = (
    STATUS_DRAFT,
    STATUS_PREPARING,
    STATUS_IN_TRANSIT,
    STATUS_DELIVERED,
    STATUS_CANCELLED,
)

# Target status -> status the order must currently be in
REQUIRED_PREVIOUS_STATUS = {
    STATUS_IN_TRANSIT: STATUS_PREPARING,
    STATUS_DELIVERED: STATUS_IN_TRANSIT,
}

PAYMENT_CASH_ON_DELIVERY = "cash_on_delivery"
PAYMENT_GCASH = "gcash"
PAYMENT_METHODS = (PAYMENT_CASH_ON_DELIVERY, PAYMENT_GCASH)

PAYMENT_PENDING = "pending"
PAYMENT_PAID = "paid"
PAYMENT_FAILED = "failed"

DELIVERY_PICKUP = "pickup"
DELIVERY_DELIVER = "deliver"
DELIVERY_OPTIONS = (DELIVERY_PICKUP, DELIVERY_DELIVER)


class Order(Base):
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, index=True)
    store_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    supplier_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    status = Column(String(20), nullable=False, default=STATUS_DRAFT, index=True)
    total_amount = Column(Numeric(10, 2, asdecimal=False), default=0)

    payment_method = Column(String(20))
    payment_status = Column(String(20), default=PAYMENT_PENDING)
    payment_proof_url = Column(String(500))

    delivery_option = Column(String(20))
    delivery_fee = Column(Numeric(10, 2, asdecimal=False), default=0)
    distance = Column(Numeric(10, 2, asdecimal=False), default=0)
    shipping_address = Column(Text)
    notes = Column(Text)

    created_at = Column(DateTime, default=datetime.utcnow, index=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    store = relationship("User", foreign_keys=[store_id])
    supplier = relationship("User", foreign_keys=[supplier_id])
    order_items = relationship(
        "OrderItem",
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="OrderItem.id",
    )

    def __repr__(self):
        return f"<Order {self.id} ({self.status})>"

    @property
    def is_draft(self) -> bool:
        return self.status == STATUS_DRAFT

    @property
    def items_subtotal(self) -> float:
        return round(sum(item.subtotal or 0 for item in self.order_items), 2)


class OrderItem(Base):
    """A product line; unit_price is the product price when the line was created"""
    __tablename__ = "order_items"

    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(Integer, ForeignKey("orders.id"), nullable=False, index=True)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False, index=True)
    quantity = Column(Integer, nullable=False)
    unit_price = Column(Numeric(10, 2, asdecimal=False), nullable=False)
    subtotal = Column(Numeric(10, 2, asdecimal=False), nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    order = relationship("Order", back_populates="order_items")
    product = relationship("Product")

    def recalculate(self):
        self.subtotal = round(self.unit_price * self.quantity, 2)
