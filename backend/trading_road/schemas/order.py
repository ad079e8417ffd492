"""Order schemas - drafts, line items, submission and status changes"""
from typing import Optional, List
from pydantic import BaseModel, Field
from datetime import datetime

from trading_road.schemas.user import UserBrief
from trading_road.schemas.product import ProductResponse
from trading_road.schemas.rating import RatingResponse


class DraftOrderCreate(BaseModel):
    supplier_id: int = Field(..., ge=1)


class OrderItemAdd(BaseModel):
    product_id: int = Field(..., ge=1)
    quantity: int = Field(..., ge=1)


class OrderItemUpdate(BaseModel):
    quantity: int = Field(..., ge=1)


class OrderSubmit(BaseModel):
    payment_method: str = Field(..., min_length=1)
    delivery_option: str = Field(..., min_length=1)
    delivery_fee: float = Field(default=0, ge=0)
    distance: float = Field(default=0, ge=0)
    shipping_address: Optional[str] = None
    payment_proof_url: Optional[str] = None
    notes: Optional[str] = None


class OrderStatusUpdate(BaseModel):
    status: str = Field(..., min_length=1)


class OrderItemResponse(BaseModel):
    id: int
    order_id: int
    product_id: int
    product: Optional[ProductResponse] = None
    quantity: int
    unit_price: float
    subtotal: float
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class OrderResponse(BaseModel):
    id: int
    store_id: int
    store: Optional[UserBrief] = None
    supplier_id: int
    supplier: Optional[UserBrief] = None
    status: str
    total_amount: float
    payment_method: Optional[str] = None
    payment_status: Optional[str] = None
    payment_proof_url: Optional[str] = None
    delivery_option: Optional[str] = None
    delivery_fee: float = 0
    distance: float = 0
    shipping_address: Optional[str] = None
    notes: Optional[str] = None
    order_items: List[OrderItemResponse] = Field(default_factory=list)
    # Only filled on the single-order view
    ratings: Optional[List[RatingResponse]] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class InvoiceResponse(BaseModel):
    message: str
    to: str
