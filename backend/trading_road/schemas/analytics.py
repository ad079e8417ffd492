"""Analytics schemas - per-user analytics and the admin dashboard"""
from typing import List, Optional
from pydantic import BaseModel

from trading_road.schemas.order import OrderResponse


class ProductBought(BaseModel):
    """Stores get purchase aggregates; suppliers get their catalog with stock"""
    product_id: int
    product_name: str
    # store
    quantity: Optional[int] = None
    total_spent: Optional[float] = None
    # supplier
    price: Optional[float] = None
    stock: Optional[int] = None
    unit: Optional[str] = None
    category: Optional[str] = None
    sku: Optional[str] = None


class UserAnalytics(BaseModel):
    total_orders: int
    total_earnings: float
    total_products_bought: int
    orders: List[OrderResponse]
    products_bought: List[ProductBought]
    recent_orders: List[OrderResponse]


class DailyStat(BaseModel):
    date: str
    orders: int
    earnings: float


class DashboardAnalytics(BaseModel):
    total_users: int
    total_suppliers: int
    total_stores: int
    total_orders: int
    total_earnings: float
    recent_orders: List[OrderResponse]
    daily_stats: List[DailyStat]


class PublicMetrics(BaseModel):
    total_users: int
    total_suppliers: int
    total_orders: int
