"""Rating schemas"""
from typing import Optional, List
from pydantic import BaseModel, Field
from datetime import datetime

from trading_road.schemas.user import UserBrief


class RatingCreate(BaseModel):
    rating: int = Field(..., ge=1, le=5)
    comment: Optional[str] = None


class RatingResponse(BaseModel):
    id: int
    order_id: int
    rater_id: int
    rated_id: int
    rating: int
    comment: Optional[str] = None
    rater: Optional[UserBrief] = None
    rated: Optional[UserBrief] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class SupplierRatingSummary(BaseModel):
    supplier_id: int
    supplier_name: str
    average_rating: float
    rating_count: int


class StoreRatingSummary(BaseModel):
    store_id: int
    store_name: str
    average_rating: float
    rating_count: int


class OrderWithRatings(BaseModel):
    order_id: int
    store_name: str
    supplier_name: str
    rating_count: int


class RatingsSummaryResponse(BaseModel):
    suppliers: List[SupplierRatingSummary]
    stores: List[StoreRatingSummary]
    orders_with_ratings: List[OrderWithRatings]


class MyRatingsResponse(BaseModel):
    ratings: List[RatingResponse]


class RatedOrdersResponse(BaseModel):
    order_ids: List[int]
