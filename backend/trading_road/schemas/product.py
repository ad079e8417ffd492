"""Product schemas"""
from typing import Optional, List
from pydantic import BaseModel, Field
from datetime import datetime


class ProductCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    sku: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = None
    price: float = Field(..., ge=0)
    stock_quantity: int = Field(default=0, ge=0)
    unit: Optional[str] = Field(None, max_length=20)
    category: Optional[str] = Field(None, max_length=50)
    image_url: Optional[str] = None
    # Required when an admin creates the product on a supplier's behalf
    supplier_id: Optional[int] = None


class ProductUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    sku: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = None
    price: Optional[float] = Field(None, ge=0)
    stock_quantity: Optional[int] = Field(None, ge=0)
    unit: Optional[str] = Field(None, max_length=20)
    category: Optional[str] = Field(None, max_length=50)
    image_url: Optional[str] = None



class ProductResponse(BaseModel):
    id: int
    supplier_id: int
    name: str
    description: Optional[str] = None
    sku: str
    price: float
    stock_quantity: int
    unit: Optional[str] = None
    category: Optional[str] = None
    image_url: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    deleted_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class BulkProductResponse(BaseModel):
    created: int
    failed: int
    products: List[ProductResponse]
    errors: List[str] = Field(default_factory=list)
