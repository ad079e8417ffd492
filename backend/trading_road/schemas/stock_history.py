from typing import Optional
from pydantic import BaseModel
from datetime import datetime


class StockHistoryResponse(BaseModel):
    id: int
    product_id: int
    product_name: Optional[str] = None
    previous_stock: int
    new_stock: int
    change_amount: int
    change_type: str
    order_id: Optional[int] = None
    user_id: Optional[int] = None
    employee_id: Optional[int] = None
    notes: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True
