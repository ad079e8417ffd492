from typing import Optional
from pydantic import BaseModel
from datetime import datetime

from trading_road.schemas.user import UserBrief


class MessageCreate(BaseModel):
    content: Optional[str] = None
    image_url: Optional[str] = None


class MessageResponse(BaseModel):
    id: int
    order_id: int
    sender_id: int
    sender: Optional[UserBrief] = None
    content: str
    image_url: Optional[str] = None
    read_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
