from datetime import datetime
from sqlalchemy import Column, Integer, String, Text, Boolean, Date, DateTime, ForeignKey

from trading_road.db.base import Base


class ScheduleException(Base):
    """A single day that overrides the user's regular business hours"""
    __tablename__ = "schedule_exceptions"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    date = Column(Date, nullable=False, index=True)
    is_closed = Column(Boolean, nullable=False, default=False)
    # "HH:MM", only meaningful when is_closed is false
    opening_time = Column(String(5))
    closing_time = Column(String(5))
    notes = Column(Text)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
    deleted_at = Column(DateTime, index=True)
