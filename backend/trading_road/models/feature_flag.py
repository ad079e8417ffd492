from datetime import datetime
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, UniqueConstraint

from trading_road.db.base import Base


class FeatureFlag(Base):
    """Per-user flag, e.g. an onboarding tour that has been seen"""
    __tablename__ = "feature_flags"
    __table_args__ = (
        UniqueConstraint("user_id", "flag", name="uq_feature_flag_user_flag"),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    flag = Column(String(100), nullable=False, index=True)
    created_at = Column(DateTime, default=datetime.utcnow)
