"""
Bug report model - crash and error reports sent by the mobile and web clients.
"""

from datetime import datetime
from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey
from sqlalchemy.orm import relationship

from trading_road.db.base import Base

BUG_OPEN = "open"
BUG_INVESTIGATING = "investigating"
BUG_FIXED = "fixed"
BUG_RESOLVED = "resolved"
BUG_CLOSED = "closed"

BUG_STATUSES = (BUG_OPEN, BUG_INVESTIGATING, BUG_FIXED, BUG_RESOLVED, BUG_CLOSED)
# Moving into one of these stamps resolved_by / resolved_at
RESOLVING_STATUSES = (BUG_FIXED, BUG_RESOLVED, BUG_CLOSED)


class BugReport(Base):
    __tablename__ = "bug_reports"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), index=True)

    platform = Column(String(50), nullable=False)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=False)
    error_type = Column(String(100))
    stack_trace = Column(Text)
    device_info = Column(Text)
    app_version = Column(String(50))
    os_version = Column(String(50))

    status = Column(String(20), nullable=False, default=BUG_OPEN, index=True)
    resolved_by = Column(Integer, ForeignKey("users.id"))
    resolved_at = Column(DateTime)
    notes = Column(Text)

    created_at = Column(DateTime, default=datetime.utcnow, index=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
    deleted_at = Column(DateTime, index=True)

    user = relationship("User", foreign_keys=[user_id])
    resolved_by_user = relationship("User", foreign_keys=[resolved_by])

    def __repr__(self):
        return f"<BugReport {self.id} {self.platform} ({self.status})>"
