"""
Audit log model - one row per API request, written by the audit middleware.
Used by the admin console for traceability and troubleshooting.
"""

from datetime import datetime
from sqlalchemy import Column, Integer, String, Text, DateTime

from trading_road.db.base import Base


class AuditLog(Base):
    __tablename__ = "audit_logs"

    id = Column(Integer, primary_key=True, index=True)

    # Caller, when the bearer token was valid
    user_id = Column(Integer, index=True)
    employee_id = Column(Integer, index=True)
    role = Column(String(20), index=True)

    # "METHOD /route/template"
    action = Column(String(255), nullable=False, index=True)
    endpoint = Column(String(500), nullable=False, index=True)
    method = Column(String(10), nullable=False)
    status_code = Column(Integer, nullable=False, index=True)

    ip_address = Column(String(100))
    user_agent = Column(String(500))
    request_body = Column(Text)
    response_body = Column(Text)
    error_message = Column(Text)
    duration_ms = Column(Integer)

    created_at = Column(DateTime, default=datetime.utcnow, index=True)

    def __repr__(self):
        return f"<AuditLog {self.action} -> {self.status_code}>"

    @property
    def is_error(self) -> bool:
        return self.status_code >= 400
