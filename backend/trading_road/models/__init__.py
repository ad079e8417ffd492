# Importing every model registers its table on Base.metadata

from trading_road.models.user import User
from trading_road.models.employee import Employee
from trading_road.models.product import Product
from trading_road.models.order import Order, OrderItem
from trading_road.models.message import Message
from trading_road.models.rating import Rating
from trading_road.models.stock_history import StockHistory
from trading_road.models.bug_report import BugReport
from trading_road.models.audit_log import AuditLog
from trading_road.models.schedule_exception import ScheduleException
from trading_road.models.feature_flag import FeatureFlag

__all__ = [
    "User",
    "Employee",
    "Product",
    "Order",
    "OrderItem",
    "Message",
    "Rating",
    "StockHistory",
    "BugReport",
    "AuditLog",
    "ScheduleException",
    "FeatureFlag",
]
