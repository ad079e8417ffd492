"""API router aggregation"""
from fastapi import APIRouter

from trading_road.api.endpoints import (
    auth, users, me, directory, products, stock_history,
    ratings, dashboard, bug_reports, audit_logs, schedule, employees, feature_flags,
)
from trading_road.api.endpoints.orders import router as orders_router

api_router = APIRouter()

# Accounts
api_router.include_router(auth.router, tags=["auth"])
api_router.include_router(me.router, prefix="/me", tags=["me"])
api_router.include_router(users.router, prefix="/users", tags=["users"])
api_router.include_router(employees.router, prefix="/employees", tags=["employees"])
api_router.include_router(feature_flags.router, prefix="/feature-flags", tags=["feature flags"])

# Trading
api_router.include_router(directory.router, tags=["directory"])
api_router.include_router(products.router, prefix="/products", tags=["products"])
api_router.include_router(stock_history.router, tags=["stock history"])
api_router.include_router(orders_router, tags=["orders"])
api_router.include_router(schedule.router, prefix="/schedule/exceptions", tags=["schedule"])

# Admin
api_router.include_router(ratings.router, prefix="/ratings", tags=["ratings"])
api_router.include_router(dashboard.router, tags=["dashboard"])
api_router.include_router(bug_reports.router, prefix="/bug-reports", tags=["bug reports"])
api_router.include_router(audit_logs.router, prefix="/audit-logs", tags=["audit logs"])
