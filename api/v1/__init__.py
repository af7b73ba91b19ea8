"""API v1 routers"""
from . import (
    auth,
    dashboard,
    foi_requests,
    reports,
    staff,
    activity_logs,
)

__all__ = [
    "auth",
    "dashboard",
    "foi_requests",
    "reports",
    "staff",
    "activity_logs",
]
