"""Portal operations on top of the domain models"""
from .activity_logger import Actions, ActivityLogger, ActivityLogQueue
from .auth_context import AuthContext
from .overview import OverviewStats, get_overview
from .report_manager import ReportManager
from .request_intake import Attachment, IntakeResult, RequestIntake
from .request_lifecycle import RequestLifecycle
from .staff_directory import StaffDirectory

__all__ = [
    "Actions",
    "ActivityLogger",
    "ActivityLogQueue",
    "AuthContext",
    "OverviewStats",
    "get_overview",
    "ReportManager",
    "Attachment",
    "IntakeResult",
    "RequestIntake",
    "RequestLifecycle",
    "StaffDirectory",
]
