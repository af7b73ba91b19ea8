"""Domain models for the FOI portal"""
from .staff_member import StaffMember
from .foi_request import FoiRequest
from .report import Report
from .activity_log import ActivityLog

__all__ = [
    "StaffMember",
    "FoiRequest",
    "Report",
    "ActivityLog",
]
