"""ActivityLog model - append-only audit trail of staff actions."""

from __future__ import annotations

from datetime import datetime
from typing import Optional, Dict, Any
from uuid import UUID, uuid4

from sqlalchemy import JSON
from sqlmodel import SQLModel, Field, Column

from .staff_member import StaffSummary
from .timestamps import UTC_DATETIME, utc_now


class ActivityLogBase(SQLModel):
    user_id: UUID = Field(foreign_key="staff_members.id", index=True)

    action: str  # User Login | Update Form | Publish Report | etc.
    resource_type: Optional[str] = None  # auth | forms | reports | staff_members
    resource_id: Optional[str] = None

    # Always carries "timestamp" and "user_agent"
    details: Dict[str, Any] = Field(default_factory=dict, sa_column=Column(JSON))


class ActivityLog(ActivityLogBase, table=True):
    __tablename__ = "activity_logs"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    created_at: datetime = Field(default_factory=utc_now, sa_type=UTC_DATETIME, index=True)


class ActivityLogRead(ActivityLogBase):
    id: UUID
    created_at: datetime
    staff_member: Optional[StaffSummary] = None
