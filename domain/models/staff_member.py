"""StaffMember model - dashboard users, keyed by the Supabase auth user id"""
from datetime import datetime
from enum import Enum
from typing import Optional
from uuid import UUID, uuid4

from sqlmodel import SQLModel, Field

from .timestamps import UTC_DATETIME, utc_now


class StaffRole(str, Enum):
    ADMIN = "admin"
    STAFF = "staff"
    VIEWER = "viewer"


class StaffMemberBase(SQLModel):
    email: str = Field(index=True)
    full_name: str
    role: str = Field(default=StaffRole.VIEWER.value)  # admin | staff | viewer
    department: str = ""
    is_active: bool = Field(default=True)


class StaffMember(StaffMemberBase, table=True):
    __tablename__ = "staff_members"

    # Same value as auth.users.id
    id: UUID = Field(default_factory=uuid4, primary_key=True)
    created_at: datetime = Field(default_factory=utc_now, sa_type=UTC_DATETIME)
    updated_at: datetime = Field(default_factory=utc_now, sa_type=UTC_DATETIME)


class StaffMemberRead(StaffMemberBase):
    id: UUID
    created_at: datetime
    updated_at: datetime


class StaffMemberUpdate(SQLModel):
    role: Optional[StaffRole] = None
    department: Optional[str] = None


class StaffSummary(SQLModel):
    """Actor identity attached to activity log rows"""
    full_name: str
    email: str
    role: str
    department: Optional[str] = None
