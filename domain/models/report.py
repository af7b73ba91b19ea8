"""Report model - internal publications"""
from datetime import datetime
from enum import Enum
from typing import Optional, Dict, Any
from uuid import UUID, uuid4

from sqlalchemy import JSON
from sqlmodel import SQLModel, Field, Column

from .timestamps import UTC_DATETIME, utc_now


class ReportType(str, Enum):
    SUMMARY = "summary"
    DETAILED = "detailed"
    MONTHLY = "monthly"


class ReportStatus(str, Enum):
    DRAFT = "draft"
    PUBLISHED = "published"
    ARCHIVED = "archived"


class ReportBase(SQLModel):
    title: str
    description: str = ""
    report_type: str = Field(default=ReportType.SUMMARY.value, index=True)


class Report(ReportBase, table=True):
    __tablename__ = "reports"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    status: str = Field(default=ReportStatus.DRAFT.value, index=True)
    created_by: Optional[UUID] = Field(default=None, foreign_key="staff_members.id")
    data: Dict[str, Any] = Field(default_factory=dict, sa_column=Column(JSON))
    created_at: datetime = Field(default_factory=utc_now, sa_type=UTC_DATETIME)


class ReportCreate(SQLModel):
    title: str = Field(min_length=1)
    description: str = ""
    report_type: ReportType = ReportType.SUMMARY


class ReportRead(ReportBase):
    id: UUID
    status: str
    created_by: Optional[UUID] = None
    data: Dict[str, Any] = {}
    created_at: datetime


class ReportStatusUpdate(SQLModel):
    status: ReportStatus
