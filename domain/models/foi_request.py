"""FoiRequest model - citizen Freedom-of-Information submissions"""
import secrets
from datetime import datetime
from enum import Enum
from typing import Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field as PydanticField, field_validator, model_validator
from sqlalchemy import Column, String
from sqlmodel import SQLModel, Field

from .timestamps import UTC_DATETIME, utc_now


class RequestStatus(str, Enum):
    PENDING = "pending"
    IN_REVIEW = "in_review"
    RESOLVED = "resolved"
    REJECTED = "rejected"


OTHER_CONCERN = "Other"

CONCERN_TYPES = [
    "General Inquiry",
    "Document Request",
    "Service Complaint",
    "Suggestion",
    "Report",
    OTHER_CONCERN,
]

DEPARTMENTS = [
    "City Admin Office",
    "Finance Department",
    "Social Services",
    "Public Health Office",
    "Tourism Office",
    "Legal Affairs",
    "Human Resources",
]


def generate_reference_number() -> str:
    """Column default for reference_number: FOI-YYYYMMDD-XXXXXX"""
    return f"FOI-{utc_now():%Y%m%d}-{secrets.token_hex(3).upper()}"


class FoiRequestBase(SQLModel):
    full_name: str
    email: str = Field(index=True)
    contact_number: str
    barangay: str  # area
    street: str
    concern: str = Field(index=True)  # a CONCERN_TYPES entry, or the free text given for "Other"
    image_url: Optional[str] = None


class FoiRequest(FoiRequestBase, table=True):
    __tablename__ = "foi_requests"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    # Filled by the store on insert, never updated afterwards
    reference_number: Optional[str] = Field(
        default=None,
        sa_column=Column(
            "reference_number",
            String,
            unique=True,
            index=True,
            default=generate_reference_number,
        ),
    )
    status: str = Field(default=RequestStatus.PENDING.value, index=True)

    # Referral
    referred_to: Optional[str] = None
    referred_at: Optional[datetime] = Field(default=None, sa_type=UTC_DATETIME)
    notes: Optional[str] = None

    created_at: datetime = Field(default_factory=utc_now, sa_type=UTC_DATETIME)
    updated_at: datetime = Field(default_factory=utc_now, sa_type=UTC_DATETIME)


class FoiRequestRead(FoiRequestBase):
    id: UUID
    reference_number: Optional[str] = None
    status: str
    referred_to: Optional[str] = None
    referred_at: Optional[datetime] = None
    notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class FoiRequestSubmit(BaseModel):
    """Public request form"""
    full_name: str = PydanticField(min_length=1)
    email: str = PydanticField(min_length=3)
    contact_number: str = PydanticField(min_length=1)
    barangay: str = PydanticField(min_length=1)
    street: str = PydanticField(min_length=1)
    concern: str = PydanticField(min_length=1)
    custom_concern: Optional[str] = None

    @field_validator("concern")
    @classmethod
    def _known_concern(cls, value: str) -> str:
        if value not in CONCERN_TYPES:
            raise ValueError(f"concern must be one of: {', '.join(CONCERN_TYPES)}")
        return value

    @model_validator(mode="after")
    def _custom_concern_required(self) -> "FoiRequestSubmit":
        if self.concern == OTHER_CONCERN and not (self.custom_concern or "").strip():
            raise ValueError("custom_concern is required when concern is 'Other'")
        return self

    @property
    def resolved_concern(self) -> str:
        """The concern as stored: the free text for 'Other'."""
        if self.concern == OTHER_CONCERN:
            return self.custom_concern.strip()
        return self.concern


class SubmissionResponse(BaseModel):
    success: bool
    reference_number: Optional[str] = None
    message: str


class RequestStatusUpdate(BaseModel):
    status: RequestStatus


class ReferralRequest(BaseModel):
    department: str
    note: Optional[str] = None
