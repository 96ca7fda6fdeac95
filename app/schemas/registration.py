"""
SelfEmploy Portal - Registration Schemas

Pydantic schemas for the public registration flow and admin management.
"""

from datetime import datetime
from decimal import Decimal
from typing import Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from app.models.registration import RegistrationStatus
from app.schemas.category import CategoryBrief, PanchayathResponse
from app.services.aging_service import days_remaining


# ===========================================
# REQUEST SCHEMAS
# ===========================================

class RegistrationCreateRequest(BaseModel):
    """Public registration form."""
    name: str = Field(..., min_length=1, max_length=200)
    address: str = Field(..., min_length=1)
    mobile_number: str = Field(..., min_length=1, max_length=20)
    ward: str = Field(..., min_length=1, max_length=50)
    category_id: UUID
    panchayath_id: Optional[UUID] = None
    agent_pro: Optional[str] = Field(None, max_length=200)
    preference: Optional[str] = None


class RegistrationUpdateRequest(BaseModel):
    """Admin edit of non-status fields."""
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    address: Optional[str] = Field(None, min_length=1)
    mobile_number: Optional[str] = Field(None, min_length=1, max_length=20)
    ward: Optional[str] = Field(None, min_length=1, max_length=50)
    agent_pro: Optional[str] = Field(None, max_length=200)
    fee_paid: Optional[Decimal] = Field(None, ge=0)
    category_id: Optional[UUID] = None
    panchayath_id: Optional[UUID] = None
    preference: Optional[str] = None


class StatusUpdateRequest(BaseModel):
    status: RegistrationStatus


class BulkApproveRequest(BaseModel):
    registration_ids: List[UUID] = Field(..., min_length=1)


class SelfConfirmRequest(BaseModel):
    mobile_number: str = Field(..., min_length=1, max_length=20)


# ===========================================
# RESPONSE SCHEMAS
# ===========================================

class RegistrationResponse(BaseModel):
    """Schema for registration response."""
    id: UUID
    customer_id: str
    name: str
    address: str
    mobile_number: str
    ward: str
    agent_pro: Optional[str] = None
    preference: Optional[str] = None
    fee_paid: Decimal
    status: RegistrationStatus
    approved_date: Optional[datetime] = None
    approved_by: Optional[str] = None
    category: Optional[CategoryBrief] = None
    panchayath: Optional[PanchayathResponse] = None
    created_at: datetime
    updated_at: datetime

    # Only set while pending
    days_remaining: Optional[int] = None

    class Config:
        from_attributes = True

    @classmethod
    def from_registration(cls, registration, now: Optional[datetime] = None) -> "RegistrationResponse":
        response = cls.model_validate(registration)
        if registration.status == RegistrationStatus.PENDING:
            response.days_remaining = days_remaining(registration.created_at, now)
        return response


class RegistrationListResponse(BaseModel):
    registrations: List[RegistrationResponse]
    total: int


class RegistrationStatusResponse(BaseModel):
    """Public status lookup result; ``registration`` is null when nothing matches."""
    found: bool
    registration: Optional[RegistrationResponse] = None


class BulkItemOutcomeResponse(BaseModel):
    registration_id: UUID
    success: bool
    status: Optional[RegistrationStatus] = None
    error: Optional[str] = None


class BulkApproveResponse(BaseModel):
    outcomes: List[BulkItemOutcomeResponse]
    succeeded: int
    failed: int


class ExpiryAlertResponse(BaseModel):
    threshold_days: int
    total: int
    by_tier: Dict[str, int]
    registrations: List[RegistrationResponse]
