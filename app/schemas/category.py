"""
SelfEmploy Portal - Category Schemas

Pydantic schemas for category and panchayath management.
"""

from datetime import datetime
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field


# ===========================================
# REQUEST SCHEMAS
# ===========================================

class CategoryCreateRequest(BaseModel):
    """Schema for creating a category."""
    name: str = Field(..., min_length=1, max_length=150)
    description: Optional[str] = None

    # Fees
    actual_fee: Decimal = Field(Decimal("0"), ge=0, description="List price shown to registrants")
    offer_fee: Decimal = Field(Decimal("0"), ge=0, description="Fee charged at registration")

    # Presentation
    warning_message: Optional[str] = None
    preference: Optional[str] = None
    popup_image_url: Optional[str] = Field(None, max_length=500)
    qr_image_url: Optional[str] = Field(None, max_length=500)
    is_highlighted: bool = False
    is_active: bool = True


class CategoryUpdateRequest(BaseModel):
    """Schema for updating a category."""
    name: Optional[str] = Field(None, min_length=1, max_length=150)
    description: Optional[str] = None
    actual_fee: Optional[Decimal] = Field(None, ge=0)
    offer_fee: Optional[Decimal] = Field(None, ge=0)
    warning_message: Optional[str] = None
    preference: Optional[str] = None
    popup_image_url: Optional[str] = Field(None, max_length=500)
    qr_image_url: Optional[str] = Field(None, max_length=500)
    is_highlighted: Optional[bool] = None
    is_active: Optional[bool] = None


class PanchayathCreateRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=150)
    district: str = Field(..., min_length=1, max_length=150)


class PanchayathUpdateRequest(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=150)
    district: Optional[str] = Field(None, min_length=1, max_length=150)


# ===========================================
# RESPONSE SCHEMAS
# ===========================================

class CategoryBrief(BaseModel):
    id: UUID
    name: str
    offer_fee: Decimal

    class Config:
        from_attributes = True


class CategoryResponse(BaseModel):
    """Schema for category response."""
    id: UUID
    name: str
    description: Optional[str] = None
    actual_fee: Decimal
    offer_fee: Decimal
    warning_message: Optional[str] = None
    preference: Optional[str] = None
    popup_image_url: Optional[str] = None
    qr_image_url: Optional[str] = None
    is_highlighted: bool
    is_active: bool
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class CategoryListResponse(BaseModel):
    """List of categories response."""
    categories: List[CategoryResponse]
    total: int


class PanchayathResponse(BaseModel):
    id: UUID
    name: str
    district: str

    class Config:
        from_attributes = True


class PanchayathListResponse(BaseModel):
    panchayaths: List[PanchayathResponse]
    total: int
