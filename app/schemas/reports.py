"""
SelfEmploy Portal - Report Schemas
"""

from datetime import date
from decimal import Decimal
from typing import Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel


class PanchayathGradeResponse(BaseModel):
    panchayath_id: Optional[UUID] = None
    name: str
    district: str
    total_registrations: int
    approved_registrations: int
    pending_registrations: int
    rejected_registrations: int
    free_registrations: int
    paid_registrations: int
    total_revenue: Decimal
    approved_revenue: Decimal
    grade: str

    class Config:
        from_attributes = True


class PanchayathReportResponse(BaseModel):
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    panchayaths: List[PanchayathGradeResponse]
    grade_counts: Dict[str, int]


class CategorySummary(BaseModel):
    category_id: UUID
    category_name: str
    registrations: int
    approved_fees: Decimal


class RegistrationSummaryResponse(BaseModel):
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    total: int
    by_status: Dict[str, int]
    by_category: List[CategorySummary]
    approved_fees: Decimal
