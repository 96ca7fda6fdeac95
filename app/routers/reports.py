"""
SelfEmploy Portal - Reports Router

Registration summary and panchayath performance grades.
"""

from collections import Counter
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_async_session
from app.dependencies import get_actor
from app.schemas.reports import (
    PanchayathGradeResponse,
    PanchayathReportResponse,
    RegistrationSummaryResponse,
)
from app.services.grading_service import GRADE_ORDER, GradingService
from app.services.reports_service import ReportsService
from app.utils.error_handling import ValidationException
from app.utils.permissions import ActorContext


router = APIRouter()


def _check_range(start_date: Optional[date], end_date: Optional[date]) -> None:
    if start_date and end_date and start_date > end_date:
        raise ValidationException("Start date must be on or before end date", field="start_date")


@router.get(
    "/summary",
    response_model=RegistrationSummaryResponse,
    summary="Registration summary",
)
async def registration_summary(
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    actor: ActorContext = Depends(get_actor),
    db: AsyncSession = Depends(get_async_session),
):
    _check_range(start_date, end_date)
    summary = await ReportsService(db).registration_summary(actor, start_date, end_date)
    return RegistrationSummaryResponse(**summary)


@router.get(
    "/panchayaths",
    response_model=PanchayathReportResponse,
    summary="Panchayath grades",
    description="Panchayaths graded on registrations and revenue, best first.",
)
async def panchayath_grades(
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    actor: ActorContext = Depends(get_actor),
    db: AsyncSession = Depends(get_async_session),
):
    _check_range(start_date, end_date)
    stats = await GradingService(db).panchayath_report(actor, start_date, end_date)
    counts = Counter(s.grade for s in stats)
    return PanchayathReportResponse(
        start_date=start_date,
        end_date=end_date,
        panchayaths=[PanchayathGradeResponse.model_validate(s) for s in stats],
        grade_counts={grade: counts.get(grade, 0) for grade in GRADE_ORDER},
    )
