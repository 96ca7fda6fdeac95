"""
SelfEmploy Portal - Panchayath Grading

Performance grades per panchayath from registration volume and revenue.

Both minimums must hold; tiers are checked top-down:

| Grade | Min Registrations | Min Revenue |
|-------|-------------------|-------------|
| A+    | 100               | 50,000      |
| A     | 75                | 35,000      |
| B+    | 50                | 25,000      |
| B     | 30                | 15,000      |
| C+    | 20                | 10,000      |
| C     | 10                | 5,000       |
| D     | -                 | -           |
"""

import logging
import uuid
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone
from decimal import Decimal
from typing import List, Optional, Tuple

from sqlalchemy import case, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.admin_user import PermissionModule, PermissionType
from app.models.panchayath import Panchayath
from app.models.registration import Registration, RegistrationStatus
from app.utils.permissions import ActorContext, require_permission

logger = logging.getLogger(__name__)


GRADE_THRESHOLDS: List[Tuple[str, int, Decimal]] = [
    ("A+", 100, Decimal("50000")),
    ("A", 75, Decimal("35000")),
    ("B+", 50, Decimal("25000")),
    ("B", 30, Decimal("15000")),
    ("C+", 20, Decimal("10000")),
    ("C", 10, Decimal("5000")),
]
LOWEST_GRADE = "D"
GRADE_ORDER = [grade for grade, _, _ in GRADE_THRESHOLDS] + [LOWEST_GRADE]


def assign_grade(total_registrations: int, total_revenue) -> str:
    """Grade for a (count, revenue) pair. Every pair maps to exactly one grade."""
    revenue = Decimal(str(total_revenue or 0))
    for grade, min_registrations, min_revenue in GRADE_THRESHOLDS:
        if total_registrations >= min_registrations and revenue >= min_revenue:
            return grade
    return LOWEST_GRADE


@dataclass
class PanchayathStats:
    """Aggregated registration figures for one panchayath."""
    panchayath_id: Optional[uuid.UUID]
    name: str
    district: str
    total_registrations: int = 0
    approved_registrations: int = 0
    pending_registrations: int = 0
    rejected_registrations: int = 0
    free_registrations: int = 0
    paid_registrations: int = 0
    total_revenue: Decimal = Decimal("0")
    approved_revenue: Decimal = Decimal("0")
    grade: str = LOWEST_GRADE


def rank_localities(stats: List[PanchayathStats]) -> List[PanchayathStats]:
    """Sort by grade tier (A+ first), then by registrations descending."""
    return sorted(
        stats,
        key=lambda s: (GRADE_ORDER.index(s.grade), -s.total_registrations),
    )


class GradingService:
    """Service building the panchayath performance report."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def panchayath_report(
        self,
        actor: ActorContext,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> List[PanchayathStats]:
        """
        Grade every panchayath on registrations created within the date range.

        Total revenue sums ``fee_paid`` over all registrations; approved
        revenue only over approved ones.
        """
        require_permission(actor, PermissionModule.REPORTS, PermissionType.READ)

        is_approved = Registration.status == RegistrationStatus.APPROVED
        is_free = Registration.id.is_not(None) & (func.coalesce(Registration.fee_paid, 0) == 0)
        query = (
            select(
                Panchayath.id,
                Panchayath.name,
                Panchayath.district,
                func.count(Registration.id),
                func.sum(case((is_approved, 1), else_=0)),
                func.sum(case((Registration.status == RegistrationStatus.PENDING, 1), else_=0)),
                func.sum(case((Registration.status == RegistrationStatus.REJECTED, 1), else_=0)),
                func.coalesce(func.sum(Registration.fee_paid), 0),
                func.coalesce(func.sum(case((is_approved, Registration.fee_paid), else_=0)), 0),
                func.sum(case((is_free, 1), else_=0)),
                func.sum(case((Registration.fee_paid > 0, 1), else_=0)),
            )
            .select_from(Panchayath)
            .outerjoin(Registration, self._registration_join(start_date, end_date))
            .group_by(Panchayath.id, Panchayath.name, Panchayath.district)
        )

        result = await self.db.execute(query)
        stats = []
        for row in result.all():
            total = int(row[3] or 0)
            revenue = Decimal(str(row[7] or 0))
            stats.append(
                PanchayathStats(
                    panchayath_id=row[0],
                    name=row[1],
                    district=row[2],
                    total_registrations=total,
                    approved_registrations=int(row[4] or 0),
                    pending_registrations=int(row[5] or 0),
                    rejected_registrations=int(row[6] or 0),
                    free_registrations=int(row[9] or 0),
                    paid_registrations=int(row[10] or 0),
                    total_revenue=revenue,
                    approved_revenue=Decimal(str(row[8] or 0)),
                    grade=assign_grade(total, revenue),
                )
            )

        logger.info(f"Graded {len(stats)} panchayaths")
        return rank_localities(stats)

    @staticmethod
    def _registration_join(start_date: Optional[date], end_date: Optional[date]):
        condition = Registration.panchayath_id == Panchayath.id
        if start_date:
            condition = condition & (
                Registration.created_at >= datetime.combine(start_date, time.min, tzinfo=timezone.utc)
            )
        if end_date:
            condition = condition & (
                Registration.created_at
                < datetime.combine(end_date + timedelta(days=1), time.min, tzinfo=timezone.utc)
            )
        return condition
