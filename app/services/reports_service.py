"""
SelfEmploy Portal - Reports Service

Registration summary report.

Reports:
- Registrations by status
- Registrations and fees by category
- Fees collected (approved registrations only)

The panchayath performance report lives in ``grading_service``.
"""

from datetime import date, datetime, time, timedelta, timezone
from decimal import Decimal
from typing import Any, Dict, Optional

from sqlalchemy import case, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.admin_user import PermissionModule, PermissionType
from app.models.category import Category
from app.models.registration import Registration, RegistrationStatus
from app.utils.permissions import ActorContext, require_permission


class ReportsService:
    """Service for registration reports."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def registration_summary(
        self,
        actor: ActorContext,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> Dict[str, Any]:
        """
        Summarize registrations created within the date range.

        Returns:
            Dict with ``total``, ``by_status``, ``by_category`` and
            ``approved_fees``
        """
        require_permission(actor, PermissionModule.REPORTS, PermissionType.READ)

        conditions = []
        if start_date:
            conditions.append(
                Registration.created_at >= datetime.combine(start_date, time.min, tzinfo=timezone.utc)
            )
        if end_date:
            conditions.append(
                Registration.created_at
                < datetime.combine(end_date + timedelta(days=1), time.min, tzinfo=timezone.utc)
            )

        status_rows = await self.db.execute(
            select(Registration.status, func.count(Registration.id))
            .where(*conditions)
            .group_by(Registration.status)
        )
        by_status = {s.value: 0 for s in RegistrationStatus}
        for status, count in status_rows.all():
            by_status[RegistrationStatus(status).value] = int(count)

        is_approved = Registration.status == RegistrationStatus.APPROVED
        category_rows = await self.db.execute(
            select(
                Category.id,
                Category.name,
                func.count(Registration.id),
                func.coalesce(func.sum(case((is_approved, Registration.fee_paid), else_=0)), 0),
            )
            .join(Registration, Registration.category_id == Category.id)
            .where(*conditions)
            .group_by(Category.id, Category.name)
            .order_by(func.count(Registration.id).desc())
        )
        by_category = [
            {
                "category_id": row[0],
                "category_name": row[1],
                "registrations": int(row[2]),
                "approved_fees": Decimal(str(row[3] or 0)),
            }
            for row in category_rows.all()
        ]

        return {
            "start_date": start_date,
            "end_date": end_date,
            "total": sum(by_status.values()),
            "by_status": by_status,
            "by_category": by_category,
            "approved_fees": sum((c["approved_fees"] for c in by_category), Decimal("0")),
        }
