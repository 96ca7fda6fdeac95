"""
SelfEmploy Portal - Registration Service

Registration lifecycle: public submission, status check, self-confirmation
for free categories, and the admin status / edit / delete operations.

Status transitions (rules depend only on the target state):
- -> approved : approved_date = now, approved_by = admin username
                (or the self-service marker when no admin is acting)
- -> rejected : approval fields left as they are
- -> pending  : approval fields cleared

Every guarded operation checks the actor's capability before touching the
database. Concurrent edits are last-write-wins.
"""

import logging
import uuid
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta, timezone
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.models.admin_user import PermissionModule, PermissionType
from app.models.category import Category
from app.models.panchayath import Panchayath
from app.models.registration import Registration, RegistrationStatus
from app.services.aging_service import ExpiryAlert, filter_expiring, summarize_expiring, utcnow
from app.utils.error_handling import (
    AppException,
    DatabaseException,
    DuplicateMobileNumberException,
    InvalidStatusTransitionException,
    NotFoundException,
    RegistrationNotFoundException,
    require_text,
    validate_amount,
)
from app.utils.permissions import ActorContext, require_permission
from app.utils.security import generate_customer_id

logger = logging.getLogger(__name__)


# Fields an admin may edit without going through a status transition
EDITABLE_FIELDS = {
    "name",
    "address",
    "mobile_number",
    "ward",
    "agent_pro",
    "fee_paid",
    "category_id",
    "panchayath_id",
    "preference",
}


def apply_status_transition(
    registration: Registration,
    target: RegistrationStatus,
    approver: Optional[str],
    now: Optional[datetime] = None,
) -> Registration:
    """
    Move ``registration`` to ``target`` and stamp the side effects.

    Args:
        registration: Registration to mutate in place
        target: New status
        approver: Acting admin's username, or None for self-service
        now: Transition time (defaults to current UTC time)
    """
    now = now or utcnow()
    target = RegistrationStatus(target)

    registration.status = target
    if target == RegistrationStatus.APPROVED:
        registration.approved_date = now
        registration.approved_by = approver or settings.self_service_marker
    elif target == RegistrationStatus.PENDING:
        registration.approved_date = None
        registration.approved_by = None
    registration.updated_at = now
    return registration


def is_self_confirmable(category: Optional[Category]) -> bool:
    """Zero-fee categories and the designated free-registration category allow self-confirmation."""
    if category is None:
        return False
    marker = settings.free_registration_category.strip().lower()
    return category.offer_fee == 0 or (bool(marker) and marker in category.name.lower())


@dataclass
class RegistrationFilters:
    """Filters for the admin registrations list."""
    status: Optional[RegistrationStatus] = None
    category_id: Optional[uuid.UUID] = None
    panchayath_id: Optional[uuid.UUID] = None
    search: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    expiring_within: Optional[int] = None


@dataclass
class BulkItemOutcome:
    registration_id: uuid.UUID
    success: bool
    status: Optional[RegistrationStatus] = None
    error: Optional[str] = None


@dataclass
class BulkApproveResult:
    """Per-item outcome of a bulk approval; items succeed or fail independently."""
    outcomes: List[BulkItemOutcome] = field(default_factory=list)

    @property
    def succeeded(self) -> List[uuid.UUID]:
        return [o.registration_id for o in self.outcomes if o.success]

    @property
    def failed(self) -> List[uuid.UUID]:
        return [o.registration_id for o in self.outcomes if not o.success]


class RegistrationService:
    """Service for registration operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    # ===========================================
    # QUERIES
    # ===========================================

    async def get_registration(self, registration_id: uuid.UUID) -> Optional[Registration]:
        """Get registration by ID."""
        result = await self.db.execute(
            select(Registration)
            .where(Registration.id == registration_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def get_registration_or_404(self, registration_id: uuid.UUID) -> Registration:
        registration = await self.get_registration(registration_id)
        if not registration:
            raise RegistrationNotFoundException(registration_id)
        return registration

    async def get_by_mobile(self, mobile_number: str) -> Optional[Registration]:
        result = await self.db.execute(
            select(Registration).where(Registration.mobile_number == mobile_number.strip())
        )
        return result.scalar_one_or_none()

    async def query_registrations(
        self,
        actor: ActorContext,
        filters: Optional[RegistrationFilters] = None,
        now: Optional[datetime] = None,
    ) -> List[Registration]:
        """List registrations matching ``filters``, newest first."""
        require_permission(actor, PermissionModule.REGISTRATIONS, PermissionType.READ)
        filters = filters or RegistrationFilters()

        query = select(Registration)
        if filters.status:
            query = query.where(Registration.status == RegistrationStatus(filters.status))
        if filters.category_id:
            query = query.where(Registration.category_id == filters.category_id)
        if filters.panchayath_id:
            query = query.where(Registration.panchayath_id == filters.panchayath_id)
        if filters.search and filters.search.strip():
            term = f"%{filters.search.strip()}%"
            query = query.where(
                or_(
                    Registration.name.ilike(term),
                    Registration.mobile_number.ilike(term),
                    Registration.customer_id.ilike(term),
                    Registration.address.ilike(term),
                )
            )
        if filters.start_date:
            query = query.where(
                Registration.created_at >= datetime.combine(filters.start_date, time.min, tzinfo=timezone.utc)
            )
        if filters.end_date:
            query = query.where(
                Registration.created_at
                < datetime.combine(filters.end_date + timedelta(days=1), time.min, tzinfo=timezone.utc)
            )
        if filters.expiring_within is not None:
            query = query.where(Registration.status == RegistrationStatus.PENDING)

        query = query.order_by(Registration.created_at.desc())
        result = await self.db.execute(query)
        registrations = list(result.scalars().all())

        if filters.expiring_within is not None:
            registrations = filter_expiring(registrations, filters.expiring_within, now)
        return registrations

    async def expiring_alert(
        self,
        actor: ActorContext,
        threshold: Optional[int] = None,
        now: Optional[datetime] = None,
    ) -> ExpiryAlert:
        """Pending registrations about to expire, grouped by urgency."""
        require_permission(actor, PermissionModule.REGISTRATIONS, PermissionType.READ)
        result = await self.db.execute(
            select(Registration).where(Registration.status == RegistrationStatus.PENDING)
        )
        return summarize_expiring(result.scalars().all(), threshold, now)

    # ===========================================
    # PUBLIC FLOWS
    # ===========================================

    async def register(
        self,
        name: str,
        address: str,
        mobile_number: str,
        ward: str,
        category_id: uuid.UUID,
        panchayath_id: Optional[uuid.UUID] = None,
        agent_pro: Optional[str] = None,
        preference: Optional[str] = None,
    ) -> Registration:
        """Submit a new registration; it starts pending and is charged the category's offer fee."""
        name = require_text(name, "name")
        address = require_text(address, "address")
        mobile_number = require_text(mobile_number, "mobile_number")
        ward = require_text(ward, "ward")
        if not category_id:
            require_text(None, "category_id")

        category = await self.db.get(Category, category_id)
        if not category or not category.is_active:
            raise NotFoundException("Category", category_id)
        if panchayath_id and not await self.db.get(Panchayath, panchayath_id):
            raise NotFoundException("Panchayath", panchayath_id)

        if await self.get_by_mobile(mobile_number):
            raise DuplicateMobileNumberException(mobile_number)

        registration = Registration(
            customer_id=generate_customer_id(),
            name=name,
            address=address,
            mobile_number=mobile_number,
            ward=ward,
            agent_pro=agent_pro or None,
            preference=preference or None,
            category_id=category.id,
            panchayath_id=panchayath_id,
            fee_paid=category.offer_fee,
            status=RegistrationStatus.PENDING,
        )
        self.db.add(registration)
        await self._commit(mobile_number)

        logger.info(f"Registration {registration.customer_id} submitted under '{category.name}'")
        return await self.get_registration_or_404(registration.id)

    async def check_status(self, mobile_number: str) -> Optional[Registration]:
        """Public status lookup; an unknown mobile number is an empty result."""
        if not mobile_number or not mobile_number.strip():
            return None
        return await self.get_by_mobile(mobile_number)

    async def self_confirm(
        self,
        registration_id: uuid.UUID,
        mobile_number: str,
        now: Optional[datetime] = None,
    ) -> Registration:
        """Registrant confirms a pending registration in a free category."""
        registration = await self.get_registration(registration_id)
        if not registration or registration.mobile_number != (mobile_number or "").strip():
            raise RegistrationNotFoundException(registration_id)

        if not is_self_confirmable(registration.category):
            raise InvalidStatusTransitionException(
                registration.status.value,
                RegistrationStatus.APPROVED.value,
                "only free registrations can be self-confirmed",
            )
        if registration.status != RegistrationStatus.PENDING:
            raise InvalidStatusTransitionException(
                registration.status.value,
                RegistrationStatus.APPROVED.value,
                "registration is not pending",
            )

        apply_status_transition(registration, RegistrationStatus.APPROVED, None, now)
        await self._commit()

        logger.info(f"Registration {registration.customer_id} self-confirmed")
        return registration

    # ===========================================
    # ADMIN OPERATIONS
    # ===========================================

    async def update_status(
        self,
        actor: ActorContext,
        registration_id: uuid.UUID,
        status: RegistrationStatus,
        now: Optional[datetime] = None,
    ) -> Registration:
        """Transition a registration to ``status`` on behalf of an admin."""
        require_permission(actor, PermissionModule.REGISTRATIONS, PermissionType.WRITE)
        registration = await self.get_registration_or_404(registration_id)

        previous = registration.status
        apply_status_transition(registration, status, actor.username, now)
        await self._commit()

        logger.info(
            f"Registration {registration.customer_id}: {previous.value} -> "
            f"{registration.status.value} by {actor.username}"
        )
        return registration

    async def bulk_approve(
        self,
        actor: ActorContext,
        registration_ids: Iterable[uuid.UUID],
        now: Optional[datetime] = None,
    ) -> BulkApproveResult:
        """
        Approve each registration independently.

        A failure on one id is recorded in its outcome and does not undo the
        others.
        """
        require_permission(actor, PermissionModule.REGISTRATIONS, PermissionType.WRITE)
        result = BulkApproveResult()

        for registration_id in dict.fromkeys(registration_ids):
            try:
                registration = await self.update_status(
                    actor, registration_id, RegistrationStatus.APPROVED, now
                )
            except AppException as e:
                logger.warning(f"Bulk approve failed for {registration_id}: {e.message}")
                result.outcomes.append(
                    BulkItemOutcome(registration_id=registration_id, success=False, error=e.message)
                )
                continue
            except SQLAlchemyError as e:
                await self.db.rollback()
                logger.error(f"Bulk approve failed for {registration_id}: {e}")
                result.outcomes.append(
                    BulkItemOutcome(
                        registration_id=registration_id,
                        success=False,
                        error=DatabaseException(original_error=e).message,
                    )
                )
                continue
            result.outcomes.append(
                BulkItemOutcome(
                    registration_id=registration_id,
                    success=True,
                    status=registration.status,
                )
            )

        logger.info(
            f"Bulk approve by {actor.username}: {len(result.succeeded)} approved, "
            f"{len(result.failed)} failed"
        )
        return result

    async def update_registration(
        self,
        actor: ActorContext,
        registration_id: uuid.UUID,
        changes: Dict[str, Any],
        now: Optional[datetime] = None,
    ) -> Registration:
        """Edit non-status fields. Status and approval fields are never touched here."""
        require_permission(actor, PermissionModule.REGISTRATIONS, PermissionType.WRITE)
        registration = await self.get_registration_or_404(registration_id)

        updates = {k: v for k, v in changes.items() if k in EDITABLE_FIELDS}
        for key in ("name", "address", "mobile_number", "ward"):
            if key in updates:
                updates[key] = require_text(updates[key], key)
        if "fee_paid" in updates:
            updates["fee_paid"] = validate_amount(updates["fee_paid"], "fee_paid", allow_zero=True)
        if "category_id" in updates and not await self.db.get(Category, updates["category_id"]):
            raise NotFoundException("Category", updates["category_id"])
        if updates.get("panchayath_id") and not await self.db.get(Panchayath, updates["panchayath_id"]):
            raise NotFoundException("Panchayath", updates["panchayath_id"])

        mobile = updates.get("mobile_number")
        if mobile and mobile != registration.mobile_number:
            existing = await self.get_by_mobile(mobile)
            if existing and existing.id != registration.id:
                raise DuplicateMobileNumberException(mobile)

        for key, value in updates.items():
            setattr(registration, key, value)
        registration.updated_at = now or utcnow()
        await self._commit(mobile)

        logger.info(f"Registration {registration.customer_id} edited by {actor.username}")
        return await self.get_registration_or_404(registration.id)

    async def delete_registration(self, actor: ActorContext, registration_id: uuid.UUID) -> None:
        """Permanently remove a registration, whatever its status."""
        require_permission(actor, PermissionModule.REGISTRATIONS, PermissionType.DELETE)
        registration = await self.get_registration_or_404(registration_id)

        customer_id = registration.customer_id
        await self.db.delete(registration)
        await self._commit()

        logger.info(f"Registration {customer_id} deleted by {actor.username}")

    # ===========================================
    # HELPERS
    # ===========================================

    async def _commit(self, mobile_number: Optional[str] = None) -> None:
        """Commit, translating storage failures into domain errors."""
        try:
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            if mobile_number and "mobile_number" in str(e.orig).lower():
                raise DuplicateMobileNumberException(mobile_number)
            logger.error(f"Integrity error on registrations: {e}")
            raise DatabaseException(original_error=e)
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Failed to persist registration change: {e}")
            raise DatabaseException(original_error=e)
