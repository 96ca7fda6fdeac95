"""
SelfEmploy Portal - Category Service

Business logic for registration categories and their fees.
"""

import logging
import uuid
from decimal import Decimal
from typing import Any, Dict, List, Optional

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.models.admin_user import PermissionModule, PermissionType
from app.models.category import Category
from app.models.registration import Registration
from app.utils.error_handling import (
    ConflictException,
    DatabaseException,
    NotFoundException,
    ValidationException,
    require_text,
    validate_amount,
)
from app.utils.permissions import ActorContext, require_permission

logger = logging.getLogger(__name__)


# Seeded on first start so the public registration form is usable
DEFAULT_CATEGORIES: List[Dict[str, Any]] = [
    {
        "name": settings.free_registration_category,
        "description": "Free registration for the self-employment programme",
        "actual_fee": Decimal("0"),
        "offer_fee": Decimal("0"),
        "is_highlighted": True,
    },
]

UPDATABLE_FIELDS = {
    "name",
    "description",
    "actual_fee",
    "offer_fee",
    "warning_message",
    "preference",
    "popup_image_url",
    "qr_image_url",
    "is_highlighted",
    "is_active",
}


def _check_fees(actual_fee: Decimal, offer_fee: Decimal) -> None:
    if offer_fee > actual_fee:
        raise ValidationException(
            "Offer fee cannot be greater than the actual fee",
            field="offer_fee",
            details={"actual_fee": str(actual_fee), "offer_fee": str(offer_fee)},
        )


class CategoryService:
    """Service for category operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_categories(self, include_inactive: bool = False) -> List[Category]:
        """Highlighted categories first, then by name."""
        query = select(Category)
        if not include_inactive:
            query = query.where(Category.is_active == True)
        query = query.order_by(Category.is_highlighted.desc(), Category.name)

        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def get_category_by_id(self, category_id: uuid.UUID) -> Optional[Category]:
        """Get category by ID."""
        result = await self.db.execute(
            select(Category).where(Category.id == category_id)
        )
        return result.scalar_one_or_none()

    async def get_category_or_404(self, category_id: uuid.UUID) -> Category:
        category = await self.get_category_by_id(category_id)
        if not category:
            raise NotFoundException("Category", category_id)
        return category

    async def create_category(
        self,
        actor: ActorContext,
        name: str,
        actual_fee=Decimal("0"),
        offer_fee=Decimal("0"),
        **kwargs,
    ) -> Category:
        """Create a new category."""
        require_permission(actor, PermissionModule.CATEGORIES, PermissionType.WRITE)
        name = require_text(name, "name")
        actual = validate_amount(actual_fee, "actual_fee", allow_zero=True)
        offer = validate_amount(offer_fee, "offer_fee", allow_zero=True)
        _check_fees(actual, offer)

        category = Category(
            name=name,
            actual_fee=actual,
            offer_fee=offer,
            **{k: v for k, v in kwargs.items() if k in UPDATABLE_FIELDS},
        )
        self.db.add(category)
        await self.db.commit()
        await self.db.refresh(category)

        logger.info(f"Category '{name}' created by {actor.username}")
        return category

    async def update_category(
        self,
        actor: ActorContext,
        category_id: uuid.UUID,
        **kwargs,
    ) -> Category:
        """Update a category. Fees already charged on registrations are not touched."""
        require_permission(actor, PermissionModule.CATEGORIES, PermissionType.WRITE)
        category = await self.get_category_or_404(category_id)

        changes = {k: v for k, v in kwargs.items() if k in UPDATABLE_FIELDS and v is not None}
        if "name" in changes:
            changes["name"] = require_text(changes["name"], "name")
        for key in ("actual_fee", "offer_fee"):
            if key in changes:
                changes[key] = validate_amount(changes[key], key, allow_zero=True)
        _check_fees(
            changes.get("actual_fee", category.actual_fee),
            changes.get("offer_fee", category.offer_fee),
        )

        for key, value in changes.items():
            setattr(category, key, value)

        await self.db.commit()
        await self.db.refresh(category)

        logger.info(f"Category '{category.name}' updated by {actor.username}")
        return category

    async def delete_category(self, actor: ActorContext, category_id: uuid.UUID) -> None:
        """Delete a category that no registration refers to."""
        require_permission(actor, PermissionModule.CATEGORIES, PermissionType.DELETE)
        category = await self.get_category_or_404(category_id)

        in_use = await self.db.scalar(
            select(func.count(Registration.id)).where(Registration.category_id == category.id)
        )
        if in_use:
            raise ConflictException(
                f"Category '{category.name}' is used by {in_use} registrations",
                resource_type="Category",
            )

        try:
            await self.db.delete(category)
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Failed to delete category {category_id}: {e}")
            raise DatabaseException(original_error=e)

        logger.info(f"Category '{category.name}' deleted by {actor.username}")

    async def create_default_categories(self) -> List[Category]:
        """Create default categories if none exist yet."""
        existing = await self.db.scalar(select(func.count(Category.id)))
        if existing:
            return []

        created = [Category(**data) for data in DEFAULT_CATEGORIES]
        self.db.add_all(created)
        await self.db.commit()
        logger.info(f"Seeded {len(created)} default categories")
        return created
