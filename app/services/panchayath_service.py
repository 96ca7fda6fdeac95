"""
SelfEmploy Portal - Panchayath Service
"""

import logging
import uuid
from typing import List, Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.admin_user import PermissionModule, PermissionType
from app.models.panchayath import Panchayath
from app.models.registration import Registration
from app.utils.error_handling import (
    ConflictException,
    DuplicateEntryException,
    NotFoundException,
    require_text,
)
from app.utils.permissions import ActorContext, require_permission

logger = logging.getLogger(__name__)


class PanchayathService:
    """Service for panchayath operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_panchayaths(self, district: Optional[str] = None) -> List[Panchayath]:
        """Panchayaths ordered by district, then name."""
        query = select(Panchayath)
        if district:
            query = query.where(Panchayath.district == district)
        query = query.order_by(Panchayath.district, Panchayath.name)

        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def get_panchayath_or_404(self, panchayath_id: uuid.UUID) -> Panchayath:
        panchayath = await self.db.get(Panchayath, panchayath_id)
        if not panchayath:
            raise NotFoundException("Panchayath", panchayath_id)
        return panchayath

    async def _ensure_unique(self, name: str, district: str, exclude_id: Optional[uuid.UUID] = None) -> None:
        query = select(Panchayath.id).where(
            func.lower(Panchayath.name) == name.lower(),
            func.lower(Panchayath.district) == district.lower(),
        )
        if exclude_id:
            query = query.where(Panchayath.id != exclude_id)
        if await self.db.scalar(query):
            raise DuplicateEntryException("Panchayath", "name", f"{name} ({district})")

    async def create_panchayath(self, actor: ActorContext, name: str, district: str) -> Panchayath:
        require_permission(actor, PermissionModule.PANCHAYATHS, PermissionType.WRITE)
        name = require_text(name, "name")
        district = require_text(district, "district")
        await self._ensure_unique(name, district)

        panchayath = Panchayath(name=name, district=district)
        self.db.add(panchayath)
        await self.db.commit()
        await self.db.refresh(panchayath)

        logger.info(f"Panchayath '{name}' ({district}) created by {actor.username}")
        return panchayath

    async def update_panchayath(
        self,
        actor: ActorContext,
        panchayath_id: uuid.UUID,
        name: Optional[str] = None,
        district: Optional[str] = None,
    ) -> Panchayath:
        require_permission(actor, PermissionModule.PANCHAYATHS, PermissionType.WRITE)
        panchayath = await self.get_panchayath_or_404(panchayath_id)

        new_name = require_text(name, "name") if name is not None else panchayath.name
        new_district = require_text(district, "district") if district is not None else panchayath.district
        await self._ensure_unique(new_name, new_district, exclude_id=panchayath.id)

        panchayath.name = new_name
        panchayath.district = new_district
        await self.db.commit()
        await self.db.refresh(panchayath)

        logger.info(f"Panchayath {panchayath.id} updated by {actor.username}")
        return panchayath

    async def delete_panchayath(self, actor: ActorContext, panchayath_id: uuid.UUID) -> None:
        """Delete a panchayath no registration refers to."""
        require_permission(actor, PermissionModule.PANCHAYATHS, PermissionType.DELETE)
        panchayath = await self.get_panchayath_or_404(panchayath_id)

        in_use = await self.db.scalar(
            select(func.count(Registration.id)).where(Registration.panchayath_id == panchayath.id)
        )
        if in_use:
            raise ConflictException(
                f"Panchayath '{panchayath.name}' is used by {in_use} registrations",
                resource_type="Panchayath",
            )

        await self.db.delete(panchayath)
        await self.db.commit()
        logger.info(f"Panchayath '{panchayath.name}' deleted by {actor.username}")
