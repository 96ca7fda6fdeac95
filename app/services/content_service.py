"""
SelfEmploy Portal - Public Content Service

Announcements and utility links shown on the public site.
"""

import logging
import uuid
from datetime import date
from typing import List, Optional

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.admin_user import PermissionModule, PermissionType
from app.models.content import Announcement, Utility
from app.utils.error_handling import NotFoundException, require_text
from app.utils.permissions import ActorContext, require_permission

logger = logging.getLogger(__name__)


ANNOUNCEMENT_FIELDS = {"title", "content", "is_active", "expiry_date", "poster_image_url", "youtube_video_url"}
UTILITY_FIELDS = {"name", "url", "description", "is_active"}


class ContentService:
    """Service for announcements and utilities."""

    def __init__(self, db: AsyncSession):
        self.db = db

    # ===========================================
    # ANNOUNCEMENTS
    # ===========================================

    async def get_public_announcements(self, today: Optional[date] = None) -> List[Announcement]:
        """Active announcements that have not expired, newest first."""
        today = today or date.today()
        result = await self.db.execute(
            select(Announcement)
            .where(
                Announcement.is_active == True,
                or_(Announcement.expiry_date.is_(None), Announcement.expiry_date >= today),
            )
            .order_by(Announcement.created_at.desc())
        )
        return list(result.scalars().all())

    async def list_announcements(self, actor: ActorContext) -> List[Announcement]:
        require_permission(actor, PermissionModule.ANNOUNCEMENTS, PermissionType.READ)
        result = await self.db.execute(
            select(Announcement).order_by(Announcement.created_at.desc())
        )
        return list(result.scalars().all())

    async def create_announcement(self, actor: ActorContext, title: str, content: str, **kwargs) -> Announcement:
        require_permission(actor, PermissionModule.ANNOUNCEMENTS, PermissionType.WRITE)
        announcement = Announcement(
            title=require_text(title, "title"),
            content=require_text(content, "content"),
            **{k: v for k, v in kwargs.items() if k in ANNOUNCEMENT_FIELDS},
        )
        self.db.add(announcement)
        await self.db.commit()
        await self.db.refresh(announcement)

        logger.info(f"Announcement '{announcement.title}' created by {actor.username}")
        return announcement

    async def update_announcement(self, actor: ActorContext, announcement_id: uuid.UUID, **kwargs) -> Announcement:
        require_permission(actor, PermissionModule.ANNOUNCEMENTS, PermissionType.WRITE)
        announcement = await self.db.get(Announcement, announcement_id)
        if not announcement:
            raise NotFoundException("Announcement", announcement_id)

        for key, value in kwargs.items():
            if key not in ANNOUNCEMENT_FIELDS:
                continue
            if key in ("title", "content"):
                if value is None:
                    continue
                value = require_text(value, key)
            setattr(announcement, key, value)

        await self.db.commit()
        await self.db.refresh(announcement)
        logger.info(f"Announcement {announcement.id} updated by {actor.username}")
        return announcement

    async def delete_announcement(self, actor: ActorContext, announcement_id: uuid.UUID) -> None:
        require_permission(actor, PermissionModule.ANNOUNCEMENTS, PermissionType.DELETE)
        announcement = await self.db.get(Announcement, announcement_id)
        if not announcement:
            raise NotFoundException("Announcement", announcement_id)

        await self.db.delete(announcement)
        await self.db.commit()
        logger.info(f"Announcement {announcement_id} deleted by {actor.username}")

    # ===========================================
    # UTILITIES
    # ===========================================

    async def get_public_utilities(self) -> List[Utility]:
        result = await self.db.execute(
            select(Utility).where(Utility.is_active == True).order_by(Utility.name)
        )
        return list(result.scalars().all())

    async def list_utilities(self, actor: ActorContext) -> List[Utility]:
        require_permission(actor, PermissionModule.UTILITIES, PermissionType.READ)
        result = await self.db.execute(select(Utility).order_by(Utility.name))
        return list(result.scalars().all())

    async def create_utility(self, actor: ActorContext, name: str, url: str, **kwargs) -> Utility:
        require_permission(actor, PermissionModule.UTILITIES, PermissionType.WRITE)
        utility = Utility(
            name=require_text(name, "name"),
            url=require_text(url, "url"),
            **{k: v for k, v in kwargs.items() if k in UTILITY_FIELDS},
        )
        self.db.add(utility)
        await self.db.commit()
        await self.db.refresh(utility)

        logger.info(f"Utility '{utility.name}' created by {actor.username}")
        return utility

    async def update_utility(self, actor: ActorContext, utility_id: uuid.UUID, **kwargs) -> Utility:
        require_permission(actor, PermissionModule.UTILITIES, PermissionType.WRITE)
        utility = await self.db.get(Utility, utility_id)
        if not utility:
            raise NotFoundException("Utility", utility_id)

        for key, value in kwargs.items():
            if key not in UTILITY_FIELDS or value is None:
                continue
            if key in ("name", "url"):
                value = require_text(value, key)
            setattr(utility, key, value)

        await self.db.commit()
        await self.db.refresh(utility)
        logger.info(f"Utility {utility.id} updated by {actor.username}")
        return utility

    async def delete_utility(self, actor: ActorContext, utility_id: uuid.UUID) -> None:
        require_permission(actor, PermissionModule.UTILITIES, PermissionType.DELETE)
        utility = await self.db.get(Utility, utility_id)
        if not utility:
            raise NotFoundException("Utility", utility_id)

        await self.db.delete(utility)
        await self.db.commit()
        logger.info(f"Utility {utility_id} deleted by {actor.username}")
