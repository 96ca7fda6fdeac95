"""
SelfEmploy Portal - Content Routers

Admin endpoints for announcements and utility links. Two routers are
exported, mounted under separate prefixes.
"""

from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_async_session
from app.dependencies import get_actor
from app.schemas.auth import MessageResponse
from app.schemas.content import (
    AnnouncementCreateRequest,
    AnnouncementListResponse,
    AnnouncementResponse,
    AnnouncementUpdateRequest,
    UtilityCreateRequest,
    UtilityListResponse,
    UtilityResponse,
    UtilityUpdateRequest,
)
from app.services.content_service import ContentService
from app.utils.permissions import ActorContext


announcements_router = APIRouter()
utilities_router = APIRouter()


# ===========================================
# ANNOUNCEMENTS
# ===========================================

@announcements_router.get("", response_model=AnnouncementListResponse, summary="List announcements")
async def list_announcements(
    actor: ActorContext = Depends(get_actor),
    db: AsyncSession = Depends(get_async_session),
):
    announcements = await ContentService(db).list_announcements(actor)
    return AnnouncementListResponse(
        announcements=[AnnouncementResponse.model_validate(a) for a in announcements],
        total=len(announcements),
    )


@announcements_router.post(
    "",
    response_model=AnnouncementResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create announcement",
)
async def create_announcement(
    request: AnnouncementCreateRequest,
    actor: ActorContext = Depends(get_actor),
    db: AsyncSession = Depends(get_async_session),
):
    announcement = await ContentService(db).create_announcement(actor, **request.model_dump())
    return AnnouncementResponse.model_validate(announcement)


@announcements_router.patch("/{announcement_id}", response_model=AnnouncementResponse, summary="Update announcement")
async def update_announcement(
    announcement_id: UUID,
    request: AnnouncementUpdateRequest,
    actor: ActorContext = Depends(get_actor),
    db: AsyncSession = Depends(get_async_session),
):
    announcement = await ContentService(db).update_announcement(
        actor,
        announcement_id,
        **request.model_dump(exclude_unset=True),
    )
    return AnnouncementResponse.model_validate(announcement)


@announcements_router.delete("/{announcement_id}", response_model=MessageResponse, summary="Delete announcement")
async def delete_announcement(
    announcement_id: UUID,
    actor: ActorContext = Depends(get_actor),
    db: AsyncSession = Depends(get_async_session),
):
    await ContentService(db).delete_announcement(actor, announcement_id)
    return MessageResponse(message="Announcement deleted successfully")


# ===========================================
# UTILITIES
# ===========================================

@utilities_router.get("", response_model=UtilityListResponse, summary="List utilities")
async def list_utilities(
    actor: ActorContext = Depends(get_actor),
    db: AsyncSession = Depends(get_async_session),
):
    utilities = await ContentService(db).list_utilities(actor)
    return UtilityListResponse(
        utilities=[UtilityResponse.model_validate(u) for u in utilities],
        total=len(utilities),
    )


@utilities_router.post(
    "",
    response_model=UtilityResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create utility",
)
async def create_utility(
    request: UtilityCreateRequest,
    actor: ActorContext = Depends(get_actor),
    db: AsyncSession = Depends(get_async_session),
):
    utility = await ContentService(db).create_utility(actor, **request.model_dump())
    return UtilityResponse.model_validate(utility)


@utilities_router.patch("/{utility_id}", response_model=UtilityResponse, summary="Update utility")
async def update_utility(
    utility_id: UUID,
    request: UtilityUpdateRequest,
    actor: ActorContext = Depends(get_actor),
    db: AsyncSession = Depends(get_async_session),
):
    utility = await ContentService(db).update_utility(
        actor,
        utility_id,
        **request.model_dump(exclude_unset=True),
    )
    return UtilityResponse.model_validate(utility)


@utilities_router.delete("/{utility_id}", response_model=MessageResponse, summary="Delete utility")
async def delete_utility(
    utility_id: UUID,
    actor: ActorContext = Depends(get_actor),
    db: AsyncSession = Depends(get_async_session),
):
    await ContentService(db).delete_utility(actor, utility_id)
    return MessageResponse(message="Utility deleted successfully")
