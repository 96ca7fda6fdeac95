"""
SelfEmploy Portal - Panchayaths Router
"""

from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_async_session
from app.dependencies import get_actor
from app.schemas.auth import MessageResponse
from app.schemas.category import (
    PanchayathCreateRequest,
    PanchayathResponse,
    PanchayathUpdateRequest,
)
from app.services.panchayath_service import PanchayathService
from app.utils.permissions import ActorContext


router = APIRouter()


@router.post(
    "",
    response_model=PanchayathResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create panchayath",
)
async def create_panchayath(
    request: PanchayathCreateRequest,
    actor: ActorContext = Depends(get_actor),
    db: AsyncSession = Depends(get_async_session),
):
    panchayath = await PanchayathService(db).create_panchayath(actor, request.name, request.district)
    return PanchayathResponse.model_validate(panchayath)


@router.patch("/{panchayath_id}", response_model=PanchayathResponse, summary="Update panchayath")
async def update_panchayath(
    panchayath_id: UUID,
    request: PanchayathUpdateRequest,
    actor: ActorContext = Depends(get_actor),
    db: AsyncSession = Depends(get_async_session),
):
    panchayath = await PanchayathService(db).update_panchayath(
        actor,
        panchayath_id,
        name=request.name,
        district=request.district,
    )
    return PanchayathResponse.model_validate(panchayath)


@router.delete("/{panchayath_id}", response_model=MessageResponse, summary="Delete panchayath")
async def delete_panchayath(
    panchayath_id: UUID,
    actor: ActorContext = Depends(get_actor),
    db: AsyncSession = Depends(get_async_session),
):
    await PanchayathService(db).delete_panchayath(actor, panchayath_id)
    return MessageResponse(message="Panchayath deleted successfully")
