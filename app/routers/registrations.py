"""
SelfEmploy Portal - Registrations Router

Admin endpoints for registration management.
"""

from datetime import date
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_async_session
from app.dependencies import get_actor
from app.models.admin_user import PermissionModule, PermissionType
from app.models.registration import RegistrationStatus
from app.schemas.auth import MessageResponse
from app.schemas.registration import (
    BulkApproveRequest,
    BulkApproveResponse,
    BulkItemOutcomeResponse,
    ExpiryAlertResponse,
    RegistrationListResponse,
    RegistrationResponse,
    RegistrationUpdateRequest,
    StatusUpdateRequest,
)
from app.services.aging_service import utcnow
from app.services.registration_service import RegistrationFilters, RegistrationService
from app.utils.permissions import ActorContext, require_permission


router = APIRouter()


@router.get(
    "",
    response_model=RegistrationListResponse,
    summary="List registrations",
    description="Filter by status, category, panchayath, search text, date range or expiry window.",
)
async def list_registrations(
    status: Optional[RegistrationStatus] = Query(None),
    category_id: Optional[UUID] = Query(None),
    panchayath_id: Optional[UUID] = Query(None),
    search: Optional[str] = Query(None, max_length=200),
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    expiring_within: Optional[int] = Query(None, ge=0, description="Pending registrations expiring within N days"),
    actor: ActorContext = Depends(get_actor),
    db: AsyncSession = Depends(get_async_session),
):
    now = utcnow()
    registrations = await RegistrationService(db).query_registrations(
        actor,
        RegistrationFilters(
            status=status,
            category_id=category_id,
            panchayath_id=panchayath_id,
            search=search,
            start_date=start_date,
            end_date=end_date,
            expiring_within=expiring_within,
        ),
        now=now,
    )
    return RegistrationListResponse(
        registrations=[RegistrationResponse.from_registration(r, now) for r in registrations],
        total=len(registrations),
    )


@router.get(
    "/expiring",
    response_model=ExpiryAlertResponse,
    summary="Expiring registrations alert",
)
async def expiring_registrations(
    threshold: Optional[int] = Query(None, ge=0),
    actor: ActorContext = Depends(get_actor),
    db: AsyncSession = Depends(get_async_session),
):
    now = utcnow()
    alert = await RegistrationService(db).expiring_alert(actor, threshold, now)
    return ExpiryAlertResponse(
        threshold_days=alert.threshold_days,
        total=alert.total,
        by_tier=alert.by_tier,
        registrations=[RegistrationResponse.from_registration(r, now) for r in alert.registrations],
    )


@router.post(
    "/bulk-approve",
    response_model=BulkApproveResponse,
    summary="Approve several registrations",
    description="Each registration is approved independently; failures are reported per item.",
)
async def bulk_approve(
    request: BulkApproveRequest,
    actor: ActorContext = Depends(get_actor),
    db: AsyncSession = Depends(get_async_session),
):
    result = await RegistrationService(db).bulk_approve(actor, request.registration_ids)
    return BulkApproveResponse(
        outcomes=[
            BulkItemOutcomeResponse(
                registration_id=o.registration_id,
                success=o.success,
                status=o.status,
                error=o.error,
            )
            for o in result.outcomes
        ],
        succeeded=len(result.succeeded),
        failed=len(result.failed),
    )


@router.get("/{registration_id}", response_model=RegistrationResponse, summary="Get registration")
async def get_registration(
    registration_id: UUID,
    actor: ActorContext = Depends(get_actor),
    db: AsyncSession = Depends(get_async_session),
):
    require_permission(actor, PermissionModule.REGISTRATIONS, PermissionType.READ)
    registration = await RegistrationService(db).get_registration_or_404(registration_id)
    return RegistrationResponse.from_registration(registration)


@router.patch("/{registration_id}", response_model=RegistrationResponse, summary="Edit registration")
async def update_registration(
    registration_id: UUID,
    request: RegistrationUpdateRequest,
    actor: ActorContext = Depends(get_actor),
    db: AsyncSession = Depends(get_async_session),
):
    registration = await RegistrationService(db).update_registration(
        actor,
        registration_id,
        request.model_dump(exclude_unset=True),
    )
    return RegistrationResponse.from_registration(registration)


@router.put(
    "/{registration_id}/status",
    response_model=RegistrationResponse,
    summary="Change registration status",
)
async def update_registration_status(
    registration_id: UUID,
    request: StatusUpdateRequest,
    actor: ActorContext = Depends(get_actor),
    db: AsyncSession = Depends(get_async_session),
):
    registration = await RegistrationService(db).update_status(actor, registration_id, request.status)
    return RegistrationResponse.from_registration(registration)


@router.delete("/{registration_id}", response_model=MessageResponse, summary="Delete registration")
async def delete_registration(
    registration_id: UUID,
    actor: ActorContext = Depends(get_actor),
    db: AsyncSession = Depends(get_async_session),
):
    await RegistrationService(db).delete_registration(actor, registration_id)
    return MessageResponse(message="Registration deleted successfully")
