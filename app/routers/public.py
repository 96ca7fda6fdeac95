"""
SelfEmploy Portal - Public Router

Unauthenticated endpoints used by the public site: catalogue listings,
registration submission, status lookup and self-confirmation.
"""

from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_async_session
from app.schemas.category import (
    CategoryListResponse,
    CategoryResponse,
    PanchayathListResponse,
    PanchayathResponse,
)
from app.schemas.content import (
    AnnouncementListResponse,
    AnnouncementResponse,
    UtilityListResponse,
    UtilityResponse,
)
from app.schemas.registration import (
    RegistrationCreateRequest,
    RegistrationResponse,
    RegistrationStatusResponse,
    SelfConfirmRequest,
)
from app.services.category_service import CategoryService
from app.services.content_service import ContentService
from app.services.panchayath_service import PanchayathService
from app.services.registration_service import RegistrationService


router = APIRouter()


# ===========================================
# CATALOGUE
# ===========================================

@router.get("/categories", response_model=CategoryListResponse, summary="Active categories")
async def list_public_categories(db: AsyncSession = Depends(get_async_session)):
    categories = await CategoryService(db).get_categories()
    return CategoryListResponse(
        categories=[CategoryResponse.model_validate(c) for c in categories],
        total=len(categories),
    )


@router.get("/panchayaths", response_model=PanchayathListResponse, summary="Panchayaths")
async def list_public_panchayaths(db: AsyncSession = Depends(get_async_session)):
    panchayaths = await PanchayathService(db).get_panchayaths()
    return PanchayathListResponse(
        panchayaths=[PanchayathResponse.model_validate(p) for p in panchayaths],
        total=len(panchayaths),
    )


@router.get("/announcements", response_model=AnnouncementListResponse, summary="Current announcements")
async def list_public_announcements(db: AsyncSession = Depends(get_async_session)):
    announcements = await ContentService(db).get_public_announcements()
    return AnnouncementListResponse(
        announcements=[AnnouncementResponse.model_validate(a) for a in announcements],
        total=len(announcements),
    )


@router.get("/utilities", response_model=UtilityListResponse, summary="Utility links")
async def list_public_utilities(db: AsyncSession = Depends(get_async_session)):
    utilities = await ContentService(db).get_public_utilities()
    return UtilityListResponse(
        utilities=[UtilityResponse.model_validate(u) for u in utilities],
        total=len(utilities),
    )


# ===========================================
# REGISTRATIONS
# ===========================================

@router.post(
    "/registrations",
    response_model=RegistrationResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Submit registration",
    description="Register under a category. The registration starts pending.",
)
async def submit_registration(
    request: RegistrationCreateRequest,
    db: AsyncSession = Depends(get_async_session),
):
    registration = await RegistrationService(db).register(**request.model_dump())
    return RegistrationResponse.from_registration(registration)


@router.get(
    "/registrations/status",
    response_model=RegistrationStatusResponse,
    summary="Check registration status",
    description="Look up a registration by mobile number. An unknown number is not an error.",
)
async def check_registration_status(
    mobile_number: str = Query(..., min_length=1, max_length=20),
    db: AsyncSession = Depends(get_async_session),
):
    registration = await RegistrationService(db).check_status(mobile_number)
    if registration is None:
        return RegistrationStatusResponse(found=False)
    return RegistrationStatusResponse(
        found=True,
        registration=RegistrationResponse.from_registration(registration),
    )


@router.post(
    "/registrations/{registration_id}/confirm",
    response_model=RegistrationResponse,
    summary="Self-confirm a free registration",
)
async def confirm_registration(
    registration_id: UUID,
    request: SelfConfirmRequest,
    db: AsyncSession = Depends(get_async_session),
):
    registration = await RegistrationService(db).self_confirm(registration_id, request.mobile_number)
    return RegistrationResponse.from_registration(registration)
