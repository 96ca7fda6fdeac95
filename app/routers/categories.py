"""
SelfEmploy Portal - Categories Router

Admin endpoints for category management.
"""

from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_async_session
from app.dependencies import get_actor
from app.models.admin_user import PermissionModule, PermissionType
from app.schemas.auth import MessageResponse
from app.schemas.category import (
    CategoryCreateRequest,
    CategoryListResponse,
    CategoryResponse,
    CategoryUpdateRequest,
)
from app.services.category_service import CategoryService
from app.utils.permissions import ActorContext, require_permission


router = APIRouter()


@router.get(
    "",
    response_model=CategoryListResponse,
    summary="List categories",
    description="All categories including inactive ones.",
)
async def list_categories(
    actor: ActorContext = Depends(get_actor),
    db: AsyncSession = Depends(get_async_session),
):
    require_permission(actor, PermissionModule.CATEGORIES, PermissionType.READ)
    categories = await CategoryService(db).get_categories(include_inactive=True)
    return CategoryListResponse(
        categories=[CategoryResponse.model_validate(c) for c in categories],
        total=len(categories),
    )


@router.post(
    "",
    response_model=CategoryResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create category",
)
async def create_category(
    request: CategoryCreateRequest,
    actor: ActorContext = Depends(get_actor),
    db: AsyncSession = Depends(get_async_session),
):
    category = await CategoryService(db).create_category(actor, **request.model_dump())
    return CategoryResponse.model_validate(category)


@router.patch("/{category_id}", response_model=CategoryResponse, summary="Update category")
async def update_category(
    category_id: UUID,
    request: CategoryUpdateRequest,
    actor: ActorContext = Depends(get_actor),
    db: AsyncSession = Depends(get_async_session),
):
    category = await CategoryService(db).update_category(
        actor,
        category_id,
        **request.model_dump(exclude_unset=True),
    )
    return CategoryResponse.model_validate(category)


@router.delete("/{category_id}", response_model=MessageResponse, summary="Delete category")
async def delete_category(
    category_id: UUID,
    actor: ActorContext = Depends(get_actor),
    db: AsyncSession = Depends(get_async_session),
):
    await CategoryService(db).delete_category(actor, category_id)
    return MessageResponse(message="Category deleted successfully")
