"""
SelfEmploy Portal - Admin Users Router

Admin account management and per-module permission grants.
Every endpoint requires the manage-admins capability.
"""

from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_async_session
from app.dependencies import get_actor
from app.schemas.auth import (
    AdminCreateRequest,
    AdminListResponse,
    AdminUpdateRequest,
    AdminUserResponse,
    MessageResponse,
    PermissionGrant,
    PermissionsResponse,
    PermissionsUpdateRequest,
)
from app.services.admin_service import AdminService, require_manage_admins
from app.utils.permissions import ActorContext


router = APIRouter()


@router.get("", response_model=AdminListResponse, summary="List admins")
async def list_admins(
    include_super_admins: bool = Query(True, description="Set false for the permissions screen"),
    actor: ActorContext = Depends(get_actor),
    db: AsyncSession = Depends(get_async_session),
):
    admins = await AdminService(db).list_admins(actor, include_super_admins=include_super_admins)
    return AdminListResponse(
        admins=[AdminUserResponse.model_validate(a) for a in admins],
        total=len(admins),
    )


@router.post(
    "",
    response_model=AdminUserResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create admin",
)
async def create_admin(
    request: AdminCreateRequest,
    actor: ActorContext = Depends(get_actor),
    db: AsyncSession = Depends(get_async_session),
):
    admin = await AdminService(db).create_admin(
        actor,
        username=request.username,
        password=request.password,
        role=request.role,
        is_active=request.is_active,
    )
    return AdminUserResponse.model_validate(admin)


@router.patch("/{admin_id}", response_model=AdminUserResponse, summary="Update admin")
async def update_admin(
    admin_id: UUID,
    request: AdminUpdateRequest,
    actor: ActorContext = Depends(get_actor),
    db: AsyncSession = Depends(get_async_session),
):
    admin = await AdminService(db).update_admin(
        actor,
        admin_id,
        role=request.role,
        is_active=request.is_active,
        password=request.password,
    )
    return AdminUserResponse.model_validate(admin)


@router.delete("/{admin_id}", response_model=MessageResponse, summary="Delete admin")
async def delete_admin(
    admin_id: UUID,
    actor: ActorContext = Depends(get_actor),
    db: AsyncSession = Depends(get_async_session),
):
    await AdminService(db).delete_admin(actor, admin_id)
    return MessageResponse(message="Admin deleted successfully")


# ===========================================
# PERMISSIONS
# ===========================================

@router.get("/{admin_id}/permissions", response_model=PermissionsResponse, summary="Get admin permissions")
async def get_admin_permissions(
    admin_id: UUID,
    actor: ActorContext = Depends(get_actor),
    db: AsyncSession = Depends(get_async_session),
):
    require_manage_admins(actor)
    service = AdminService(db)
    admin = await service.get_admin_or_404(admin_id)
    grants = await service.get_admin_grants(admin.id)
    return PermissionsResponse(
        admin_id=admin.id,
        grants=[PermissionGrant(module=m, permission_type=t) for m, t in grants],
    )


@router.put(
    "/{admin_id}/permissions",
    response_model=PermissionsResponse,
    summary="Replace admin permissions",
    description="The submitted set replaces every stored grant of the admin.",
)
async def save_admin_permissions(
    admin_id: UUID,
    request: PermissionsUpdateRequest,
    actor: ActorContext = Depends(get_actor),
    db: AsyncSession = Depends(get_async_session),
):
    grants = await AdminService(db).save_admin_grants(
        actor,
        admin_id,
        [(g.module, g.permission_type) for g in request.grants],
    )
    return PermissionsResponse(
        admin_id=admin_id,
        grants=[PermissionGrant(module=m, permission_type=t) for m, t in grants],
    )
