"""
SelfEmploy Portal - Authentication Router

Admin sign-in and the signed-in admin's resolved permissions.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.database import get_async_session
from app.dependencies import get_actor, get_current_admin
from app.models.admin_user import AdminUser, PermissionModule
from app.schemas.auth import (
    AdminUserResponse,
    EffectivePermissionsResponse,
    LoginRequest,
    MeResponse,
    ModulePermissionsResponse,
    TokenResponse,
)
from app.services.admin_service import AdminService
from app.utils.permissions import ActorContext, visible_modules


router = APIRouter()


@router.post(
    "/login",
    response_model=TokenResponse,
    summary="Admin login",
    description="Authenticate with username and password and receive an access token.",
)
async def login(
    request: LoginRequest,
    db: AsyncSession = Depends(get_async_session),
):
    """Sign in an admin."""
    admin, token = await AdminService(db).authenticate(request.username, request.password)
    return TokenResponse(
        access_token=token,
        expires_in=settings.access_token_expire_minutes * 60,
        admin=AdminUserResponse.model_validate(admin),
    )


@router.get(
    "/me",
    response_model=MeResponse,
    summary="Current admin",
    description="The signed-in admin with effective and per-module permissions.",
)
async def me(
    current_admin: AdminUser = Depends(get_current_admin),
    actor: ActorContext = Depends(get_actor),
):
    effective = actor.effective
    modules = {}
    for module in PermissionModule:
        perms = actor.module_permissions(module)
        modules[module.value] = ModulePermissionsResponse(
            can_read=perms.can_read,
            can_write=perms.can_write,
            can_delete=perms.can_delete,
        )

    return MeResponse(
        admin=AdminUserResponse.model_validate(current_admin),
        effective=EffectivePermissionsResponse(
            can_read=effective.can_read,
            can_write=effective.can_write,
            can_delete=effective.can_delete,
            can_manage_admins=effective.can_manage_admins,
        ),
        modules=modules,
        visible_modules=visible_modules(actor),
    )
