"""
SelfEmploy Portal - Authentication Schemas

Pydantic schemas for admin sign-in, admin management and permission grants.
"""

from datetime import datetime
from typing import Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from app.models.admin_user import AdminRole, PermissionModule, PermissionType


# ===========================================
# REQUEST SCHEMAS
# ===========================================

class LoginRequest(BaseModel):
    username: str = Field(..., min_length=1, max_length=100)
    password: str = Field(..., min_length=1)


class AdminCreateRequest(BaseModel):
    username: str = Field(..., min_length=1, max_length=100)
    password: str = Field(..., min_length=6, max_length=100)
    role: AdminRole = AdminRole.USER_ADMIN
    is_active: bool = True


class AdminUpdateRequest(BaseModel):
    role: Optional[AdminRole] = None
    is_active: Optional[bool] = None
    password: Optional[str] = Field(None, min_length=6, max_length=100)


class PermissionGrant(BaseModel):
    module: PermissionModule
    permission_type: PermissionType


class PermissionsUpdateRequest(BaseModel):
    """Full replacement set of grants for an admin."""
    grants: List[PermissionGrant] = Field(default_factory=list)


# ===========================================
# RESPONSE SCHEMAS
# ===========================================

class AdminUserResponse(BaseModel):
    id: UUID
    username: str
    role: AdminRole
    is_active: bool
    last_login: Optional[datetime] = None
    created_at: datetime

    class Config:
        from_attributes = True


class AdminListResponse(BaseModel):
    admins: List[AdminUserResponse]
    total: int


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int
    admin: AdminUserResponse


class EffectivePermissionsResponse(BaseModel):
    can_read: bool
    can_write: bool
    can_delete: bool
    can_manage_admins: bool


class ModulePermissionsResponse(BaseModel):
    can_read: bool
    can_write: bool
    can_delete: bool


class MeResponse(BaseModel):
    """Signed-in admin with resolved permissions."""
    admin: AdminUserResponse
    effective: EffectivePermissionsResponse
    modules: Dict[str, ModulePermissionsResponse]
    visible_modules: List[PermissionModule]


class PermissionsResponse(BaseModel):
    admin_id: UUID
    grants: List[PermissionGrant]


class MessageResponse(BaseModel):
    """Generic message response."""
    message: str
    success: bool = True
