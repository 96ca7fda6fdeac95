"""
SelfEmploy Portal - Admin User Model

Back-office accounts with role-based access control.

Roles:
- Super Admin: implicit full access to every module, never stored as grants
- Local Admin: read + write by default
- User Admin: read-only by default

Explicit per-module grants (AdminPermission rows) override the role defaults
for non-super admins. Absence of a row means "not granted".
"""

import uuid
from datetime import datetime
from enum import Enum
from typing import List, Optional

from sqlalchemy import Boolean, DateTime, ForeignKey, String, UniqueConstraint, Enum as SQLEnum
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models.base import BaseModel


class AdminRole(str, Enum):
    """Back-office roles."""
    SUPER_ADMIN = "super_admin"
    LOCAL_ADMIN = "local_admin"
    USER_ADMIN = "user_admin"


class PermissionModule(str, Enum):
    """Admin dashboard modules that permissions can be granted on."""
    ACCOUNTS = "accounts"
    REGISTRATIONS = "registrations"
    CATEGORIES = "categories"
    PANCHAYATHS = "panchayaths"
    ANNOUNCEMENTS = "announcements"
    UTILITIES = "utilities"
    REPORTS = "reports"
    ADMIN_USERS = "admin_users"


class PermissionType(str, Enum):
    """Capability granted on a module."""
    READ = "read"
    WRITE = "write"
    DELETE = "delete"


class AdminUser(BaseModel):
    """Admin account used to sign in to the back office."""

    __tablename__ = "admin_users"

    username: Mapped[str] = mapped_column(
        String(100),
        unique=True,
        nullable=False,
        index=True,
    )
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[AdminRole] = mapped_column(
        SQLEnum(AdminRole),
        default=AdminRole.USER_ADMIN,
        nullable=False,
    )
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    last_login: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    permissions: Mapped[List["AdminPermission"]] = relationship(
        "AdminPermission",
        back_populates="admin_user",
        cascade="all, delete-orphan",
    )

    @property
    def is_super_admin(self) -> bool:
        """Check if user is a super admin."""
        return self.role == AdminRole.SUPER_ADMIN

    def __repr__(self) -> str:
        return f"<AdminUser(id={self.id}, username={self.username}, role={self.role})>"


class AdminPermission(BaseModel):
    """A single (admin, module, permission type) grant."""

    __tablename__ = "admin_permissions"
    __table_args__ = (
        UniqueConstraint("admin_user_id", "module", "permission_type", name="uq_admin_permission_grant"),
    )

    admin_user_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("admin_users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    module: Mapped[PermissionModule] = mapped_column(
        SQLEnum(PermissionModule),
        nullable=False,
    )
    permission_type: Mapped[PermissionType] = mapped_column(
        SQLEnum(PermissionType),
        nullable=False,
    )

    admin_user: Mapped["AdminUser"] = relationship("AdminUser", back_populates="permissions")

    def __repr__(self) -> str:
        return f"<AdminPermission(admin={self.admin_user_id}, {self.module.value}:{self.permission_type.value})>"
