"""
SelfEmploy Portal - Admin Service

Admin accounts, sign-in and per-module permission grants.

Grants are replaced as a whole: saving deletes every stored grant for the
admin and inserts the new set in the same transaction, so a failed save
leaves the previous set in place.
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import Iterable, List, Optional, Tuple

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.models.admin_user import AdminPermission, AdminRole, AdminUser, PermissionModule
from app.utils.error_handling import (
    AuthenticationException,
    AuthorizationException,
    DatabaseException,
    DuplicateEntryException,
    ErrorCode,
    InsufficientPermissionsException,
    NotFoundException,
    ValidationException,
    require_text,
)
from app.utils.permissions import ActorContext, Grant, normalize_grants
from app.utils.security import create_access_token, get_password_hash, verify_password

logger = logging.getLogger(__name__)


def require_manage_admins(actor: Optional[ActorContext]) -> ActorContext:
    if actor is None or not actor.can_manage_admins:
        raise InsufficientPermissionsException(PermissionModule.ADMIN_USERS.value, "manage")
    return actor


class AdminService:
    """Service for admin accounts and their grants."""

    def __init__(self, db: AsyncSession):
        self.db = db

    # ===========================================
    # LOOKUPS
    # ===========================================

    async def get_admin(self, admin_id: uuid.UUID) -> Optional[AdminUser]:
        """Get admin by ID with grants loaded."""
        result = await self.db.execute(
            select(AdminUser)
            .options(selectinload(AdminUser.permissions))
            .where(AdminUser.id == admin_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def get_admin_or_404(self, admin_id: uuid.UUID) -> AdminUser:
        admin = await self.get_admin(admin_id)
        if not admin:
            raise NotFoundException("Admin user", admin_id)
        return admin

    async def get_admin_by_username(self, username: str) -> Optional[AdminUser]:
        result = await self.db.execute(
            select(AdminUser)
            .options(selectinload(AdminUser.permissions))
            .where(AdminUser.username == username.strip())
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def list_admins(
        self,
        actor: ActorContext,
        include_super_admins: bool = True,
    ) -> List[AdminUser]:
        """List admins; the permissions screen leaves super admins out."""
        require_manage_admins(actor)
        query = select(AdminUser).options(selectinload(AdminUser.permissions))
        if not include_super_admins:
            query = query.where(AdminUser.role != AdminRole.SUPER_ADMIN)
        result = await self.db.execute(query.order_by(AdminUser.username))
        return list(result.scalars().all())

    # ===========================================
    # AUTHENTICATION
    # ===========================================

    async def authenticate(self, username: str, password: str) -> Tuple[AdminUser, str]:
        """
        Verify credentials and issue an access token.

        Returns:
            Tuple of (AdminUser, access token)

        Raises:
            AuthenticationException: unknown username or wrong password
            AuthorizationException: account disabled
        """
        admin = await self.get_admin_by_username(username or "")
        if not admin or not verify_password(password or "", admin.password_hash):
            logger.warning(f"Failed login attempt for '{username}'")
            raise AuthenticationException("Invalid username or password")
        if not admin.is_active:
            raise AuthorizationException("Account is disabled", code=ErrorCode.ACCOUNT_DISABLED)

        admin.last_login = datetime.now(timezone.utc)
        await self.db.commit()

        token = create_access_token({
            "sub": str(admin.id),
            "username": admin.username,
            "role": admin.role.value,
        })
        logger.info(f"Admin {admin.username} signed in")
        return admin, token

    async def get_or_create_super_admin(self, username: str, password: str) -> Optional[AdminUser]:
        """Seed the configured super admin if it does not exist yet."""
        if not username or not password:
            return None
        existing = await self.get_admin_by_username(username)
        if existing:
            return existing

        admin = AdminUser(
            username=username.strip(),
            password_hash=get_password_hash(password),
            role=AdminRole.SUPER_ADMIN,
            is_active=True,
        )
        self.db.add(admin)
        await self.db.commit()
        logger.info(f"Seeded super admin '{admin.username}'")
        return await self.get_admin(admin.id)

    # ===========================================
    # ADMIN MANAGEMENT
    # ===========================================

    async def create_admin(
        self,
        actor: ActorContext,
        username: str,
        password: str,
        role: AdminRole = AdminRole.USER_ADMIN,
        is_active: bool = True,
    ) -> AdminUser:
        require_manage_admins(actor)
        username = require_text(username, "username")
        password = require_text(password, "password")
        role = AdminRole(role)
        if role == AdminRole.SUPER_ADMIN and not actor.is_super_admin:
            raise InsufficientPermissionsException(PermissionModule.ADMIN_USERS.value, "create super admin")

        if await self.get_admin_by_username(username):
            raise DuplicateEntryException("Admin user", "username", username)

        admin = AdminUser(
            username=username,
            password_hash=get_password_hash(password),
            role=role,
            is_active=is_active,
        )
        self.db.add(admin)
        await self._commit("create admin", username)

        logger.info(f"Admin '{username}' ({role.value}) created by {actor.username}")
        return await self.get_admin_or_404(admin.id)

    async def update_admin(
        self,
        actor: ActorContext,
        admin_id: uuid.UUID,
        role: Optional[AdminRole] = None,
        is_active: Optional[bool] = None,
        password: Optional[str] = None,
    ) -> AdminUser:
        """Change role, active flag or password of an admin."""
        require_manage_admins(actor)
        admin = await self.get_admin_or_404(admin_id)

        if role is not None:
            role = AdminRole(role)
            if AdminRole.SUPER_ADMIN in (role, admin.role) and not actor.is_super_admin:
                raise InsufficientPermissionsException(PermissionModule.ADMIN_USERS.value, "change super admin")
            admin.role = role
            if role == AdminRole.SUPER_ADMIN:
                admin.permissions.clear()
        if is_active is not None:
            if admin.id == actor.admin_id and not is_active:
                raise ValidationException("You cannot deactivate your own account", field="is_active")
            admin.is_active = is_active
        if password is not None:
            admin.password_hash = get_password_hash(require_text(password, "password"))

        await self._commit("update admin")
        logger.info(f"Admin '{admin.username}' updated by {actor.username}")
        return await self.get_admin_or_404(admin.id)

    async def delete_admin(self, actor: ActorContext, admin_id: uuid.UUID) -> None:
        require_manage_admins(actor)
        admin = await self.get_admin_or_404(admin_id)
        if admin.id == actor.admin_id:
            raise ValidationException("You cannot delete your own account")
        if admin.is_super_admin and not actor.is_super_admin:
            raise InsufficientPermissionsException(PermissionModule.ADMIN_USERS.value, "delete super admin")

        username = admin.username
        await self.db.delete(admin)
        await self._commit("delete admin")
        logger.info(f"Admin '{username}' deleted by {actor.username}")

    # ===========================================
    # GRANTS
    # ===========================================

    async def get_admin_grants(self, admin_id: uuid.UUID) -> List[Grant]:
        """Stored (module, permission type) grants of an admin, sorted."""
        result = await self.db.execute(
            select(AdminPermission.module, AdminPermission.permission_type)
            .where(AdminPermission.admin_user_id == admin_id)
        )
        grants = normalize_grants(tuple(row) for row in result.all())
        return sorted(grants, key=lambda g: (g[0].value, g[1].value))

    async def save_admin_grants(
        self,
        actor: ActorContext,
        admin_id: uuid.UUID,
        grants: Iterable,
    ) -> List[Grant]:
        """
        Replace all grants of ``admin_id`` with ``grants``.

        Invalid entries are dropped. Super admins hold every capability
        implicitly and cannot be given stored grants.
        """
        require_manage_admins(actor)
        admin = await self.get_admin_or_404(admin_id)
        if admin.is_super_admin:
            raise ValidationException(
                "Super admins have full access; permissions cannot be assigned",
                field="admin_id",
            )

        new_grants = normalize_grants(grants)
        try:
            # Old rows must be gone before the new ones hit the unique constraint
            admin.permissions.clear()
            await self.db.flush()
            admin.permissions.extend(
                AdminPermission(module=module, permission_type=permission_type)
                for module, permission_type in new_grants
            )
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Failed to save permissions for admin {admin_id}: {e}")
            raise DatabaseException(original_error=e)

        logger.info(
            f"Permissions for '{admin.username}' replaced by {actor.username}: "
            f"{len(new_grants)} grants"
        )
        return await self.get_admin_grants(admin.id)

    async def _commit(self, operation: str, username: Optional[str] = None) -> None:
        try:
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            logger.error(f"Integrity error during {operation}: {e}")
            if username and "username" in str(e.orig).lower():
                raise DuplicateEntryException("Admin user", "username", username)
            raise DatabaseException(original_error=e)
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Failed to {operation}: {e}")
            raise DatabaseException(original_error=e)
