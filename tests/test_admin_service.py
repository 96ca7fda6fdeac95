"""
SelfEmploy Portal - Admin Service Tests

Sign-in, admin management and grant replacement.
"""

import uuid
from unittest.mock import AsyncMock, patch

import pytest
from sqlalchemy.exc import IntegrityError, OperationalError

from app.models.admin_user import AdminRole, PermissionModule, PermissionType
from app.services.admin_service import AdminService
from app.utils.error_handling import (
    AuthenticationException,
    AuthorizationException,
    DatabaseException,
    DuplicateEntryException,
    ErrorCode,
    InsufficientPermissionsException,
    NotFoundException,
    ValidationException,
)
from app.utils.permissions import ActorContext
from app.utils.security import verify_access_token


TEST_PASSWORD = "TestPassword123!"

R = PermissionType.READ
W = PermissionType.WRITE
D = PermissionType.DELETE


class TestAuthenticate:

    @pytest.mark.asyncio
    async def test_valid_credentials_issue_token(self, db_session, local_admin):
        admin, token = await AdminService(db_session).authenticate("local", TEST_PASSWORD)

        assert admin.id == local_admin.id
        assert admin.last_login is not None
        payload = verify_access_token(token)
        assert payload["sub"] == str(local_admin.id)
        assert payload["role"] == "local_admin"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("username, password", [("local", "wrong"), ("nobody", TEST_PASSWORD), ("", "")])
    async def test_bad_credentials(self, db_session, local_admin, username, password):
        with pytest.raises(AuthenticationException):
            await AdminService(db_session).authenticate(username, password)

    @pytest.mark.asyncio
    async def test_disabled_account(self, db_session, create_admin):
        await create_admin("retired", AdminRole.LOCAL_ADMIN, is_active=False)
        with pytest.raises(AuthorizationException) as exc_info:
            await AdminService(db_session).authenticate("retired", TEST_PASSWORD)
        assert exc_info.value.code == ErrorCode.ACCOUNT_DISABLED


class TestSuperAdminSeeding:

    @pytest.mark.asyncio
    async def test_seed_is_idempotent(self, db_session):
        service = AdminService(db_session)
        first = await service.get_or_create_super_admin("owner", "secret-pass")
        second = await service.get_or_create_super_admin("owner", "another-pass")

        assert first.id == second.id
        assert first.role == AdminRole.SUPER_ADMIN
        admin, _ = await service.authenticate("owner", "secret-pass")
        assert admin.id == first.id

    @pytest.mark.asyncio
    async def test_missing_credentials_skip_seeding(self, db_session):
        assert await AdminService(db_session).get_or_create_super_admin("", "") is None


class TestAdminManagement:

    @pytest.mark.asyncio
    async def test_super_admin_creates_admin(self, db_session, super_actor):
        admin = await AdminService(db_session).create_admin(
            super_actor, "clerk", "clerk-pass", AdminRole.LOCAL_ADMIN
        )
        assert admin.role == AdminRole.LOCAL_ADMIN
        assert admin.permissions == []

    @pytest.mark.asyncio
    async def test_duplicate_username(self, db_session, super_actor, local_admin):
        with pytest.raises(DuplicateEntryException):
            await AdminService(db_session).create_admin(super_actor, "local", "x-pass")

    @pytest.mark.asyncio
    async def test_username_collision_at_commit(self, db_session, super_actor, local_admin):
        service = AdminService(db_session)
        with patch.object(service, "get_admin_by_username", AsyncMock(return_value=None)):
            with pytest.raises(DuplicateEntryException) as exc_info:
                await service.create_admin(super_actor, "local", "x-pass")
        assert "local" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_other_integrity_errors_are_not_reported_as_duplicates(self, db_session, super_actor):
        failing = AsyncMock(
            side_effect=IntegrityError(
                "INSERT admin_permissions",
                {},
                Exception("FOREIGN KEY constraint failed: admin_permissions.admin_user_id"),
            )
        )
        with patch.object(db_session, "commit", failing):
            with pytest.raises(DatabaseException):
                await AdminService(db_session).create_admin(super_actor, "clerk", "clerk-pass")

    @pytest.mark.asyncio
    async def test_local_admin_cannot_manage_admins(self, db_session, local_actor):
        with pytest.raises(InsufficientPermissionsException):
            await AdminService(db_session).create_admin(local_actor, "clerk", "clerk-pass")
        with pytest.raises(InsufficientPermissionsException):
            await AdminService(db_session).list_admins(local_actor)

    @pytest.mark.asyncio
    async def test_granted_manager_cannot_create_super_admin(self, db_session, create_admin):
        manager = await create_admin("manager", AdminRole.USER_ADMIN, grants=[(PermissionModule.ADMIN_USERS, W)])
        actor = ActorContext.from_admin(manager)
        service = AdminService(db_session)

        clerk = await service.create_admin(actor, "clerk", "clerk-pass")
        assert clerk.role == AdminRole.USER_ADMIN
        with pytest.raises(InsufficientPermissionsException):
            await service.create_admin(actor, "boss", "boss-pass", AdminRole.SUPER_ADMIN)

    @pytest.mark.asyncio
    async def test_list_without_super_admins(self, db_session, super_actor, local_admin, user_admin):
        service = AdminService(db_session)
        everyone = await service.list_admins(super_actor)
        assert [a.username for a in everyone] == ["local", "root", "viewer"]

        managed = await service.list_admins(super_actor, include_super_admins=False)
        assert [a.username for a in managed] == ["local", "viewer"]

    @pytest.mark.asyncio
    async def test_update_role_and_password(self, db_session, super_actor, local_admin):
        service = AdminService(db_session)
        updated = await service.update_admin(
            super_actor, local_admin.id, role=AdminRole.USER_ADMIN, password="new-pass"
        )
        assert updated.role == AdminRole.USER_ADMIN
        admin, _ = await service.authenticate("local", "new-pass")
        assert admin.id == local_admin.id

    @pytest.mark.asyncio
    async def test_cannot_deactivate_or_delete_self(self, db_session, super_admin, super_actor):
        service = AdminService(db_session)
        with pytest.raises(ValidationException):
            await service.update_admin(super_actor, super_admin.id, is_active=False)
        with pytest.raises(ValidationException):
            await service.delete_admin(super_actor, super_admin.id)

    @pytest.mark.asyncio
    async def test_delete_admin(self, db_session, super_actor, create_admin):
        scoped = await create_admin("scoped", grants=[(PermissionModule.REPORTS, R)])
        service = AdminService(db_session)
        await service.delete_admin(super_actor, scoped.id)

        assert await service.get_admin(scoped.id) is None
        assert await service.get_admin_grants(scoped.id) == []
        with pytest.raises(NotFoundException):
            await service.delete_admin(super_actor, uuid.uuid4())


class TestGrants:

    @pytest.mark.asyncio
    async def test_save_replaces_whole_set(self, db_session, super_actor, create_admin):
        target = await create_admin(
            "target",
            grants=[(PermissionModule.ACCOUNTS, R), (PermissionModule.REPORTS, R)],
        )
        service = AdminService(db_session)

        saved = await service.save_admin_grants(
            super_actor,
            target.id,
            [("registrations", "read"), ("registrations", "write"), ("reports", "read")],
        )
        assert saved == [
            (PermissionModule.REGISTRATIONS, R),
            (PermissionModule.REGISTRATIONS, W),
            (PermissionModule.REPORTS, R),
        ]
        assert await service.get_admin_grants(target.id) == saved

        # Resolution follows the stored set
        actor = ActorContext.from_admin(await service.get_admin(target.id))
        assert actor.can(PermissionModule.REGISTRATIONS, W)
        assert not actor.can(PermissionModule.ACCOUNTS, R)

    @pytest.mark.asyncio
    async def test_empty_set_clears_grants(self, db_session, super_actor, create_admin):
        target = await create_admin("target", grants=[(PermissionModule.ACCOUNTS, D)])
        service = AdminService(db_session)
        assert await service.save_admin_grants(super_actor, target.id, []) == []
        assert await service.get_admin_grants(target.id) == []

    @pytest.mark.asyncio
    async def test_invalid_and_duplicate_entries_dropped(self, db_session, super_actor, user_admin):
        saved = await AdminService(db_session).save_admin_grants(
            super_actor,
            user_admin.id,
            [("reports", "read"), ("reports", "read"), ("payroll", "read"), ("reports", "approve")],
        )
        assert saved == [(PermissionModule.REPORTS, R)]

    @pytest.mark.asyncio
    async def test_super_admin_target_rejected(self, db_session, super_actor, create_admin):
        other_super = await create_admin("root2", AdminRole.SUPER_ADMIN)
        with pytest.raises(ValidationException):
            await AdminService(db_session).save_admin_grants(
                super_actor, other_super.id, [("reports", "read")]
            )

    @pytest.mark.asyncio
    async def test_requires_admin_management(self, db_session, local_actor, user_admin, create_admin):
        service = AdminService(db_session)
        with patch.object(db_session, "execute", AsyncMock()) as execute:
            with pytest.raises(InsufficientPermissionsException):
                await service.save_admin_grants(local_actor, user_admin.id, [("reports", "read")])
            execute.assert_not_called()

        manager = await create_admin("manager", grants=[(PermissionModule.ADMIN_USERS, W)])
        saved = await service.save_admin_grants(
            ActorContext.from_admin(manager), user_admin.id, [("reports", "read")]
        )
        assert saved == [(PermissionModule.REPORTS, R)]

    @pytest.mark.asyncio
    async def test_failed_save_keeps_previous_grants(self, db_session, super_actor, create_admin):
        target = await create_admin("target", grants=[(PermissionModule.ACCOUNTS, R)])
        target_id = target.id
        service = AdminService(db_session)

        failing = AsyncMock(side_effect=OperationalError("INSERT admin_permissions", {}, Exception("down")))
        with patch.object(db_session, "commit", failing):
            with pytest.raises(DatabaseException):
                await service.save_admin_grants(super_actor, target_id, [("reports", "write")])

        assert await service.get_admin_grants(target_id) == [(PermissionModule.ACCOUNTS, R)]
