"""
SelfEmploy Portal - Permission Resolver Tests

Unit tests for role defaults, stored grants and the actor gate.
"""

import uuid

import pytest

from app.models.admin_user import AdminRole, PermissionModule, PermissionType
from app.utils.error_handling import InsufficientPermissionsException
from app.utils.permissions import (
    ActorContext,
    EffectivePermissions,
    ModulePermissions,
    normalize_grants,
    require_permission,
    resolve_effective_permissions,
    resolve_module_permissions,
    visible_modules,
)


R = PermissionType.READ
W = PermissionType.WRITE
D = PermissionType.DELETE


def make_actor(role, grants=()):
    return ActorContext(
        admin_id=uuid.uuid4(),
        username="tester",
        role=role,
        grants=normalize_grants(grants),
    )


class TestEffectivePermissions:
    """Coarse dashboard-wide resolution."""

    def test_super_admin_has_everything_without_grants(self):
        assert resolve_effective_permissions(AdminRole.SUPER_ADMIN, []) == EffectivePermissions(
            True, True, True, True
        )

    def test_super_admin_ignores_stored_grants(self):
        perms = resolve_effective_permissions(
            AdminRole.SUPER_ADMIN,
            [(PermissionModule.REPORTS, R)],
        )
        assert perms.can_delete is True
        assert perms.can_manage_admins is True

    def test_role_defaults_without_grants(self):
        assert resolve_effective_permissions(AdminRole.LOCAL_ADMIN, []) == EffectivePermissions(
            True, True, False, False
        )
        assert resolve_effective_permissions(AdminRole.USER_ADMIN, None) == EffectivePermissions(
            True, False, False, False
        )

    def test_unknown_role_gets_nothing(self):
        assert resolve_effective_permissions("auditor", []) == EffectivePermissions()
        assert resolve_effective_permissions(None, []) == EffectivePermissions()

    def test_grants_replace_role_defaults(self):
        perms = resolve_effective_permissions(
            AdminRole.LOCAL_ADMIN,
            [(PermissionModule.REGISTRATIONS, R)],
        )
        assert perms.can_read is True
        assert perms.can_write is False
        assert perms.can_manage_admins is False

    def test_capability_true_if_any_module_grants_it(self):
        perms = resolve_effective_permissions(
            AdminRole.USER_ADMIN,
            [(PermissionModule.ACCOUNTS, D), (PermissionModule.REPORTS, R)],
        )
        assert perms.can_read is True
        assert perms.can_delete is True
        assert perms.can_write is False

    @pytest.mark.parametrize("permission_type, expected", [(R, True), (W, True), (D, False)])
    def test_manage_admins_needs_read_or_write_on_admin_users(self, permission_type, expected):
        perms = resolve_effective_permissions(
            AdminRole.USER_ADMIN,
            [(PermissionModule.ADMIN_USERS, permission_type)],
        )
        assert perms.can_manage_admins is expected

    def test_string_values_and_orm_like_rows_are_accepted(self):
        class Row:
            module = "reports"
            permission_type = "write"

        perms = resolve_effective_permissions("local_admin", [Row()])
        assert perms.can_write is True
        assert perms.can_read is False

    def test_invalid_grants_are_dropped(self):
        assert normalize_grants([("bogus", "read"), ("reports", "fly"), ("reports",)]) == frozenset()
        # Nothing valid left, so role defaults apply
        perms = resolve_effective_permissions(AdminRole.USER_ADMIN, [("bogus", "read")])
        assert perms == EffectivePermissions(True, False, False, False)


class TestModulePermissions:
    """Strict per-module resolution."""

    def test_exact_match_only(self):
        grants = [(PermissionModule.REGISTRATIONS, R), (PermissionModule.ACCOUNTS, W)]
        assert resolve_module_permissions(PermissionModule.REGISTRATIONS, grants) == ModulePermissions(
            can_read=True
        )
        assert resolve_module_permissions(PermissionModule.ACCOUNTS, grants) == ModulePermissions(
            can_write=True
        )
        assert resolve_module_permissions(PermissionModule.REPORTS, grants) == ModulePermissions()

    def test_no_grants_means_nothing(self):
        assert resolve_module_permissions(PermissionModule.ACCOUNTS, []) == ModulePermissions()

    def test_unknown_module_means_nothing(self):
        assert resolve_module_permissions("payroll", [(PermissionModule.ACCOUNTS, R)]) == ModulePermissions()


class TestActorContext:
    """The gate every guarded operation goes through."""

    def test_super_admin_can_do_anything(self):
        actor = make_actor(AdminRole.SUPER_ADMIN)
        for module in PermissionModule:
            for permission in PermissionType:
                assert actor.can(module, permission)

    def test_local_admin_defaults(self):
        actor = make_actor(AdminRole.LOCAL_ADMIN)
        assert actor.can(PermissionModule.REGISTRATIONS, W)
        assert not actor.can(PermissionModule.REGISTRATIONS, D)
        assert not actor.can(PermissionModule.ADMIN_USERS, R)
        assert not actor.can_manage_admins

    def test_grants_are_module_scoped(self):
        actor = make_actor(AdminRole.LOCAL_ADMIN, [(PermissionModule.ACCOUNTS, R)])
        assert actor.can(PermissionModule.ACCOUNTS, R)
        assert not actor.can(PermissionModule.ACCOUNTS, W)
        assert not actor.can(PermissionModule.REGISTRATIONS, R)

    def test_visible_modules(self):
        viewer = make_actor(AdminRole.USER_ADMIN)
        assert PermissionModule.ADMIN_USERS not in visible_modules(viewer)
        assert PermissionModule.REGISTRATIONS in visible_modules(viewer)

        assert visible_modules(make_actor(AdminRole.SUPER_ADMIN)) == list(PermissionModule)

        scoped = make_actor(AdminRole.USER_ADMIN, [(PermissionModule.REPORTS, R)])
        assert visible_modules(scoped) == [PermissionModule.REPORTS]

    def test_from_admin_freezes_grants(self):
        class Grant:
            def __init__(self, module, permission_type):
                self.module = module
                self.permission_type = permission_type

        class Admin:
            id = uuid.uuid4()
            username = "scoped"
            role = AdminRole.USER_ADMIN
            permissions = [Grant(PermissionModule.UTILITIES, W)]

        actor = ActorContext.from_admin(Admin())
        assert actor.grants == frozenset({(PermissionModule.UTILITIES, W)})
        assert actor.can(PermissionModule.UTILITIES, W)


class TestRequirePermission:

    def test_denied_names_capability_and_module(self):
        actor = make_actor(AdminRole.USER_ADMIN)
        with pytest.raises(InsufficientPermissionsException) as exc_info:
            require_permission(actor, PermissionModule.REGISTRATIONS, D)
        assert "delete" in exc_info.value.message
        assert "registrations" in exc_info.value.message
        assert exc_info.value.status_code == 403

    def test_missing_actor_is_denied(self):
        with pytest.raises(InsufficientPermissionsException):
            require_permission(None, PermissionModule.REPORTS, R)

    def test_allowed_returns_actor(self):
        actor = make_actor(AdminRole.LOCAL_ADMIN)
        assert require_permission(actor, PermissionModule.CATEGORIES, W) is actor
