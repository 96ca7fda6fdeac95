"""
SelfEmploy Portal - Permissions System

Resolution of admin capabilities from role + stored grants.

Coarse resolution (dashboard-wide flags), first match wins:
1. super_admin                -> everything, regardless of stored grants
2. any grant rows exist       -> capability true if ANY module has that type;
                                 manage_admins needs read/write on admin_users
3. no grant rows              -> role defaults

Role defaults:
| Role        | Read | Write | Delete | Manage Admins |
|-------------|------|-------|--------|---------------|
| super_admin | X    | X     | X      | X             |
| local_admin | X    | X     |        |               |
| user_admin  | X    |       |        |               |

Module-scoped resolution is strict: a capability is true only when a grant
row exists for that exact (module, type) pair. It has no super_admin
short-circuit and no role fallback; callers deciding what an actor may do
go through ``ActorContext.can`` which layers both.
"""

import uuid
from dataclasses import dataclass, field
from typing import FrozenSet, Iterable, List, Optional, Tuple, Union

from app.models.admin_user import AdminRole, PermissionModule, PermissionType
from app.utils.error_handling import InsufficientPermissionsException


Grant = Tuple[PermissionModule, PermissionType]


@dataclass(frozen=True)
class EffectivePermissions:
    """Dashboard-wide capability flags."""
    can_read: bool = False
    can_write: bool = False
    can_delete: bool = False
    can_manage_admins: bool = False


@dataclass(frozen=True)
class ModulePermissions:
    """Capabilities on a single module."""
    can_read: bool = False
    can_write: bool = False
    can_delete: bool = False


ROLE_DEFAULT_PERMISSIONS: dict[AdminRole, EffectivePermissions] = {
    AdminRole.SUPER_ADMIN: EffectivePermissions(True, True, True, True),
    AdminRole.LOCAL_ADMIN: EffectivePermissions(True, True, False, False),
    AdminRole.USER_ADMIN: EffectivePermissions(True, False, False, False),
}

_DEFAULT_FLAG = {
    PermissionType.READ: "can_read",
    PermissionType.WRITE: "can_write",
    PermissionType.DELETE: "can_delete",
}


# ===========================================
# NORMALIZATION
# ===========================================

def _coerce_role(role: Union[AdminRole, str, None]) -> Optional[AdminRole]:
    if isinstance(role, AdminRole):
        return role
    try:
        return AdminRole(role)
    except ValueError:
        return None


def normalize_grants(grants: Optional[Iterable]) -> FrozenSet[Grant]:
    """
    Turn stored grants into a set of (module, type) pairs.

    Accepts ORM ``AdminPermission`` rows, objects with ``module`` and
    ``permission_type`` attributes, or plain pairs. Entries naming an unknown
    module or type are dropped.
    """
    normalized = set()
    for grant in grants or ():
        if isinstance(grant, tuple):
            module, permission_type = (grant + (None, None))[:2]
        else:
            module = getattr(grant, "module", None)
            permission_type = getattr(grant, "permission_type", None)
        try:
            normalized.add((PermissionModule(module), PermissionType(permission_type)))
        except ValueError:
            continue
    return frozenset(normalized)


# ===========================================
# RESOLVERS
# ===========================================

def resolve_effective_permissions(
    role: Union[AdminRole, str, None],
    grants: Optional[Iterable] = None,
) -> EffectivePermissions:
    """Resolve dashboard-wide permissions for an admin. Never raises."""
    admin_role = _coerce_role(role)
    if admin_role == AdminRole.SUPER_ADMIN:
        return ROLE_DEFAULT_PERMISSIONS[AdminRole.SUPER_ADMIN]

    granted = normalize_grants(grants)
    if granted:
        types = {permission_type for _, permission_type in granted}
        return EffectivePermissions(
            can_read=PermissionType.READ in types,
            can_write=PermissionType.WRITE in types,
            can_delete=PermissionType.DELETE in types,
            can_manage_admins=(
                (PermissionModule.ADMIN_USERS, PermissionType.READ) in granted
                or (PermissionModule.ADMIN_USERS, PermissionType.WRITE) in granted
            ),
        )

    return ROLE_DEFAULT_PERMISSIONS.get(admin_role, EffectivePermissions())


def resolve_module_permissions(
    module: Union[PermissionModule, str],
    grants: Optional[Iterable] = None,
) -> ModulePermissions:
    """Resolve capabilities on one module from explicit grants only."""
    try:
        target = PermissionModule(module)
    except ValueError:
        return ModulePermissions()

    granted = normalize_grants(grants)
    return ModulePermissions(
        can_read=(target, PermissionType.READ) in granted,
        can_write=(target, PermissionType.WRITE) in granted,
        can_delete=(target, PermissionType.DELETE) in granted,
    )


# ===========================================
# ACTOR CONTEXT
# ===========================================

@dataclass(frozen=True)
class ActorContext:
    """
    The acting admin, passed explicitly into every guarded operation.

    Built by the authentication layer from a verified access token; it lives
    as long as that token does.
    """
    admin_id: uuid.UUID
    username: str
    role: AdminRole
    grants: FrozenSet[Grant] = field(default_factory=frozenset)

    @classmethod
    def from_admin(cls, admin, grants: Optional[Iterable] = None) -> "ActorContext":
        """Build a context from an ``AdminUser`` and its stored grants."""
        return cls(
            admin_id=admin.id,
            username=admin.username,
            role=admin.role,
            grants=normalize_grants(admin.permissions if grants is None else grants),
        )

    @property
    def is_super_admin(self) -> bool:
        return self.role == AdminRole.SUPER_ADMIN

    @property
    def effective(self) -> EffectivePermissions:
        return resolve_effective_permissions(self.role, self.grants)

    @property
    def can_manage_admins(self) -> bool:
        return self.effective.can_manage_admins

    def module_permissions(self, module: PermissionModule) -> ModulePermissions:
        """Capabilities this actor holds on ``module``."""
        if self.is_super_admin:
            return ModulePermissions(True, True, True)
        if self.grants:
            return resolve_module_permissions(module, self.grants)
        defaults = ROLE_DEFAULT_PERMISSIONS.get(self.role, EffectivePermissions())
        if module == PermissionModule.ADMIN_USERS:
            return ModulePermissions(
                can_read=defaults.can_manage_admins,
                can_write=defaults.can_manage_admins,
                can_delete=defaults.can_manage_admins,
            )
        return ModulePermissions(defaults.can_read, defaults.can_write, defaults.can_delete)

    def can(self, module: PermissionModule, permission: PermissionType) -> bool:
        return getattr(self.module_permissions(module), _DEFAULT_FLAG[permission])


def visible_modules(actor: ActorContext) -> List[PermissionModule]:
    """Modules whose dashboard tab should be shown to ``actor``."""
    return [module for module in PermissionModule if actor.can(module, PermissionType.READ)]


def require_permission(
    actor: Optional[ActorContext],
    module: PermissionModule,
    permission: PermissionType,
) -> ActorContext:
    """
    Guard an operation before it reaches the database.

    Raises:
        InsufficientPermissionsException: if the actor lacks the capability
    """
    if actor is None or not actor.can(module, permission):
        raise InsufficientPermissionsException(module.value, permission.value)
    return actor
