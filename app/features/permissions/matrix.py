"""
Permission tables for tenant roles and project roles.

ROLE_PERMISSIONS gives every tenant Role a complete PermissionSet.
PROJECT_ROLE_PERMISSIONS gives every ProjectRole a partial map: a capability that
is absent from it inherits the tenant value, it is not treated as False.

Both tables are validated when this module is imported and are read-only afterwards.
"""
from collections.abc import Iterator, Mapping
from types import MappingProxyType
from typing import Any

from app.features.permissions.enums import Capability, ProjectRole, Role


C = Capability


class IncompletePermissionSet(ValueError):
    """Raised when a permission table does not define every capability or every role."""

    def __init__(self, owner: str, missing: list[str]):
        self.owner = owner
        self.missing = missing
        super().__init__(f"{owner} is missing: {', '.join(missing)}")


class PermissionSet(Mapping[Capability, bool]):
    """
    Total, immutable mapping from every Capability to a boolean.

    Keys may be given as Capability members or as their wire names
    ("canCreateProjects"); unknown names raise ValueError.
    """

    __slots__ = ("_values",)

    def __init__(self, values: Mapping[Any, bool], owner: str = "PermissionSet"):
        normalized = {Capability(key): bool(value) for key, value in values.items()}
        missing = [c.value for c in Capability if c not in normalized]
        if missing:
            raise IncompletePermissionSet(owner, missing)
        self._values = MappingProxyType({c: normalized[c] for c in Capability})

    def __getitem__(self, capability: Capability | str) -> bool:
        try:
            key = Capability(capability)
        except ValueError:
            raise KeyError(capability) from None
        return self._values[key]

    def __iter__(self) -> Iterator[Capability]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        granted = sorted(c.value for c in self.granted())
        return f"<PermissionSet(granted={granted})>"

    def granted(self) -> frozenset[Capability]:
        """Capabilities set to True."""
        return frozenset(c for c, value in self._values.items() if value)

    def with_overrides(self, overrides: Mapping[Capability, bool]) -> "PermissionSet":
        """Return a new set where each capability in `overrides` replaces the current value."""
        merged = dict(self._values)
        merged.update(overrides)
        return PermissionSet(merged)

    def as_dict(self) -> dict[str, bool]:
        """Wire shape: {"canCreateProjects": True, ...}."""
        return {c.value: value for c, value in self._values.items()}


# ============================================================================
# Tenant-wide roles
# ============================================================================

_OWNER = {
    # Full access
    C.MANAGE_USERS: True,
    C.CREATE_USERS: True,
    C.EDIT_USERS: True,
    C.DELETE_USERS: True,
    C.CHANGE_USER_ROLES: True,

    C.MANAGE_COMPANY: True,
    C.VIEW_COMPANY_SETTINGS: True,
    C.EDIT_COMPANY_SETTINGS: True,

    C.CREATE_PROJECTS: True,
    C.EDIT_PROJECTS: True,
    C.DELETE_PROJECTS: True,
    C.VIEW_ALL_PROJECTS: True,
    C.MANAGE_PROJECT_MEMBERS: True,
    C.VIEW_PROJECTS: True,
    C.EDIT_PROJECT_CLIENT_REQUISITES: True,

    C.CREATE_TASKS: True,
    C.EDIT_TASKS: True,
    C.DELETE_TASKS: True,
    C.ASSIGN_TASKS: True,
    C.VIEW_ALL_TASKS: True,

    C.CREATE_DOCUMENTS: True,
    C.EDIT_DOCUMENTS: True,
    C.DELETE_DOCUMENTS: True,
    C.VIEW_ALL_DOCUMENTS: True,
    C.APPROVE_DOCUMENTS: True,

    C.VIEW_FINANCES: True,
    C.CREATE_FINANCES: True,
    C.EDIT_FINANCES: True,
    C.DELETE_FINANCES: True,
    C.VIEW_FINANCIAL_REPORTS: True,

    C.VIEW_ESTIMATES: True,
    C.CREATE_ESTIMATES: True,
    C.EDIT_ESTIMATES: True,
    C.DELETE_ESTIMATES: True,

    C.CREATE_APPROVALS: True,
    C.EDIT_APPROVALS: True,
    C.DELETE_APPROVALS: True,
    C.RESPOND_TO_APPROVALS: True,
    C.VIEW_ALL_APPROVALS: True,

    C.VIEW_REPORTS: True,
    C.EXPORT_REPORTS: True,

    C.VIEW_SYSTEM_SETTINGS: True,
    C.EDIT_SYSTEM_SETTINGS: True,
}

_ADMIN = {
    # Same as OWNER except user deletion, role changes and system settings
    C.MANAGE_USERS: True,
    C.CREATE_USERS: True,
    C.EDIT_USERS: True,
    C.DELETE_USERS: False,
    C.CHANGE_USER_ROLES: False,

    C.MANAGE_COMPANY: True,
    C.VIEW_COMPANY_SETTINGS: True,
    C.EDIT_COMPANY_SETTINGS: True,

    C.CREATE_PROJECTS: True,
    C.EDIT_PROJECTS: True,
    C.DELETE_PROJECTS: True,
    C.VIEW_ALL_PROJECTS: True,
    C.MANAGE_PROJECT_MEMBERS: True,
    C.VIEW_PROJECTS: True,
    C.EDIT_PROJECT_CLIENT_REQUISITES: True,

    C.CREATE_TASKS: True,
    C.EDIT_TASKS: True,
    C.DELETE_TASKS: True,
    C.ASSIGN_TASKS: True,
    C.VIEW_ALL_TASKS: True,

    C.CREATE_DOCUMENTS: True,
    C.EDIT_DOCUMENTS: True,
    C.DELETE_DOCUMENTS: True,
    C.VIEW_ALL_DOCUMENTS: True,
    C.APPROVE_DOCUMENTS: True,

    C.VIEW_FINANCES: True,
    C.CREATE_FINANCES: True,
    C.EDIT_FINANCES: True,
    C.DELETE_FINANCES: True,
    C.VIEW_FINANCIAL_REPORTS: True,

    C.VIEW_ESTIMATES: True,
    C.CREATE_ESTIMATES: True,
    C.EDIT_ESTIMATES: True,
    C.DELETE_ESTIMATES: True,

    C.CREATE_APPROVALS: True,
    C.EDIT_APPROVALS: True,
    C.DELETE_APPROVALS: True,
    C.RESPOND_TO_APPROVALS: True,
    C.VIEW_ALL_APPROVALS: True,

    C.VIEW_REPORTS: True,
    C.EXPORT_REPORTS: True,

    C.VIEW_SYSTEM_SETTINGS: True,
    C.EDIT_SYSTEM_SETTINGS: False,
}

_MANAGER = {
    # Runs projects, does not manage company users
    C.MANAGE_USERS: False,
    C.CREATE_USERS: False,
    C.EDIT_USERS: False,
    C.DELETE_USERS: False,
    C.CHANGE_USER_ROLES: False,

    C.MANAGE_COMPANY: False,
    C.VIEW_COMPANY_SETTINGS: False,
    C.EDIT_COMPANY_SETTINGS: False,

    C.CREATE_PROJECTS: True,
    C.EDIT_PROJECTS: True,
    C.DELETE_PROJECTS: False,  # archive only
    C.VIEW_ALL_PROJECTS: True,
    C.MANAGE_PROJECT_MEMBERS: True,
    C.VIEW_PROJECTS: True,
    C.EDIT_PROJECT_CLIENT_REQUISITES: True,

    C.CREATE_TASKS: True,
    C.EDIT_TASKS: True,
    C.DELETE_TASKS: True,
    C.ASSIGN_TASKS: True,
    C.VIEW_ALL_TASKS: True,

    C.CREATE_DOCUMENTS: True,
    C.EDIT_DOCUMENTS: True,
    C.DELETE_DOCUMENTS: True,
    C.VIEW_ALL_DOCUMENTS: True,
    C.APPROVE_DOCUMENTS: True,

    C.VIEW_FINANCES: True,
    C.CREATE_FINANCES: True,  # expenses
    C.EDIT_FINANCES: True,
    C.DELETE_FINANCES: False,
    C.VIEW_FINANCIAL_REPORTS: True,

    C.VIEW_ESTIMATES: True,
    C.CREATE_ESTIMATES: True,
    C.EDIT_ESTIMATES: True,
    C.DELETE_ESTIMATES: False,

    C.CREATE_APPROVALS: True,
    C.EDIT_APPROVALS: True,
    C.DELETE_APPROVALS: False,
    C.RESPOND_TO_APPROVALS: True,
    C.VIEW_ALL_APPROVALS: True,

    C.VIEW_REPORTS: True,
    C.EXPORT_REPORTS: True,

    C.VIEW_SYSTEM_SETTINGS: False,
    C.EDIT_SYSTEM_SETTINGS: False,
}

_USER = {
    C.MANAGE_USERS: False,
    C.CREATE_USERS: False,
    C.EDIT_USERS: False,
    C.DELETE_USERS: False,
    C.CHANGE_USER_ROLES: False,

    C.MANAGE_COMPANY: False,
    C.VIEW_COMPANY_SETTINGS: False,
    C.EDIT_COMPANY_SETTINGS: False,

    C.CREATE_PROJECTS: False,
    C.EDIT_PROJECTS: False,
    C.DELETE_PROJECTS: False,
    C.VIEW_ALL_PROJECTS: True,  # projects the user is a member of
    C.MANAGE_PROJECT_MEMBERS: False,
    C.VIEW_PROJECTS: True,
    # Intentional; see DESIGN.md open questions
    C.EDIT_PROJECT_CLIENT_REQUISITES: True,

    C.CREATE_TASKS: False,
    C.EDIT_TASKS: False,  # own tasks only, enforced by the task handlers
    C.DELETE_TASKS: False,
    C.ASSIGN_TASKS: False,
    C.VIEW_ALL_TASKS: True,  # within accessible projects

    C.CREATE_DOCUMENTS: True,
    C.EDIT_DOCUMENTS: False,  # own documents only
    C.DELETE_DOCUMENTS: False,
    C.VIEW_ALL_DOCUMENTS: True,
    C.APPROVE_DOCUMENTS: False,

    C.VIEW_FINANCES: True,  # within accessible projects
    C.CREATE_FINANCES: False,
    C.EDIT_FINANCES: False,
    C.DELETE_FINANCES: False,
    C.VIEW_FINANCIAL_REPORTS: False,

    C.VIEW_ESTIMATES: True,  # read only
    C.CREATE_ESTIMATES: False,
    C.EDIT_ESTIMATES: False,
    C.DELETE_ESTIMATES: False,

    C.CREATE_APPROVALS: True,
    C.EDIT_APPROVALS: False,  # own approvals only
    C.DELETE_APPROVALS: False,
    C.RESPOND_TO_APPROVALS: True,
    C.VIEW_ALL_APPROVALS: True,

    C.VIEW_REPORTS: False,
    C.EXPORT_REPORTS: False,

    C.VIEW_SYSTEM_SETTINGS: False,
    C.EDIT_SYSTEM_SETTINGS: False,
}


# ============================================================================
# Project roles (partial overrides)
# ============================================================================

_PROJECT_OWNER = {
    C.MANAGE_PROJECT_MEMBERS: True,
    C.EDIT_PROJECTS: True,
    C.DELETE_PROJECTS: True,
    C.CREATE_TASKS: True,
    C.EDIT_TASKS: True,
    C.DELETE_TASKS: True,
    C.ASSIGN_TASKS: True,
    C.CREATE_DOCUMENTS: True,
    C.EDIT_DOCUMENTS: True,
    C.DELETE_DOCUMENTS: True,
    C.VIEW_FINANCES: True,
    C.CREATE_FINANCES: True,
    C.EDIT_FINANCES: True,
    C.DELETE_FINANCES: True,
    C.CREATE_APPROVALS: True,
    C.EDIT_APPROVALS: True,
    C.DELETE_APPROVALS: True,
}

_PROJECT_MANAGER = {
    C.MANAGE_PROJECT_MEMBERS: True,
    C.EDIT_PROJECTS: True,
    C.DELETE_PROJECTS: False,
    C.CREATE_TASKS: True,
    C.EDIT_TASKS: True,
    C.DELETE_TASKS: True,
    C.ASSIGN_TASKS: True,
    C.CREATE_DOCUMENTS: True,
    C.EDIT_DOCUMENTS: True,
    C.DELETE_DOCUMENTS: True,
    C.VIEW_FINANCES: True,
    C.CREATE_FINANCES: True,
    C.EDIT_FINANCES: True,
    C.DELETE_FINANCES: False,
    C.CREATE_APPROVALS: True,
    C.EDIT_APPROVALS: True,
    C.DELETE_APPROVALS: False,
}

_PROJECT_MEMBER = {
    C.MANAGE_PROJECT_MEMBERS: False,
    C.EDIT_PROJECTS: False,
    C.DELETE_PROJECTS: False,
    C.CREATE_TASKS: False,
    C.EDIT_TASKS: False,
    C.DELETE_TASKS: False,
    C.ASSIGN_TASKS: False,
    C.CREATE_DOCUMENTS: True,
    C.EDIT_DOCUMENTS: False,
    C.DELETE_DOCUMENTS: False,
    C.VIEW_FINANCES: False,
    C.CREATE_FINANCES: False,
    C.EDIT_FINANCES: False,
    C.DELETE_FINANCES: False,
    C.CREATE_APPROVALS: True,
    C.EDIT_APPROVALS: False,
    C.DELETE_APPROVALS: False,
}

_PROJECT_VIEWER = {
    C.MANAGE_PROJECT_MEMBERS: False,
    C.EDIT_PROJECTS: False,
    C.DELETE_PROJECTS: False,
    C.CREATE_TASKS: False,
    C.EDIT_TASKS: False,
    C.DELETE_TASKS: False,
    C.ASSIGN_TASKS: False,
    C.CREATE_DOCUMENTS: False,
    C.EDIT_DOCUMENTS: False,
    C.DELETE_DOCUMENTS: False,
    C.VIEW_FINANCES: False,
    C.CREATE_FINANCES: False,
    C.EDIT_FINANCES: False,
    C.DELETE_FINANCES: False,
    C.CREATE_APPROVALS: False,
    C.EDIT_APPROVALS: False,
    C.DELETE_APPROVALS: False,
}


def _build_role_table(source: dict[Role, dict]) -> Mapping[Role, PermissionSet]:
    missing = [role.value for role in Role if role not in source]
    if missing:
        raise IncompletePermissionSet("ROLE_PERMISSIONS", missing)
    return MappingProxyType({
        role: PermissionSet(source[role], owner=f"ROLE_PERMISSIONS[{role.value}]")
        for role in Role
    })


def _build_override_table(
    source: dict[ProjectRole, dict]
) -> Mapping[ProjectRole, Mapping[Capability, bool]]:
    missing = [role.value for role in ProjectRole if role not in source]
    if missing:
        raise IncompletePermissionSet("PROJECT_ROLE_PERMISSIONS", missing)
    return MappingProxyType({
        role: MappingProxyType({Capability(c): bool(v) for c, v in source[role].items()})
        for role in ProjectRole
    })


ROLE_PERMISSIONS: Mapping[Role, PermissionSet] = _build_role_table({
    Role.OWNER: _OWNER,
    Role.ADMIN: _ADMIN,
    Role.MANAGER: _MANAGER,
    Role.USER: _USER,
})

PROJECT_ROLE_PERMISSIONS: Mapping[ProjectRole, Mapping[Capability, bool]] = _build_override_table({
    ProjectRole.OWNER: _PROJECT_OWNER,
    ProjectRole.MANAGER: _PROJECT_MANAGER,
    ProjectRole.MEMBER: _PROJECT_MEMBER,
    ProjectRole.VIEWER: _PROJECT_VIEWER,
})


def baseline(role: Role) -> PermissionSet:
    """Complete tenant-wide permission set for a role."""
    return ROLE_PERMISSIONS[Role(role)]


def override(project_role: ProjectRole) -> Mapping[Capability, bool]:
    """Partial permission map applied on top of the baseline for a project role."""
    return PROJECT_ROLE_PERMISSIONS[ProjectRole(project_role)]
