"""
Permission evaluation.

Pure functions over the permission tables and a Subject: no I/O, no shared
mutable state, safe to call from any number of requests at once.
"""
from collections.abc import Iterable
from functools import lru_cache
from typing import Optional

from app.features.permissions.enums import Capability, ProjectRole, Role
from app.features.permissions.matrix import PermissionSet, baseline, override
from app.features.permissions.subject import Subject
from app.utils import get_logger


log = get_logger(__name__)


# Always shown, in this order, before any permission-dependent section
BASE_NAVIGATION_SECTIONS = ("dashboard", "projects", "tasks", "documents", "approvals")


@lru_cache(maxsize=None)
def permissions_for(role: Role, project_role: Optional[ProjectRole] = None) -> PermissionSet:
    """
    Effective permission set for a tenant role, optionally inside a project.

    The project role's overrides replace baseline values only for the
    capabilities they list; every other capability keeps the tenant value.
    """
    permissions = baseline(role)
    if project_role is None:
        return permissions
    return permissions.with_overrides(override(project_role))


def effective_permissions(subject: Subject) -> PermissionSet:
    return permissions_for(Role(subject.role), _project_role(subject))


def has_permission(subject: Subject, capability: Capability) -> bool:
    """Check a single capability for the subject."""
    allowed = effective_permissions(subject)[capability]
    log.debug(
        "User %s role=%s project_role=%s %s %s",
        subject.id,
        Role(subject.role).value,
        _label(_project_role(subject)),
        "granted" if allowed else "denied",
        Capability(capability).value,
    )
    return allowed


def has_all_permissions(subject: Subject, capabilities: Iterable[Capability]) -> bool:
    """True when every capability is granted. An empty list is allowed."""
    permissions = effective_permissions(subject)
    return all(permissions[capability] for capability in capabilities)


def has_any_permission(subject: Subject, capabilities: Iterable[Capability]) -> bool:
    """True when at least one capability is granted. An empty list is denied."""
    permissions = effective_permissions(subject)
    return any(permissions[capability] for capability in capabilities)


def has_role(subject: Subject, allowed_roles: Iterable[Role]) -> bool:
    return Role(subject.role) in {Role(role) for role in allowed_roles}


def available_navigation_sections(role: Role) -> list[str]:
    """
    Top-level sections the UI may offer to a tenant role.

    Only the tenant baseline is consulted; project roles never add sections.
    """
    permissions = baseline(role)
    sections = list(BASE_NAVIGATION_SECTIONS)

    if permissions[Capability.MANAGE_USERS]:
        sections.append("users")

    if permissions[Capability.VIEW_REPORTS]:
        sections.append("reports")

    if permissions[Capability.VIEW_SYSTEM_SETTINGS]:
        sections.append("settings")

    return sections


def _project_role(subject: Subject) -> Optional[ProjectRole]:
    if subject.project_role is None:
        return None
    return ProjectRole(subject.project_role)


def _label(value) -> str:
    return value.value if value is not None else "-"
