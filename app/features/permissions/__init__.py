"""
Authorization engine.

Decides, for a subject (tenant role, optional project role, ownership), whether
an action is permitted, and narrows record lists to what the subject may see.

- enums: Role, ProjectRole, Capability vocabularies
- matrix: tenant baselines and project-role overrides
- evaluator: has_permission / has_all_permissions / has_any_permission
- access: project visibility and record scoping
- resolver: builds a Subject from credentials and the user/membership stores
- guards: composable checks and `authorize`
- dependencies: FastAPI integration
"""
from app.features.permissions.access import can_access_project, scope_records
from app.features.permissions.enums import Capability, Combinator, ProjectRole, Role
from app.features.permissions.evaluator import (
    available_navigation_sections,
    effective_permissions,
    has_all_permissions,
    has_any_permission,
    has_permission,
)
from app.features.permissions.exceptions import AuthError, AuthErrorKind, StoreUnavailable
from app.features.permissions.guards import AuthorizationDecision, authorize, guard_for
from app.features.permissions.matrix import PermissionSet, baseline, override
from app.features.permissions.resolver import SubjectResolver
from app.features.permissions.subject import Identity, MembershipRecord, Subject, UserRecord

__all__ = [
    "AuthError",
    "AuthErrorKind",
    "AuthorizationDecision",
    "Capability",
    "Combinator",
    "Identity",
    "MembershipRecord",
    "PermissionSet",
    "ProjectRole",
    "Role",
    "StoreUnavailable",
    "Subject",
    "SubjectResolver",
    "UserRecord",
    "authorize",
    "available_navigation_sections",
    "baseline",
    "can_access_project",
    "effective_permissions",
    "guard_for",
    "has_all_permissions",
    "has_any_permission",
    "has_permission",
    "override",
    "scope_records",
]
