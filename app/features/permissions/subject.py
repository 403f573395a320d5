"""
Value objects exchanged between the authorization engine and its collaborators.
"""
from dataclasses import dataclass
from typing import Optional

from app.features.permissions.enums import ProjectRole, Role


@dataclass(frozen=True)
class Identity:
    """Authenticated caller as reported by the identity provider."""
    user_id: str
    email: str


@dataclass(frozen=True)
class UserRecord:
    """What the user store knows about an identity."""
    id: str
    role: Role
    company_id: str


@dataclass(frozen=True)
class MembershipRecord:
    """A (project, user) membership row plus the project's creator."""
    project_role: ProjectRole
    project_creator_id: Optional[str]


@dataclass(frozen=True)
class Subject:
    """
    Request-scoped view of an actor that every decision is made against.

    project_role and is_project_owner stay None unless a project id was
    supplied and a membership row exists for it. Built fresh per request.
    """
    id: str
    company_id: str
    role: Role
    email: Optional[str] = None
    project_id: Optional[str] = None
    project_role: Optional[ProjectRole] = None
    is_project_owner: Optional[bool] = None
