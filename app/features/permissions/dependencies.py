"""
FastAPI dependencies for route protection.

Each dependency resolves the subject from the bearer token, runs a guard and
either returns the Subject or raises HTTPException:
401 not authenticated, 403 forbidden, 500 when a lookup failed.
"""
from collections.abc import Iterable
from typing import Annotated, Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database.engine import get_db
from app.features.permissions.enums import Capability, Combinator, Role
from app.features.permissions.exceptions import AuthErrorKind
from app.features.permissions.guards import (
    Authenticated,
    AuthorizationDecision,
    Guard,
    RequirePermission,
    RequireRole,
    authorize,
    guard_for,
)
from app.features.permissions.resolver import SubjectResolver
from app.features.permissions.subject import Subject
from app.features.projects.stores import SqlMembershipStore
from app.features.users.auth import AppwriteIdentityProvider
from app.features.users.stores import SqlUserStore

security = HTTPBearer(auto_error=False)

STATUS_BY_ERROR = {
    AuthErrorKind.UNAUTHENTICATED: status.HTTP_401_UNAUTHORIZED,
    AuthErrorKind.FORBIDDEN: status.HTTP_403_FORBIDDEN,
    AuthErrorKind.RESOLUTION_FAILURE: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


async def get_bearer_token(
    credentials: Annotated[Optional[HTTPAuthorizationCredentials], Depends(security)]
) -> Optional[str]:
    """Raw bearer token, or None when the header is missing."""
    return credentials.credentials if credentials else None


async def get_subject_resolver(
    db: Annotated[AsyncSession, Depends(get_db)]
) -> SubjectResolver:
    """Per-request resolver backed by Appwrite and the request's database session."""
    return SubjectResolver(
        identity_provider=AppwriteIdentityProvider(),
        user_store=SqlUserStore(db),
        membership_store=SqlMembershipStore(db),
    )


def raise_for_decision(decision: AuthorizationDecision) -> Subject:
    """Return the subject of an allowed decision or raise the matching HTTPException."""
    if decision.allowed and decision.subject is not None:
        return decision.subject

    error = decision.error or AuthErrorKind.FORBIDDEN
    headers = {"WWW-Authenticate": "Bearer"} if error is AuthErrorKind.UNAUTHENTICATED else None
    raise HTTPException(
        status_code=STATUS_BY_ERROR[error],
        detail=decision.reason,
        headers=headers,
    )


def require(guard: Guard, project_param: Optional[str] = None):
    """
    FastAPI dependency factory running `guard` for the current request.

    Usage:
        @router.delete("/{project_id}")
        async def delete_project(
            project_id: str,
            subject: Subject = Depends(require(RequirePermission(Capability.DELETE_PROJECTS), "project_id"))
        ):
            ...

    Args:
        guard: Guard to run against the resolved subject
        project_param: Name of the path parameter holding the project id, for
            project-scoped checks (project visibility is then checked first)

    Returns:
        Dependency function that returns the resolved Subject
    """
    async def authorization_dependency(
        request: Request,
        token: Annotated[Optional[str], Depends(get_bearer_token)],
        resolver: Annotated[SubjectResolver, Depends(get_subject_resolver)],
    ) -> Subject:
        project_id = request.path_params.get(project_param) if project_param else None
        decision = await authorize(resolver, token, guard, project_id)
        return raise_for_decision(decision)

    return authorization_dependency


def require_permission(capability: Capability, project_param: Optional[str] = None):
    """Require a single capability."""
    return require(RequirePermission(capability), project_param)


def require_all_permissions(capabilities: Iterable[Capability], project_param: Optional[str] = None):
    """Require every listed capability."""
    return require(guard_for(list(capabilities), Combinator.ALL), project_param)


def require_any_permission(capabilities: Iterable[Capability], project_param: Optional[str] = None):
    """Require at least one of the listed capabilities."""
    return require(guard_for(list(capabilities), Combinator.ANY), project_param)


def require_role(roles: Iterable[Role]):
    """Require one of the listed tenant roles."""
    return require(RequireRole(roles))


def require_project_access(project_param: str = "project_id"):
    """Require visibility of the project named by the path parameter."""
    return require(Authenticated(), project_param)


get_current_subject = require(Authenticated())
