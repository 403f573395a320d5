"""
Permission API routes.

Expose the caller's effective permissions so the UI can decide what to render,
and a check endpoint that returns a decision instead of raising.
"""
from typing import Annotated, Optional
from fastapi import APIRouter, Depends

from app.features.permissions.access import subject_can_access_project
from app.features.permissions.dependencies import (
    get_bearer_token,
    get_current_subject,
    get_subject_resolver,
    require,
)
from app.features.permissions.evaluator import available_navigation_sections, effective_permissions
from app.features.permissions.guards import Authenticated, authorize, guard_for
from app.features.permissions.resolver import SubjectResolver
from app.features.permissions.schemas import (
    PermissionCheckRequest,
    PermissionCheckResponse,
    PermissionSnapshotResponse,
    SubjectResponse,
)
from app.features.permissions.subject import Subject


router = APIRouter()


def build_snapshot(subject: Subject) -> PermissionSnapshotResponse:
    return PermissionSnapshotResponse(
        subject=SubjectResponse.model_validate(subject),
        can_access_project=(
            subject_can_access_project(subject) if subject.project_id is not None else None
        ),
        permissions=effective_permissions(subject).as_dict(),
        navigation=available_navigation_sections(subject.role),
    )


@router.get("/me", response_model=PermissionSnapshotResponse)
async def get_my_permissions(
    subject: Annotated[Subject, Depends(get_current_subject)]
):
    """Tenant-wide permissions and navigation sections of the caller."""
    return build_snapshot(subject)


@router.get("/projects/{project_id}", response_model=PermissionSnapshotResponse)
async def get_my_project_permissions(
    project_id: str,
    subject: Annotated[Subject, Depends(require(Authenticated(), "project_id"))]
):
    """Effective permissions of the caller inside a project they can access."""
    return build_snapshot(subject)


@router.post("/check", response_model=PermissionCheckResponse)
async def check_permissions(
    check: PermissionCheckRequest,
    token: Annotated[Optional[str], Depends(get_bearer_token)],
    resolver: Annotated[SubjectResolver, Depends(get_subject_resolver)],
):
    """
    Check capabilities for the caller.

    Always answers 200; a denial is reported in the body with its reason.
    """
    decision = await authorize(
        resolver,
        token,
        guard_for(check.capabilities, check.combinator),
        check.project_id,
    )
    return PermissionCheckResponse(
        allowed=decision.allowed,
        subject=SubjectResponse.model_validate(decision.subject) if decision.subject else None,
        reason=decision.reason,
        error=decision.error,
    )
