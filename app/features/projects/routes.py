"""
Project routes.

Project-scoped routes pass `project_id` to the permission dependency, so
project visibility is checked before the route's capability.
"""
from typing import Annotated, Optional
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database.engine import get_db
from app.features.permissions.dependencies import require_permission
from app.features.permissions.enums import Capability, ProjectRole
from app.features.permissions.subject import Subject
from app.features.projects.models import Project, ProjectUser
from app.features.projects.queries import visible_projects_query
from app.features.projects.schemas import (
    ClientRequisitesUpdate,
    ProjectCreate,
    ProjectMemberCreate,
    ProjectMemberResponse,
    ProjectResponse,
    ProjectUpdate,
)
from app.features.users.dependencies import get_company_user
from app.utils import get_logger


log = get_logger(__name__)
router = APIRouter()


async def get_company_project(project_id: str, subject: Subject, db: AsyncSession) -> Project:
    """
    Load a project of the subject's company or raise 404.

    Projects of other companies are reported as not found.
    """
    result = await db.execute(
        select(Project).where(Project.id == project_id, Project.company_id == subject.company_id)
    )
    project = result.scalar_one_or_none()

    if project is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Project not found")

    return project


@router.get("", response_model=list[ProjectResponse])
async def list_projects(
    subject: Annotated[Subject, Depends(require_permission(Capability.VIEW_PROJECTS))],
    db: Annotated[AsyncSession, Depends(get_db)],
    project_status: Optional[str] = None,
    skip: int = 0,
    limit: int = 100
):
    """List the projects visible to the caller."""
    stmt = visible_projects_query(subject)
    if project_status:
        stmt = stmt.where(Project.status == project_status)

    stmt = stmt.order_by(Project.created_at.desc()).offset(skip).limit(limit)
    result = await db.execute(stmt)
    return result.scalars().all()


@router.post("", response_model=ProjectResponse, status_code=status.HTTP_201_CREATED)
async def create_project(
    project_data: ProjectCreate,
    subject: Annotated[Subject, Depends(require_permission(Capability.CREATE_PROJECTS))],
    db: Annotated[AsyncSession, Depends(get_db)]
):
    """Create a project in the caller's company; the caller becomes its OWNER member."""
    project = Project(
        **project_data.model_dump(),
        company_id=subject.company_id,
        creator_id=subject.id,
    )
    project.members.append(ProjectUser(user_id=subject.id, role=ProjectRole.OWNER))
    db.add(project)
    await db.commit()
    await db.refresh(project)
    log.info(f"User {subject.id} created project {project.id}")
    return project


@router.get("/{project_id}", response_model=ProjectResponse)
async def get_project(
    project_id: str,
    subject: Annotated[Subject, Depends(require_permission(Capability.VIEW_PROJECTS, "project_id"))],
    db: Annotated[AsyncSession, Depends(get_db)]
):
    """Get a project."""
    return await get_company_project(project_id, subject, db)


@router.patch("/{project_id}", response_model=ProjectResponse)
async def update_project(
    project_id: str,
    update_data: ProjectUpdate,
    subject: Annotated[Subject, Depends(require_permission(Capability.EDIT_PROJECTS, "project_id"))],
    db: Annotated[AsyncSession, Depends(get_db)]
):
    """Update a project's name, description or status."""
    project = await get_company_project(project_id, subject, db)

    for key, value in update_data.model_dump(exclude_unset=True).items():
        setattr(project, key, value)

    await db.commit()
    await db.refresh(project)
    return project


@router.patch("/{project_id}/client-requisites", response_model=ProjectResponse)
async def update_client_requisites(
    project_id: str,
    update_data: ClientRequisitesUpdate,
    subject: Annotated[
        Subject,
        Depends(require_permission(Capability.EDIT_PROJECT_CLIENT_REQUISITES, "project_id"))
    ],
    db: Annotated[AsyncSession, Depends(get_db)]
):
    """Update the client requisites of a project."""
    project = await get_company_project(project_id, subject, db)

    for key, value in update_data.model_dump(exclude_unset=True).items():
        setattr(project, key, value)

    await db.commit()
    await db.refresh(project)
    return project


@router.delete("/{project_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_project(
    project_id: str,
    subject: Annotated[Subject, Depends(require_permission(Capability.DELETE_PROJECTS, "project_id"))],
    db: Annotated[AsyncSession, Depends(get_db)]
):
    """Delete a project and its memberships."""
    project = await get_company_project(project_id, subject, db)
    await db.delete(project)
    await db.commit()
    log.info(f"User {subject.id} deleted project {project_id}")


# ============================================================================
# Members
# ============================================================================

@router.get("/{project_id}/members", response_model=list[ProjectMemberResponse])
async def list_project_members(
    project_id: str,
    subject: Annotated[Subject, Depends(require_permission(Capability.VIEW_PROJECTS, "project_id"))],
    db: Annotated[AsyncSession, Depends(get_db)]
):
    """List the members of a project."""
    project = await get_company_project(project_id, subject, db)
    return project.members


@router.post(
    "/{project_id}/members",
    response_model=ProjectMemberResponse,
    status_code=status.HTTP_201_CREATED
)
async def add_project_member(
    project_id: str,
    member_data: ProjectMemberCreate,
    subject: Annotated[
        Subject,
        Depends(require_permission(Capability.MANAGE_PROJECT_MEMBERS, "project_id"))
    ],
    db: Annotated[AsyncSession, Depends(get_db)]
):
    """Add a user of the caller's company to a project."""
    project = await get_company_project(project_id, subject, db)
    await get_company_user(member_data.user_id, subject.company_id, db)

    if any(member.user_id == member_data.user_id for member in project.members):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="User is already a member of this project"
        )

    membership = ProjectUser(project_id=project_id, user_id=member_data.user_id, role=member_data.role)
    db.add(membership)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="User is already a member of this project"
        )
    await db.refresh(membership)
    log.info(f"User {subject.id} added {member_data.user_id} to project {project_id} as {member_data.role.value}")
    return membership


@router.delete("/{project_id}/members/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_project_member(
    project_id: str,
    user_id: str,
    subject: Annotated[
        Subject,
        Depends(require_permission(Capability.MANAGE_PROJECT_MEMBERS, "project_id"))
    ],
    db: Annotated[AsyncSession, Depends(get_db)]
):
    """Remove a user from a project. Their project role goes with the membership."""
    await get_company_project(project_id, subject, db)

    result = await db.execute(
        select(ProjectUser).where(ProjectUser.project_id == project_id, ProjectUser.user_id == user_id)
    )
    membership = result.scalar_one_or_none()
    if membership is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Membership not found")

    await db.delete(membership)
    await db.commit()
