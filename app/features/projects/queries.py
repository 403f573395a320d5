"""
Permission-aware project queries.

These apply the project visibility rule inside the database so list routes
do not need to filter in memory.
"""
from sqlalchemy import Select, exists, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.features.permissions.enums import Role
from app.features.permissions.subject import Subject
from app.features.projects.models import Project, ProjectUser


def visible_projects_query(subject: Subject) -> Select:
    """
    Projects of the subject's company that the subject may see.

    OWNER and ADMIN see every company project; MANAGER and USER see projects
    they are members of. A creator is a member from the moment the project is
    created, and loses visibility with that membership, matching the resolver
    which only marks the project owner when a membership row exists.
    """
    stmt = select(Project).where(Project.company_id == subject.company_id)

    if Role(subject.role) in (Role.OWNER, Role.ADMIN):
        return stmt

    is_member = exists().where(
        ProjectUser.project_id == Project.id,
        ProjectUser.user_id == subject.id,
    )
    return stmt.where(is_member)


async def user_can_access_project(db: AsyncSession, subject: Subject, project_id: str) -> bool:
    """True if the project exists in the subject's company and is visible to the subject."""
    stmt = visible_projects_query(subject).where(Project.id == project_id)
    result = await db.execute(select(stmt.exists()))
    return bool(result.scalar())
