"""
SQL-backed project membership store used by the subject resolver.
"""
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.features.permissions.exceptions import StoreUnavailable
from app.features.permissions.subject import MembershipRecord
from app.features.projects.models import Project, ProjectUser


class SqlMembershipStore:

    def __init__(self, db: AsyncSession):
        self.db = db

    async def find_membership(self, project_id: str, user_id: str) -> Optional[MembershipRecord]:
        """Membership row of `user_id` in `project_id` together with the project's creator."""
        try:
            result = await self.db.execute(
                select(ProjectUser.role, Project.creator_id)
                .join(Project, Project.id == ProjectUser.project_id)
                .where(
                    ProjectUser.project_id == project_id,
                    ProjectUser.user_id == user_id,
                )
            )
            row = result.one_or_none()
        except SQLAlchemyError as e:
            raise StoreUnavailable("project_users", str(e)) from e

        if row is None:
            return None
        return MembershipRecord(project_role=row.role, project_creator_id=row.creator_id)
