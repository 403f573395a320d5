"""
SQL-backed user store used by the subject resolver.
"""
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.features.permissions.exceptions import StoreUnavailable
from app.features.permissions.subject import UserRecord
from app.features.users.models import User


class SqlUserStore:
    """
    Looks users up by their Appwrite id.

    Deactivated users are reported as absent, so they resolve as
    not authenticated.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def find_user(self, user_id: str) -> Optional[UserRecord]:
        try:
            result = await self.db.execute(
                select(User.id, User.role, User.company_id).where(
                    User.appwrite_id == user_id,
                    User.is_active == True,  # noqa: E712
                )
            )
            row = result.one_or_none()
        except SQLAlchemyError as e:
            raise StoreUnavailable("users", str(e)) from e

        if row is None:
            return None
        return UserRecord(id=row.id, role=row.role, company_id=row.company_id)
