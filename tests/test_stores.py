"""
Tests for the SQL-backed stores and permission-aware project queries.
"""
from unittest.mock import AsyncMock

import pytest
from sqlalchemy import delete
from sqlalchemy.exc import OperationalError

from app.features.permissions.enums import ProjectRole, Role
from app.features.permissions.exceptions import StoreUnavailable
from app.features.permissions.subject import Subject
from app.features.projects.models import ProjectUser
from app.features.projects.queries import user_can_access_project, visible_projects_query
from app.features.projects.stores import SqlMembershipStore
from app.features.users.stores import SqlUserStore


def broken_session() -> AsyncMock:
    db = AsyncMock()
    db.execute.side_effect = OperationalError("SELECT 1", {}, Exception("database is locked"))
    return db


class TestSqlUserStore:

    async def test_finds_active_user_by_appwrite_id(self, db, seed):
        record = await SqlUserStore(db).find_user("aw-manager")

        assert record.id == seed.users["manager"]
        assert record.role is Role.MANAGER
        assert record.company_id == seed.company_id

    async def test_inactive_user_is_absent(self, db, seed):
        assert await SqlUserStore(db).find_user("aw-inactive") is None

    async def test_unknown_user_is_absent(self, db, seed):
        assert await SqlUserStore(db).find_user("aw-nobody") is None

    async def test_database_error_is_store_unavailable(self):
        with pytest.raises(StoreUnavailable) as exc_info:
            await SqlUserStore(broken_session()).find_user("aw-owner")

        assert exc_info.value.store == "users"


class TestSqlMembershipStore:

    async def test_membership_with_creator(self, db, seed):
        record = await SqlMembershipStore(db).find_membership(seed.project_id, seed.users["member"])

        assert record.project_role is ProjectRole.MEMBER
        assert record.project_creator_id == seed.users["manager"]

    async def test_not_a_member(self, db, seed):
        assert await SqlMembershipStore(db).find_membership(seed.project_id, seed.users["outsider"]) is None

    async def test_unknown_project(self, db, seed):
        assert await SqlMembershipStore(db).find_membership("missing", seed.users["member"]) is None

    async def test_database_error_is_store_unavailable(self):
        with pytest.raises(StoreUnavailable):
            await SqlMembershipStore(broken_session()).find_membership("p1", "u1")


class TestVisibleProjects:

    def subject(self, seed, key: str, role: Role) -> Subject:
        return Subject(id=seed.users[key], company_id=seed.company_id, role=role)

    async def names(self, db, subject: Subject) -> set[str]:
        result = await db.execute(visible_projects_query(subject))
        return {project.name for project in result.scalars().all()}

    @pytest.mark.parametrize("key,role", [("owner", Role.OWNER), ("admin", Role.ADMIN)])
    async def test_company_wide_roles_see_all_company_projects(self, db, seed, key, role):
        assert await self.names(db, self.subject(seed, key, role)) == {"Bridge", "HQ"}

    @pytest.mark.parametrize("key,role", [
        ("manager", Role.MANAGER),
        ("lead", Role.MANAGER),
        ("member", Role.USER),
        ("viewer", Role.USER),
    ])
    async def test_members_see_their_projects(self, db, seed, key, role):
        assert await self.names(db, self.subject(seed, key, role)) == {"Bridge"}

    async def test_outsider_sees_nothing(self, db, seed):
        assert await self.names(db, self.subject(seed, "outsider", Role.USER)) == set()

    async def test_can_access_single_project(self, db, seed):
        member = self.subject(seed, "member", Role.USER)
        owner = self.subject(seed, "owner", Role.OWNER)

        assert await user_can_access_project(db, member, seed.project_id) is True
        assert await user_can_access_project(db, member, seed.owner_project_id) is False
        assert await user_can_access_project(db, owner, seed.owner_project_id) is True

    async def test_other_company_projects_are_never_visible(self, db, seed):
        owner = self.subject(seed, "owner", Role.OWNER)
        assert await user_can_access_project(db, owner, seed.other_project_id) is False

    async def test_creator_needs_membership(self, db, seed):
        manager = self.subject(seed, "manager", Role.MANAGER)
        await db.execute(
            delete(ProjectUser).where(
                ProjectUser.project_id == seed.project_id,
                ProjectUser.user_id == manager.id,
            )
        )
        await db.commit()

        assert await self.names(db, manager) == set()
        assert await user_can_access_project(db, manager, seed.project_id) is False
