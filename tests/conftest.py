"""
Shared fixtures: in-memory fakes for the identity provider and stores, an
in-memory SQLite database with a seeded company, and an HTTP client bound
to both.
"""
import asyncio
from dataclasses import dataclass, field
from typing import Annotated, Optional

import httpx
import pytest
from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from app.core.database.base import Base
from app.core.database.engine import get_db, import_models
from app.features.companies.models import Company
from app.features.permissions.dependencies import get_subject_resolver
from app.features.permissions.enums import ProjectRole, Role
from app.features.permissions.resolver import SubjectResolver
from app.features.permissions.subject import Identity, MembershipRecord, UserRecord
from app.features.projects.models import Project, ProjectUser
from app.features.projects.stores import SqlMembershipStore
from app.features.users.models import User
from app.features.users.stores import SqlUserStore


# ============================================================================
# In-memory collaborators
# ============================================================================

@dataclass
class FakeIdentityProvider:
    """Maps bearer tokens to identities."""
    tokens: dict[str, Identity] = field(default_factory=dict)
    error: Optional[Exception] = None
    delay: float = 0

    async def authenticate(self, credentials: Optional[str]) -> Optional[Identity]:
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error:
            raise self.error
        if not credentials:
            return None
        return self.tokens.get(credentials)


@dataclass
class FakeUserStore:
    users: dict[str, UserRecord] = field(default_factory=dict)
    error: Optional[Exception] = None
    delay: float = 0
    calls: int = 0

    async def find_user(self, user_id: str) -> Optional[UserRecord]:
        self.calls += 1
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error:
            raise self.error
        return self.users.get(user_id)


@dataclass
class FakeMembershipStore:
    memberships: dict[tuple[str, str], MembershipRecord] = field(default_factory=dict)
    error: Optional[Exception] = None
    delay: float = 0

    async def find_membership(self, project_id: str, user_id: str) -> Optional[MembershipRecord]:
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error:
            raise self.error
        return self.memberships.get((project_id, user_id))


@pytest.fixture
def identity_provider() -> FakeIdentityProvider:
    return FakeIdentityProvider(tokens={
        "token-owner": Identity(user_id="u-owner", email="owner@example.com"),
        "token-manager": Identity(user_id="u-manager", email="manager@example.com"),
        "token-user": Identity(user_id="u-user", email="user@example.com"),
        "token-deleted": Identity(user_id="u-deleted", email="gone@example.com"),
    })


@pytest.fixture
def user_store() -> FakeUserStore:
    return FakeUserStore(users={
        "u-owner": UserRecord(id="u-owner", role=Role.OWNER, company_id="c1"),
        "u-manager": UserRecord(id="u-manager", role=Role.MANAGER, company_id="c1"),
        "u-user": UserRecord(id="u-user", role=Role.USER, company_id="c1"),
    })


@pytest.fixture
def membership_store() -> FakeMembershipStore:
    return FakeMembershipStore(memberships={
        ("p1", "u-user"): MembershipRecord(project_role=ProjectRole.MEMBER, project_creator_id="u-manager"),
        ("p1", "u-manager"): MembershipRecord(project_role=ProjectRole.VIEWER, project_creator_id="u-owner"),
        ("p2", "u-user"): MembershipRecord(project_role=ProjectRole.OWNER, project_creator_id="u-user"),
    })


@pytest.fixture
def resolver(identity_provider, user_store, membership_store) -> SubjectResolver:
    return SubjectResolver(identity_provider, user_store, membership_store, lookup_timeout=1.0)


# ============================================================================
# Database
# ============================================================================

@pytest.fixture
async def session_factory():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    import_models()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    await engine.dispose()


@dataclass
class Seed:
    company_id: str
    other_company_id: str
    users: dict[str, str]
    project_id: str
    owner_project_id: str
    other_project_id: str


@pytest.fixture
async def seed(session_factory) -> Seed:
    """
    Company "Acme" with one user per role, plus a second company.

    Project "Bridge" is created by the manager; "HQ" by the owner.
    Memberships in Bridge: manager OWNER, member MEMBER, viewer VIEWER,
    lead (tenant MANAGER) VIEWER. "outsider" is a USER with no memberships.
    """
    async with session_factory() as db:
        acme = Company(name="Acme")
        globex = Company(name="Globex")
        db.add_all([acme, globex])
        await db.flush()

        specs = {
            # key: (appwrite_id, role, company, active)
            "owner": ("aw-owner", Role.OWNER, acme, True),
            "admin": ("aw-admin", Role.ADMIN, acme, True),
            "manager": ("aw-manager", Role.MANAGER, acme, True),
            "lead": ("aw-lead", Role.MANAGER, acme, True),
            "member": ("aw-member", Role.USER, acme, True),
            "viewer": ("aw-viewer", Role.USER, acme, True),
            "outsider": ("aw-outsider", Role.USER, acme, True),
            "inactive": ("aw-inactive", Role.USER, acme, False),
            "globex_owner": ("aw-globex-owner", Role.OWNER, globex, True),
        }
        users = {}
        for key, (appwrite_id, role, company, active) in specs.items():
            user = User(
                appwrite_id=appwrite_id,
                email=f"{key}@example.com",
                name=key.title(),
                role=role,
                company_id=company.id,
                is_active=active,
            )
            db.add(user)
            users[key] = user
        await db.flush()

        bridge = Project(name="Bridge", company_id=acme.id, creator_id=users["manager"].id)
        bridge.members.extend([
            ProjectUser(user_id=users["manager"].id, role=ProjectRole.OWNER),
            ProjectUser(user_id=users["member"].id, role=ProjectRole.MEMBER),
            ProjectUser(user_id=users["viewer"].id, role=ProjectRole.VIEWER),
            ProjectUser(user_id=users["lead"].id, role=ProjectRole.VIEWER),
        ])
        hq = Project(name="HQ", company_id=acme.id, creator_id=users["owner"].id)
        hq.members.append(ProjectUser(user_id=users["owner"].id, role=ProjectRole.OWNER))
        tower = Project(name="Tower", company_id=globex.id, creator_id=users["globex_owner"].id)
        db.add_all([bridge, hq, tower])
        await db.commit()

        return Seed(
            company_id=acme.id,
            other_company_id=globex.id,
            users={key: user.id for key, user in users.items()},
            project_id=bridge.id,
            owner_project_id=hq.id,
            other_project_id=tower.id,
        )


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


# ============================================================================
# HTTP client
# ============================================================================

@pytest.fixture
def http_identity_provider() -> FakeIdentityProvider:
    """Token "token-<key>" authenticates as the seeded user <key>."""
    keys = ["owner", "admin", "manager", "lead", "member", "viewer", "outsider", "inactive", "globex_owner"]
    tokens = {
        f"token-{key}": Identity(user_id=f"aw-{key.replace('_', '-')}", email=f"{key}@example.com")
        for key in keys
    }
    tokens["token-deleted"] = Identity(user_id="aw-deleted", email="deleted@example.com")
    return FakeIdentityProvider(tokens=tokens)


def override_dependencies(target_app, session_factory, identity_provider) -> None:
    """Point `get_db` at the test database and resolve subjects with `identity_provider`."""

    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    async def override_get_subject_resolver(
        db: Annotated[AsyncSession, Depends(get_db)]
    ) -> SubjectResolver:
        return SubjectResolver(identity_provider, SqlUserStore(db), SqlMembershipStore(db))

    target_app.dependency_overrides[get_db] = override_get_db
    target_app.dependency_overrides[get_subject_resolver] = override_get_subject_resolver


@pytest.fixture
async def client(session_factory, seed, http_identity_provider):
    from app.main import app

    override_dependencies(app, session_factory, http_identity_provider)

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as http_client:
        yield http_client

    app.dependency_overrides.clear()


def auth(key: str) -> dict[str, str]:
    return {"Authorization": f"Bearer token-{key}"}
