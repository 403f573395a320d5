"""
Seed script to populate a demo company.

Creates:
- One company
- One user per tenant role (OWNER, ADMIN, MANAGER, USER)
- One project created by the MANAGER, with a member for every project role

Appwrite ids are placeholders ("demo-owner", ...); point them at real
Appwrite accounts to log in as these users.

Usage:
    uv run python -m scripts.seed_demo
"""
import asyncio
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database.engine import get_db, init_db
from app.features.companies.models import Company
from app.features.permissions.enums import ProjectRole, Role
from app.features.projects.models import Project, ProjectUser
from app.features.users.models import User
from app.utils import get_logger


log = get_logger(__name__)


DEMO_COMPANY = "Demo Construction LLC"

DEMO_USERS = [
    # (appwrite_id, email, name, role)
    ("demo-owner", "owner@demo.local", "Olga Owner", Role.OWNER),
    ("demo-admin", "admin@demo.local", "Artem Admin", Role.ADMIN),
    ("demo-manager", "manager@demo.local", "Maria Manager", Role.MANAGER),
    ("demo-user", "user@demo.local", "Ivan User", Role.USER),
    ("demo-viewer", "viewer@demo.local", "Vera Viewer", Role.USER),
]

# appwrite_id -> role inside the demo project
DEMO_MEMBERS = {
    "demo-manager": ProjectRole.OWNER,
    "demo-admin": ProjectRole.MANAGER,
    "demo-user": ProjectRole.MEMBER,
    "demo-viewer": ProjectRole.VIEWER,
}


async def seed_company(db: AsyncSession) -> Company:
    """Create the demo company unless it already exists."""
    result = await db.execute(select(Company).where(Company.name == DEMO_COMPANY))
    company = result.scalars().first()
    if company:
        log.debug(f"Company '{DEMO_COMPANY}' already exists, skipping")
        return company

    company = Company(name=DEMO_COMPANY, email="office@demo.local")
    db.add(company)
    await db.commit()
    await db.refresh(company)
    log.info(f"Created company: {company.name}")
    return company


async def seed_users(db: AsyncSession, company: Company) -> dict[str, User]:
    """
    Create the demo users.

    Returns:
        Dictionary mapping appwrite ids to User objects
    """
    users = {}
    for appwrite_id, email, name, role in DEMO_USERS:
        result = await db.execute(select(User).where(User.appwrite_id == appwrite_id))
        existing = result.scalars().first()
        if existing:
            log.debug(f"User '{email}' already exists, skipping")
            users[appwrite_id] = existing
            continue

        user = User(appwrite_id=appwrite_id, email=email, name=name, role=role, company_id=company.id)
        db.add(user)
        users[appwrite_id] = user
        log.info(f"Created user: {email} ({role.value})")

    await db.commit()
    for user in users.values():
        await db.refresh(user)
    return users


async def seed_project(db: AsyncSession, company: Company, users: dict[str, User]):
    """Create the demo project and its memberships."""
    result = await db.execute(
        select(Project).where(Project.company_id == company.id, Project.name == "Demo house")
    )
    if result.scalars().first():
        log.debug("Demo project already exists, skipping")
        return

    project = Project(
        name="Demo house",
        description="Two-storey house, turnkey",
        company_id=company.id,
        creator_id=users["demo-manager"].id,
        client_name="Petrov P.P.",
    )
    for appwrite_id, project_role in DEMO_MEMBERS.items():
        project.members.append(ProjectUser(user_id=users[appwrite_id].id, role=project_role))

    db.add(project)
    await db.commit()
    log.info(f"Created project '{project.name}' with {len(DEMO_MEMBERS)} members")


async def main():
    """Main function to seed the demo company."""
    log.info("Starting demo seeding...")

    log.info("Initializing database tables...")
    await init_db()

    async for db in get_db():
        try:
            company = await seed_company(db)
            users = await seed_users(db, company)
            await seed_project(db, company, users)
            log.info("Demo seeding completed successfully!")
        except Exception as e:
            log.error(f"Error seeding demo data: {e}", exc_info=True)
            await db.rollback()
            raise

        break  # Only use first session


if __name__ == "__main__":
    asyncio.run(main())
