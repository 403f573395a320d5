"""
User feature routes.

All routes are scoped to the caller's company.
"""
from datetime import datetime, timezone
from typing import Annotated
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database.engine import get_db
from app.features.permissions.dependencies import get_current_subject, require_permission
from app.features.permissions.enums import Capability, Role
from app.features.permissions.evaluator import has_permission
from app.features.permissions.exceptions import StoreUnavailable
from app.features.permissions.subject import Subject
from app.features.users.auth import get_appwrite_user
from app.features.users.dependencies import get_company_user
from app.features.users.models import User
from app.features.users.schemas import (
    UserCreate,
    UserPublic,
    UserResponse,
    UserRoleUpdate,
    UserUpdate,
)
from app.utils import get_logger


log = get_logger(__name__)
router = APIRouter(tags=["users"])


@router.get("/me", response_model=UserResponse)
async def get_current_user_profile(
    subject: Annotated[Subject, Depends(get_current_subject)],
    db: Annotated[AsyncSession, Depends(get_db)]
):
    """Get current authenticated user's profile."""
    user = await get_company_user(subject.id, subject.company_id, db)
    user.last_login_at = datetime.now(timezone.utc)
    await db.commit()
    await db.refresh(user)
    return user


@router.patch("/me", response_model=UserResponse)
async def update_current_user_profile(
    update_data: UserUpdate,
    subject: Annotated[Subject, Depends(get_current_subject)],
    db: Annotated[AsyncSession, Depends(get_db)]
):
    """Update current user's profile."""
    user = await get_company_user(subject.id, subject.company_id, db)
    if update_data.name is not None:
        user.name = update_data.name
    if update_data.avatar_url is not None:
        user.avatar_url = update_data.avatar_url

    await db.commit()
    await db.refresh(user)
    return user


@router.get("/", response_model=list[UserPublic])
async def list_users(
    subject: Annotated[Subject, Depends(require_permission(Capability.MANAGE_USERS))],
    db: Annotated[AsyncSession, Depends(get_db)],
    skip: int = 0,
    limit: int = 50
):
    """List active users of the caller's company."""
    result = await db.execute(
        select(User)
        .where(User.company_id == subject.company_id, User.is_active == True)  # noqa: E712
        .order_by(User.name)
        .offset(skip)
        .limit(limit)
    )
    return result.scalars().all()


@router.post("/", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def create_user(
    user_data: UserCreate,
    subject: Annotated[Subject, Depends(require_permission(Capability.CREATE_USERS))],
    db: Annotated[AsyncSession, Depends(get_db)]
):
    """
    Add an existing Appwrite account to the caller's company.

    Creating another OWNER additionally requires canChangeUserRoles.
    """
    if user_data.role == Role.OWNER and not has_permission(subject, Capability.CHANGE_USER_ROLES):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="insufficient permissions"
        )

    try:
        appwrite_user = await get_appwrite_user(user_data.appwrite_id)
    except StoreUnavailable:
        log.exception(f"Appwrite lookup failed for {user_data.appwrite_id}")
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Could not reach the identity provider"
        )

    if appwrite_user is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Unknown Appwrite user"
        )

    user = User(
        appwrite_id=user_data.appwrite_id,
        email=appwrite_user["email"],
        name=user_data.name or appwrite_user["name"] or "Unknown",
        company_id=subject.company_id,
        role=user_data.role,
    )
    db.add(user)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="User already exists"
        )
    await db.refresh(user)
    log.info(f"User {subject.id} added user {user.id} as {user.role.value}")
    return user


@router.patch("/{user_id}/role", response_model=UserResponse)
async def change_user_role(
    user_id: str,
    role_update: UserRoleUpdate,
    subject: Annotated[Subject, Depends(require_permission(Capability.CHANGE_USER_ROLES))],
    db: Annotated[AsyncSession, Depends(get_db)]
):
    """Change a user's tenant-wide role."""
    user = await get_company_user(user_id, subject.company_id, db)

    # Prevent self-demotion
    if user.id == subject.id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Cannot modify your own role"
        )

    previous = user.role
    user.role = role_update.role
    await db.commit()
    await db.refresh(user)
    log.info(f"User {subject.id} changed role of {user.id}: {previous.value} -> {user.role.value}")
    return user


@router.delete("/{user_id}")
async def deactivate_user(
    user_id: str,
    subject: Annotated[Subject, Depends(require_permission(Capability.DELETE_USERS))],
    db: Annotated[AsyncSession, Depends(get_db)]
):
    """Deactivate a user account."""
    user = await get_company_user(user_id, subject.company_id, db)

    # Prevent self-deactivation
    if user.id == subject.id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Cannot deactivate your own account"
        )

    user.is_active = False
    await db.commit()

    return {"message": "User deactivated successfully"}
