"""
Pydantic schemas for user-related requests and responses.
"""
from datetime import datetime
from pydantic import BaseModel, EmailStr, Field

from app.features.permissions.enums import Role


class UserCreate(BaseModel):
    """Schema for adding an existing Appwrite account to the company."""
    appwrite_id: str = Field(..., description="Appwrite user ID from authentication")
    role: Role = Field(Role.USER, description="Tenant-wide role")
    name: str | None = Field(None, min_length=1, max_length=255, description="Overrides the Appwrite name")


class UserUpdate(BaseModel):
    """Schema for updating the current user's profile."""
    name: str | None = Field(None, min_length=1, max_length=255)
    avatar_url: str | None = Field(None, max_length=500)


class UserRoleUpdate(BaseModel):
    """Schema for changing a user's tenant-wide role."""
    role: Role


class UserResponse(BaseModel):
    """Schema for user responses."""
    id: str
    email: EmailStr
    name: str
    avatar_url: str | None = None
    company_id: str
    role: Role
    is_active: bool
    last_login_at: datetime | None = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class UserPublic(BaseModel):
    """Public user information (limited fields)."""
    id: str
    name: str
    avatar_url: str | None = None
    role: Role

    model_config = {"from_attributes": True}
