"""
Pydantic schemas for projects and project membership.
"""
from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field

from app.features.permissions.enums import ProjectRole


class ProjectBase(BaseModel):
    """Base project schema."""
    name: str = Field(..., min_length=1, max_length=255)
    description: str | None = Field(None, max_length=5000)


class ProjectCreate(ProjectBase):
    """Schema for creating a project. The creator becomes its OWNER member."""
    client_name: str | None = Field(None, max_length=255)
    client_requisites: str | None = Field(None, max_length=5000)


class ProjectUpdate(BaseModel):
    """Schema for updating a project."""
    name: str | None = Field(None, min_length=1, max_length=255)
    description: str | None = Field(None, max_length=5000)
    status: str | None = Field(None, pattern="^(active|archived)$")


class ClientRequisitesUpdate(BaseModel):
    """Schema for updating a project's client requisites."""
    client_name: str | None = Field(None, max_length=255)
    client_requisites: str | None = Field(None, max_length=5000)


class ProjectResponse(ProjectBase):
    """Schema for project response."""
    id: str
    company_id: str
    creator_id: str | None
    status: str
    client_name: str | None = None
    client_requisites: str | None = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ProjectMemberCreate(BaseModel):
    """Schema for adding a user of the same company to a project."""
    user_id: str = Field(..., description="User ID")
    role: ProjectRole = Field(ProjectRole.MEMBER, description="Role inside the project")


class ProjectMemberResponse(BaseModel):
    """Schema for a project membership."""
    project_id: str
    user_id: str
    role: ProjectRole
    joined_at: datetime

    model_config = ConfigDict(from_attributes=True)
