"""
Pydantic schemas for the permission endpoints.

Snapshots are for rendering only; every mutating route re-checks on the server.
"""
from typing import Dict, List, Optional
from pydantic import BaseModel, Field

from app.features.permissions.enums import Capability, Combinator, ProjectRole, Role
from app.features.permissions.exceptions import AuthErrorKind


class SubjectResponse(BaseModel):
    """Resolved subject as shown to clients."""
    id: str
    company_id: str
    role: Role
    project_id: Optional[str] = None
    project_role: Optional[ProjectRole] = None
    is_project_owner: Optional[bool] = None

    model_config = {"from_attributes": True}


class PermissionSnapshotResponse(BaseModel):
    """Effective permissions of the caller, optionally inside one project."""
    subject: SubjectResponse
    can_access_project: Optional[bool] = None
    permissions: Dict[str, bool] = Field(..., description="Capability name -> granted")
    navigation: List[str] = []


class PermissionCheckRequest(BaseModel):
    """Schema for checking capabilities for the caller."""
    capabilities: List[Capability] = Field(..., description="Capabilities to check")
    combinator: Combinator = Field(Combinator.ALL, description="all: every capability, any: at least one")
    project_id: Optional[str] = Field(None, description="Project context for the check")


class PermissionCheckResponse(BaseModel):
    """Schema for an authorization decision."""
    allowed: bool
    subject: Optional[SubjectResponse] = None
    reason: Optional[str] = None
    error: Optional[AuthErrorKind] = None

    model_config = {"from_attributes": True}
