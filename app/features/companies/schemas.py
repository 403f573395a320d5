"""
Pydantic schemas for company requests and responses.
"""
from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field


class CompanyUpdate(BaseModel):
    """Schema for updating company settings."""
    name: str | None = Field(None, min_length=1, max_length=255)
    inn: str | None = Field(None, max_length=20)
    phone: str | None = Field(None, max_length=20)
    email: str | None = Field(None, max_length=255)
    website: str | None = Field(None, max_length=255)
    address: str | None = Field(None, max_length=500)


class CompanyResponse(BaseModel):
    """Schema for company response."""
    id: str
    name: str
    inn: str | None = None
    phone: str | None = None
    email: str | None = None
    website: str | None = None
    address: str | None = None
    is_active: bool
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)
