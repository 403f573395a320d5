"""
Company settings routes.

A caller only ever sees their own company.
"""
from typing import Annotated
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database.engine import get_db
from app.features.companies.models import Company
from app.features.companies.schemas import CompanyResponse, CompanyUpdate
from app.features.permissions.dependencies import require_permission
from app.features.permissions.enums import Capability
from app.features.permissions.subject import Subject


router = APIRouter()


async def get_company(company_id: str, db: AsyncSession) -> Company:
    result = await db.execute(select(Company).where(Company.id == company_id))
    company = result.scalar_one_or_none()

    if company is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Company not found"
        )

    return company


@router.get("/current", response_model=CompanyResponse)
async def get_current_company(
    subject: Annotated[Subject, Depends(require_permission(Capability.VIEW_COMPANY_SETTINGS))],
    db: Annotated[AsyncSession, Depends(get_db)]
):
    """Get the caller's company settings."""
    return await get_company(subject.company_id, db)


@router.patch("/current", response_model=CompanyResponse)
async def update_current_company(
    update_data: CompanyUpdate,
    subject: Annotated[Subject, Depends(require_permission(Capability.EDIT_COMPANY_SETTINGS))],
    db: Annotated[AsyncSession, Depends(get_db)]
):
    """Update the caller's company settings."""
    company = await get_company(subject.company_id, db)

    for key, value in update_data.model_dump(exclude_unset=True).items():
        setattr(company, key, value)

    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Company with this INN already exists"
        )
    await db.refresh(company)
    return company
