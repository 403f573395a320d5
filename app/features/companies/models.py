"""
Company model.

A company is the tenant: every user, project, task, document and finance
entry belongs to exactly one company.
"""
from sqlalchemy import String, Boolean
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.database.base import Base, TimestampMixin, generate_ulid


class Company(Base, TimestampMixin):
    """Company (tenant) with its contact details and settings."""
    __tablename__ = "companies"

    id: Mapped[str] = mapped_column(String(26), primary_key=True, default=generate_ulid)

    name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    inn: Mapped[str | None] = mapped_column(String(20), unique=True, nullable=True)  # tax id

    phone: Mapped[str | None] = mapped_column(String(20), nullable=True)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    website: Mapped[str | None] = mapped_column(String(255), nullable=True)
    address: Mapped[str | None] = mapped_column(String(500), nullable=True)

    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    users: Mapped[list["User"]] = relationship(  # type: ignore
        "User",
        back_populates="company",
        lazy="selectin"
    )

    def __repr__(self) -> str:
        return f"<Company(id={self.id}, name={self.name!r})>"
