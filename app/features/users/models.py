"""
User model with ULID primary keys.

Every user belongs to exactly one company and carries one tenant-wide Role.
"""
from datetime import datetime
from sqlalchemy import String, Boolean, ForeignKey, Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.database.base import Base, TimestampMixin, generate_ulid
from app.features.permissions.enums import Role


class User(Base, TimestampMixin):
    """
    User model representing authenticated users.

    `role` only changes through the role-change route, which requires
    canChangeUserRoles.
    """
    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(26), primary_key=True, default=generate_ulid)

    # Appwrite user ID (for linking with Appwrite authentication)
    appwrite_id: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)

    # User information
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    avatar_url: Mapped[str | None] = mapped_column(String(500), nullable=True)

    # Tenant and tenant-wide role
    company_id: Mapped[str] = mapped_column(
        String(26),
        ForeignKey("companies.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    role: Mapped[Role] = mapped_column(SQLEnum(Role), default=Role.USER, nullable=False)

    # Deactivated users no longer resolve to a subject
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    last_login_at: Mapped[datetime | None] = mapped_column(nullable=True)

    company: Mapped["Company"] = relationship(  # type: ignore
        "Company",
        back_populates="users",
        lazy="selectin"
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email={self.email!r}, role={self.role})>"
