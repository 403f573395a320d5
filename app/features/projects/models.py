"""
Project and project membership models.

A membership row (project_users) is the only place a ProjectRole exists: it
is created when a user is added to a project and deleted with the membership.
"""
from datetime import datetime
from sqlalchemy import String, Text, ForeignKey, DateTime, Enum as SQLEnum, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.database.base import Base, TimestampMixin, generate_ulid
from app.features.permissions.enums import ProjectRole


class Project(Base, TimestampMixin):
    """Project owned by one company and created by one of its users."""
    __tablename__ = "projects"

    id: Mapped[str] = mapped_column(String(26), primary_key=True, default=generate_ulid)

    company_id: Mapped[str] = mapped_column(
        String(26),
        ForeignKey("companies.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    creator_id: Mapped[str | None] = mapped_column(
        String(26),
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        index=True
    )

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(String(30), nullable=False, default="active")  # active, archived

    # Client requisites, editable with canEditProjectClientRequisites
    client_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    client_requisites: Mapped[str | None] = mapped_column(Text, nullable=True)

    members: Mapped[list["ProjectUser"]] = relationship(
        "ProjectUser",
        back_populates="project",
        cascade="all, delete-orphan",
        lazy="selectin"
    )

    def __repr__(self) -> str:
        return f"<Project(id={self.id}, name={self.name!r}, company_id={self.company_id})>"


class ProjectUser(Base):
    """Membership of a user in a project, with the user's role in that project."""
    __tablename__ = "project_users"

    project_id: Mapped[str] = mapped_column(
        String(26),
        ForeignKey("projects.id", ondelete="CASCADE"),
        primary_key=True
    )
    user_id: Mapped[str] = mapped_column(
        String(26),
        ForeignKey("users.id", ondelete="CASCADE"),
        primary_key=True,
        index=True
    )
    role: Mapped[ProjectRole] = mapped_column(SQLEnum(ProjectRole), default=ProjectRole.MEMBER, nullable=False)
    joined_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )

    project: Mapped["Project"] = relationship("Project", back_populates="members")

    def __repr__(self) -> str:
        return f"<ProjectUser(project_id={self.project_id}, user_id={self.user_id}, role={self.role})>"
