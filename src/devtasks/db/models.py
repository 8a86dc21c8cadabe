"""SQLAlchemy ORM models — single source of truth for the database schema.

Learn: Declarative ORM mapping with SQLAlchemy 2.0 style (Mapped[] + mapped_column).
Three tables: users, projects, tasks.

Ownership is expressed with plain foreign keys only. There are no
relationship() back-references: "the project this task belongs to" is an
explicit query in the service layer, never a live object pointer.

Referential rules live in the schema:
- projects.owner_id → users.id       ON DELETE RESTRICT
- tasks.project_id → projects.id     ON DELETE CASCADE
- tasks.assigned_to_user_id → users  ON DELETE SET NULL
"""

import enum
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all models."""
    pass


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TaskStatus(str, enum.Enum):
    """The three workflow columns of the board."""

    TODO = "ToDo"
    IN_PROGRESS = "InProgress"
    DONE = "Done"


DEFAULT_TASK_STATUS = TaskStatus.TODO

# Field bounds shared by the ORM columns and the request schemas.
USER_NAME_MAX = 100
USER_EMAIL_MAX = 200
PROJECT_NAME_MAX = 200
TASK_TITLE_MAX = 300
TASK_DESCRIPTION_MAX = 2000

# Ids are 32-bit integer columns.
MAX_ID = 2**31 - 1


class User(Base):
    """A registered account. Email is unique and compared case-sensitively."""

    __tablename__ = "users"
    __table_args__ = (
        UniqueConstraint("email", name="uq_users_email"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(USER_NAME_MAX), nullable=False)
    email: Mapped[str] = mapped_column(String(USER_EMAIL_MAX), nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )


class Project(Base):
    """A project owned by exactly one user."""

    __tablename__ = "projects"
    __table_args__ = (
        Index("idx_projects_owner", "owner_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(PROJECT_NAME_MAX), nullable=False)
    owner_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="RESTRICT"), nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )


class Task(Base):
    """A unit of work inside a project.

    Learn: project_id is set at creation and never changes. Status is
    constrained at the DB level too, so a raw INSERT can't sneak in
    a value outside the three board columns.
    """

    __tablename__ = "tasks"
    __table_args__ = (
        Index("idx_tasks_project", "project_id"),
        Index("idx_tasks_assignee", "assigned_to_user_id"),
        CheckConstraint(
            "status IN ('ToDo', 'InProgress', 'Done')", name="ck_tasks_status"
        ),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(TASK_TITLE_MAX), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(
        String(TASK_DESCRIPTION_MAX), nullable=True
    )
    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=DEFAULT_TASK_STATUS.value,
        server_default=DEFAULT_TASK_STATUS.value,
    )
    project_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("projects.id", ondelete="CASCADE"), nullable=False
    )
    assigned_to_user_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
