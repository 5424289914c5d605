"""Task model."""
from typing import Any

from sqlalchemy import DateTime, ForeignKey, String, Text, func
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from roadmapper.database import Base
from roadmapper.models.project import new_id


class Task(Base):
    """Tracked task, optionally created from a roadmap item."""

    __tablename__ = "tasks"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=new_id)
    project_id: Mapped[str] = mapped_column(
        ForeignKey("projects.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    category: Mapped[str] = mapped_column(String(20), nullable=False, default="feature")
    priority: Mapped[str] = mapped_column(String(20), nullable=False, default="medium")
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="backlog")
    estimated_effort: Mapped[dict[str, Any] | None] = mapped_column(JSONB, nullable=True)
    timeline: Mapped[dict[str, Any]] = mapped_column(JSONB, nullable=False, default=dict)
    business_value: Mapped[dict[str, Any]] = mapped_column(JSONB, nullable=False, default=dict)
    acceptance_criteria: Mapped[list[str]] = mapped_column(JSONB, nullable=False, default=list)
    tags: Mapped[list[str]] = mapped_column(JSONB, nullable=False, default=list)
    # Provenance: weak references back to the roadmap item this task came from
    roadmap_id: Mapped[str | None] = mapped_column(String(32), nullable=True)
    roadmap_item_id: Mapped[str | None] = mapped_column(String(32), nullable=True)
    created_at: Mapped[DateTime] = mapped_column(DateTime(timezone=True), server_default=func.now())
