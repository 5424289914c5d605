"""Project and feedback models."""
import uuid
from typing import Any

from sqlalchemy import Boolean, DateTime, ForeignKey, String, Text, func
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column, relationship

from roadmapper.database import Base


def new_id() -> str:
    return uuid.uuid4().hex


class Project(Base):
    """Project entity. Read-only to roadmap generation."""

    __tablename__ = "projects"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=new_id)
    name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    # Ordered goals: [{"title": "...", "description": "...", "priority": "high", "status": "active"}, ...]
    goals: Mapped[list[dict[str, Any]]] = mapped_column(JSONB, nullable=False, default=list)
    created_at: Mapped[DateTime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[DateTime] = mapped_column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    feedback_items: Mapped[list["FeedbackItem"]] = relationship(
        "FeedbackItem",
        back_populates="project",
        cascade="all, delete-orphan",
    )


class FeedbackItem(Base):
    """Single piece of customer feedback."""

    __tablename__ = "feedback_items"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=new_id)
    project_id: Mapped[str] = mapped_column(
        ForeignKey("projects.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    content: Mapped[str] = mapped_column(Text, nullable=False)
    source: Mapped[str] = mapped_column(String(50), nullable=False, default="manual")
    category: Mapped[str] = mapped_column(String(50), nullable=False, default="suggestion")
    priority: Mapped[str] = mapped_column(String(20), nullable=False, default="medium")
    sentiment: Mapped[str] = mapped_column(String(20), nullable=False, default="neutral")
    is_ignored: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    extracted_keywords: Mapped[list[str]] = mapped_column(JSONB, nullable=False, default=list)
    created_at: Mapped[DateTime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    project: Mapped["Project"] = relationship("Project", back_populates="feedback_items")
