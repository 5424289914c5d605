"""Roadmap model."""
from typing import Any

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, String, Text, func
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from roadmapper.database import Base
from roadmapper.models.project import new_id


class Roadmap(Base):
    """Roadmap aggregate. Items and sub-documents are stored in the same camelCase shape the API returns."""

    __tablename__ = "roadmaps"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=new_id)
    project_id: Mapped[str] = mapped_column(
        ForeignKey("projects.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    type: Mapped[str] = mapped_column(String(20), nullable=False, default="balanced", index=True)
    time_horizon: Mapped[str] = mapped_column(String(20), nullable=False, default="quarter")
    # {"strategic": 60, "customerDriven": 30, "maintenance": 10}
    allocation_strategy: Mapped[dict[str, Any]] = mapped_column(JSONB, nullable=False)
    items: Mapped[list[dict[str, Any]]] = mapped_column(JSONB, nullable=False, default=list)
    generation_context: Mapped[dict[str, Any] | None] = mapped_column(JSONB, nullable=True)
    analytics: Mapped[dict[str, Any]] = mapped_column(JSONB, nullable=False, default=dict)
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, index=True)
    created_at: Mapped[DateTime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[DateTime] = mapped_column(DateTime(timezone=True), server_default=func.now())
