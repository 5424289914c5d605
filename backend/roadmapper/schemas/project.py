"""Project and feedback schemas."""
from datetime import datetime
from typing import Literal

from pydantic import Field, field_validator

from roadmapper.schemas.common import CamelModel, Priority


class Goal(CamelModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: str | None = None
    priority: Priority = "medium"
    status: str = "active"


class ProjectCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: str = ""
    goals: list[Goal] = []


class ProjectResponse(CamelModel):
    id: str
    name: str
    description: str = ""
    goals: list[Goal] = []
    created_at: datetime | None = None


class FeedbackCreate(CamelModel):
    content: str = Field(..., min_length=1)
    source: str = "manual"
    category: str = "suggestion"
    priority: Priority = "medium"
    sentiment: Literal["positive", "neutral", "negative"] = "neutral"
    extracted_keywords: list[str] = []

    @field_validator("extracted_keywords")
    @classmethod
    def _dedupe_keywords(cls, value: list[str]) -> list[str]:
        # Keyword order matters for tie-breaking in context summaries
        return list(dict.fromkeys(k.strip().lower() for k in value if k and k.strip()))


class FeedbackUpdate(CamelModel):
    is_ignored: bool


class FeedbackItemResponse(CamelModel):
    id: str
    project_id: str
    content: str
    source: str = "manual"
    category: str = "suggestion"
    priority: Priority = "medium"
    sentiment: str = "neutral"
    is_ignored: bool = False
    extracted_keywords: list[str] = []
    created_at: datetime | None = None
