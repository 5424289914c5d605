"""Task schemas."""
from datetime import date, datetime
from typing import Literal

from pydantic import Field

from roadmapper.schemas.common import CamelModel, Priority

TaskCategory = Literal["feature", "improvement", "maintenance", "research", "bug-fix"]
ImpactLevel = Literal["high", "medium", "low"]


class TaskEffort(CamelModel):
    value: float = 0
    unit: Literal["days", "weeks", "months"] = "weeks"


class TaskTimeline(CamelModel):
    planned_start_date: date | None = None
    planned_end_date: date | None = None


class BusinessValue(CamelModel):
    customer_impact: ImpactLevel | None = None
    revenue_impact: ImpactLevel | None = None
    strategic_alignment: float | None = None


class TaskCreate(CamelModel):
    project_id: str
    title: str = Field(..., min_length=1, max_length=200)
    description: str = ""
    category: TaskCategory = "feature"
    priority: Priority = "medium"
    status: Literal["backlog", "planned", "in-progress", "review", "completed", "cancelled"] = "backlog"
    estimated_effort: TaskEffort | None = None
    timeline: TaskTimeline = Field(default_factory=TaskTimeline)
    business_value: BusinessValue = Field(default_factory=BusinessValue)
    acceptance_criteria: list[str] = []
    tags: list[str] = []
    roadmap_id: str | None = None
    roadmap_item_id: str | None = None


class TaskResponse(TaskCreate):
    id: str
    created_at: datetime | None = None
