"""Roadmap schemas: the persisted roadmap document and its request/response shapes."""
from datetime import date, datetime, timezone
from enum import Enum
from typing import Literal, get_args

from pydantic import Field

from roadmapper.errors import NotFoundError
from roadmapper.schemas.common import CamelModel, Priority
from roadmapper.schemas.task import TaskResponse

RoadmapType = Literal["strategic-only", "customer-only", "balanced", "custom"]
TimeHorizon = Literal["quarter", "half-year", "year", "multi-year"]
ItemCategory = Literal["strategic", "customer-driven", "maintenance", "innovation"]
ItemStatus = Literal["proposed", "approved", "in-progress", "completed", "cancelled"]
RiskLevel = Literal["low", "medium", "high"]
DurationUnit = Literal["days", "weeks", "months"]

ROADMAP_TYPES: tuple[str, ...] = get_args(RoadmapType)
TIME_HORIZONS: tuple[str, ...] = get_args(TimeHorizon)
ITEM_CATEGORIES: tuple[str, ...] = get_args(ItemCategory)
ITEM_STATUSES: tuple[str, ...] = get_args(ItemStatus)
RISK_LEVELS: tuple[str, ...] = get_args(RiskLevel)
DURATION_UNITS: tuple[str, ...] = get_args(DurationUnit)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class GeneratedBy(str, Enum):
    """Which generation strategy produced a roadmap draft."""

    AI = "ai"
    FALLBACK = "fallback"


class AllocationStrategy(CamelModel):
    strategic: float = Field(60, ge=0, le=100)
    customer_driven: float = Field(30, ge=0, le=100)
    maintenance: float = Field(10, ge=0, le=100)

    def total(self) -> float:
        return self.strategic + self.customer_driven + self.maintenance


class EstimatedDuration(CamelModel):
    value: float = Field(0, ge=0)
    unit: DurationUnit = "weeks"


class Timeframe(CamelModel):
    quarter: str | None = None
    start_date: date | None = None
    end_date: date | None = None
    estimated_duration: EstimatedDuration | None = None


class ResourceAllocation(CamelModel):
    percentage: float = Field(0, ge=0, le=100)
    team_members: int | None = Field(None, ge=0)
    estimated_cost: float | None = Field(None, ge=0)


class RelatedFeedback(CamelModel):
    feedback_id: str | None = None
    relevance_score: float | None = Field(None, ge=0, le=10)
    customer_quotes: list[str] = []


class BusinessJustification(CamelModel):
    strategic_alignment: float | None = Field(None, ge=0, le=10)
    customer_impact: float | None = Field(None, ge=0, le=10)
    revenue_impact: float | None = Field(None, ge=0, le=10)
    risk_level: RiskLevel = "medium"


class RoadmapItemCreate(CamelModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: str | None = Field(None, max_length=1000)
    category: ItemCategory = "strategic"
    priority: Priority = "medium"
    timeframe: Timeframe = Field(default_factory=Timeframe)
    resource_allocation: ResourceAllocation = Field(default_factory=ResourceAllocation)
    dependencies: list[str] = []
    related_feedback: list[RelatedFeedback] = []
    business_justification: BusinessJustification = Field(default_factory=BusinessJustification)
    success_metrics: list[str] = []
    status: ItemStatus = "proposed"


class RoadmapItem(RoadmapItemCreate):
    """A roadmap item as stored inside its roadmap. Ids are assigned on persistence."""

    id: str | None = None
    task_id: str | None = None


class RoadmapItemUpdate(CamelModel):
    title: str | None = Field(None, min_length=1, max_length=200)
    description: str | None = Field(None, max_length=1000)
    category: ItemCategory | None = None
    priority: Priority | None = None
    timeframe: Timeframe | None = None
    resource_allocation: ResourceAllocation | None = None
    dependencies: list[str] | None = None
    related_feedback: list[RelatedFeedback] | None = None
    business_justification: BusinessJustification | None = None
    success_metrics: list[str] | None = None
    status: ItemStatus | None = None


class GenerationParameters(CamelModel):
    name: str = ""
    description: str = ""
    time_horizon: TimeHorizon = "quarter"
    allocation_type: RoadmapType = "balanced"
    focus_areas: list[str] = []
    constraints: list[str] = []


class GenerationContext(CamelModel):
    user_query: str | None = None
    ai_model: str | None = None
    generated_by: GeneratedBy | None = None
    fallback_reason: str | None = None
    generation_time: datetime = Field(default_factory=_utcnow)
    parameters: GenerationParameters = Field(default_factory=GenerationParameters)


class RoadmapAnalytics(CamelModel):
    total_items: int = 0
    completion_rate: float = 0
    risk_score: int = 5
    customer_satisfaction_potential: int = 5


class RoadmapDocument(CamelModel):
    """The roadmap aggregate. Items are owned by, and only mutated through, the roadmap."""

    id: str | None = None
    project_id: str
    name: str = Field(..., min_length=1, max_length=200)
    description: str | None = None
    type: RoadmapType = "balanced"
    time_horizon: TimeHorizon = "quarter"
    allocation_strategy: AllocationStrategy = Field(default_factory=AllocationStrategy)
    items: list[RoadmapItem] = []
    generation_context: GenerationContext | None = None
    analytics: RoadmapAnalytics = Field(default_factory=RoadmapAnalytics)
    version: int = 1
    is_active: bool = True
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)

    def _index_of(self, item_id: str) -> int:
        for index, item in enumerate(self.items):
            if item.id == item_id:
                return index
        raise NotFoundError("Roadmap item not found")

    def get_item(self, item_id: str) -> RoadmapItem:
        return self.items[self._index_of(item_id)]

    def replace_item(self, item_id: str, item: RoadmapItem) -> None:
        self.items[self._index_of(item_id)] = item

    def remove_item(self, item_id: str) -> RoadmapItem:
        return self.items.pop(self._index_of(item_id))


class GenerateRoadmapRequest(CamelModel):
    # Required fields are checked by the service so the caller gets a descriptive 400
    project_id: str | None = None
    name: str | None = Field(None, max_length=200)
    description: str = ""
    type: RoadmapType = "balanced"
    time_horizon: TimeHorizon = "quarter"
    custom_allocation: AllocationStrategy | None = None
    focus_areas: list[str] = []
    constraints: list[str] = []


class CreateRoadmapRequest(CamelModel):
    project_id: str | None = None
    name: str | None = Field(None, max_length=200)
    description: str | None = None
    type: RoadmapType = "custom"
    time_horizon: TimeHorizon = "quarter"
    allocation_strategy: AllocationStrategy | None = None
    items: list[RoadmapItemCreate] = []


class RoadmapUpdate(CamelModel):
    name: str | None = Field(None, min_length=1, max_length=200)
    description: str | None = None
    type: RoadmapType | None = None
    time_horizon: TimeHorizon | None = None
    allocation_strategy: AllocationStrategy | None = None
    items: list[RoadmapItem] | None = None


class GeneratedRoadmapResponse(RoadmapDocument):
    rationale: str


class ConvertToTasksRequest(CamelModel):
    item_ids: list[str] | None = None


class ConvertToTasksResponse(CamelModel):
    roadmap: RoadmapDocument
    converted_tasks: list[TaskResponse]


class Pagination(CamelModel):
    current: int
    pages: int
    total: int


class RoadmapListResponse(CamelModel):
    data: list[RoadmapDocument]
    pagination: Pagination


class TimelineEntry(CamelModel):
    id: str | None
    title: str
    priority: Priority
    category: ItemCategory
    status: ItemStatus


class TimelineSummary(CamelModel):
    total_items: int = 0
    completed_items: int = 0
    in_progress_items: int = 0
    proposed_items: int = 0


class TimelinePeriod(CamelModel):
    items: list[TimelineEntry] = []
    summary: TimelineSummary = Field(default_factory=TimelineSummary)


class RoadmapTimelineResponse(CamelModel):
    roadmap: RoadmapDocument
    timeline: dict[str, TimelinePeriod]
    analytics: RoadmapAnalytics


class ProjectRoadmapAnalytics(CamelModel):
    total_roadmaps: int = 0
    by_type: dict[str, int] = {}
    by_time_horizon: dict[str, int] = {}
    average_completion_rate: float = 0
    average_risk_score: float = 0
    average_customer_satisfaction_potential: float = 0
    allocation_trends: AllocationStrategy = Field(
        default_factory=lambda: AllocationStrategy(strategic=0, customer_driven=0, maintenance=0)
    )
