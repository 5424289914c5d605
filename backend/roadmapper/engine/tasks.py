"""Roadmap item to task projection."""
from roadmapper.schemas.roadmap import RoadmapDocument, RoadmapItem
from roadmapper.schemas.task import BusinessValue, TaskCreate, TaskEffort, TaskTimeline

CATEGORY_TO_TASK = {
    "strategic": "feature",
    "customer-driven": "improvement",
    "maintenance": "maintenance",
    "innovation": "research",
}

PROVENANCE_TAG = "roadmap-generated"


def score_to_level(score: float | None) -> str:
    """0-10 score to high/medium/low. A missing score counts as low."""
    if score is None:
        return "low"
    if score >= 8:
        return "high"
    if score >= 5:
        return "medium"
    return "low"


def build_task(roadmap: RoadmapDocument, item: RoadmapItem) -> TaskCreate:
    timeframe = item.timeframe
    justification = item.business_justification
    effort = None
    if timeframe.estimated_duration is not None:
        effort = TaskEffort(
            value=timeframe.estimated_duration.value,
            unit=timeframe.estimated_duration.unit,
        )
    return TaskCreate(
        project_id=roadmap.project_id,
        title=item.title,
        description=item.description or "",
        category=CATEGORY_TO_TASK.get(item.category, "feature"),
        priority=item.priority,
        estimated_effort=effort,
        timeline=TaskTimeline(
            planned_start_date=timeframe.start_date,
            planned_end_date=timeframe.end_date,
        ),
        business_value=BusinessValue(
            customer_impact=score_to_level(justification.customer_impact),
            revenue_impact=score_to_level(justification.revenue_impact),
            strategic_alignment=justification.strategic_alignment,
        ),
        acceptance_criteria=list(item.success_metrics),
        tags=[item.category, PROVENANCE_TAG],
        roadmap_id=roadmap.id,
        roadmap_item_id=item.id,
    )
