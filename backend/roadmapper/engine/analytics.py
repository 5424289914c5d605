"""Analytics engine - derived roadmap metrics, deterministic, Decimal rounding."""
from decimal import Decimal, ROUND_HALF_UP

from roadmapper.schemas.roadmap import (
    AllocationStrategy,
    ProjectRoadmapAnalytics,
    RoadmapAnalytics,
    RoadmapDocument,
    RoadmapItem,
    TimelineEntry,
    TimelinePeriod,
)

RISK_SCORES = {"low": 2, "medium": 5, "high": 8}
DEFAULT_CUSTOMER_IMPACT = 5


def _round(value: Decimal, places: int = 2) -> Decimal:
    """Round half-up to given decimal places."""
    quantize = Decimal(10) ** -places
    return value.quantize(quantize, rounding=ROUND_HALF_UP)


def _mean(values: list[Decimal]) -> Decimal:
    return sum(values, Decimal(0)) / Decimal(len(values))


def recompute(items: list[RoadmapItem]) -> RoadmapAnalytics:
    """Derive analytics from the item list. Pure: same items, same result."""
    total = len(items)
    if total == 0:
        return RoadmapAnalytics(
            total_items=0,
            completion_rate=0,
            risk_score=5,
            customer_satisfaction_potential=5,
        )

    completed = sum(1 for item in items if item.status == "completed")
    risks = [Decimal(RISK_SCORES[item.business_justification.risk_level]) for item in items]
    impacts = [
        Decimal(str(item.business_justification.customer_impact))
        if item.business_justification.customer_impact is not None
        else Decimal(DEFAULT_CUSTOMER_IMPACT)
        for item in items
    ]
    return RoadmapAnalytics(
        total_items=total,
        completion_rate=completed * 100 / total,
        risk_score=int(_round(_mean(risks), 0)),
        customer_satisfaction_potential=int(_round(_mean(impacts), 0)),
    )


def build_timeline(roadmap: RoadmapDocument) -> dict[str, TimelinePeriod]:
    """Group items by quarter label in order of first appearance. Items without a quarter are left out."""
    timeline: dict[str, TimelinePeriod] = {}
    for item in roadmap.items:
        if not item.timeframe.quarter:
            continue
        period = timeline.setdefault(item.timeframe.quarter, TimelinePeriod())
        period.items.append(
            TimelineEntry(
                id=item.id,
                title=item.title,
                priority=item.priority,
                category=item.category,
                status=item.status,
            )
        )
        summary = period.summary
        summary.total_items += 1
        if item.status == "completed":
            summary.completed_items += 1
        elif item.status == "in-progress":
            summary.in_progress_items += 1
        elif item.status == "proposed":
            summary.proposed_items += 1
    return timeline


def summarize_roadmaps(roadmaps: list[RoadmapDocument]) -> ProjectRoadmapAnalytics:
    """Aggregate analytics across a project's roadmaps."""
    if not roadmaps:
        return ProjectRoadmapAnalytics()

    by_type: dict[str, int] = {}
    by_time_horizon: dict[str, int] = {}
    for roadmap in roadmaps:
        by_type[roadmap.type] = by_type.get(roadmap.type, 0) + 1
        by_time_horizon[roadmap.time_horizon] = by_time_horizon.get(roadmap.time_horizon, 0) + 1

    def average(values: list) -> float:
        return float(_round(_mean([Decimal(str(v)) for v in values])))

    return ProjectRoadmapAnalytics(
        total_roadmaps=len(roadmaps),
        by_type=by_type,
        by_time_horizon=by_time_horizon,
        average_completion_rate=average([r.analytics.completion_rate for r in roadmaps]),
        average_risk_score=average([r.analytics.risk_score for r in roadmaps]),
        average_customer_satisfaction_potential=average(
            [r.analytics.customer_satisfaction_potential for r in roadmaps]
        ),
        allocation_trends=AllocationStrategy(
            strategic=average([r.allocation_strategy.strategic for r in roadmaps]),
            customer_driven=average([r.allocation_strategy.customer_driven for r in roadmaps]),
            maintenance=average([r.allocation_strategy.maintenance for r in roadmaps]),
        ),
    )
