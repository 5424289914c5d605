"""Deterministic fallback roadmap generator. All output derived from the allocation and context, no AI."""
import math
from datetime import date, datetime, timedelta, timezone
from typing import Any

from roadmapper.config import get_settings
from roadmapper.engine.context import ContextBundle
from roadmapper.engine.draft import RoadmapDraft
from roadmapper.schemas.roadmap import AllocationStrategy, GeneratedBy, GenerationParameters

QUARTERS_PER_HORIZON = {
    "quarter": 1,
    "half-year": 2,
    "year": 4,
    "multi-year": 8,
}

PRIORITY_CYCLE = ("high", "medium", "low")

CATEGORY_ORDER = ("strategic", "customer-driven", "maintenance")

# Percentage points of allocation covered by one templated item
PERCENT_PER_ITEM = {
    "strategic": 20,
    "customer-driven": 15,
    "maintenance": 10,
}

TEMPLATES: dict[str, dict[str, Any]] = {
    "strategic": {
        "title": "Strategic Initiative",
        "description": "Key strategic objective to advance {project} goals and market position",
        "duration_weeks": 6,
        "resources": {"percentage": 15, "teamMembers": 3, "estimatedCost": 50000},
        "scores": {"strategicAlignment": 9, "customerImpact": 7, "revenueImpact": 8},
        "risk": "medium",
        "metrics": ["Achieve target KPIs", "Positive stakeholder feedback", "On-time delivery"],
    },
    "customer-driven": {
        "title": "Customer Feature",
        "description": "Feature requested by {project} customers to improve user experience and satisfaction",
        "duration_weeks": 4,
        "resources": {"percentage": 10, "teamMembers": 2, "estimatedCost": 30000},
        "scores": {"strategicAlignment": 7, "customerImpact": 9, "revenueImpact": 6},
        "risk": "medium",
        "metrics": ["User adoption > 70%", "Customer satisfaction improvement", "Reduced support tickets"],
    },
    "maintenance": {
        "title": "System Maintenance",
        "description": "Critical maintenance and technical debt resolution to keep {project} stable",
        "duration_weeks": 2,
        "resources": {"percentage": 5, "teamMembers": 1, "estimatedCost": 15000},
        "scores": {"strategicAlignment": 5, "customerImpact": 6, "revenueImpact": 4},
        "risk": "low",
        "metrics": ["System performance improved", "Technical debt reduced", "Zero critical bugs"],
    },
}


def quarter_labels(time_horizon: str, today: date) -> list[tuple[str, date]]:
    """Quarter labels and start dates, beginning with the quarter containing `today`."""
    count = QUARTERS_PER_HORIZON.get(time_horizon, 1)
    quarter_index = (today.month - 1) // 3
    year = today.year
    labels = []
    for _ in range(count):
        labels.append((f"Q{quarter_index + 1} {year}", date(year, quarter_index * 3 + 1, 1)))
        quarter_index += 1
        if quarter_index == 4:
            quarter_index = 0
            year += 1
    return labels


def category_counts(allocation: AllocationStrategy, min_items: int) -> dict[str, int]:
    """Items per category: ceil(share / points-per-item), padded up to `min_items`.

    Padding goes to the category whose share of items is furthest below its allocation share.
    """
    shares = {
        "strategic": allocation.strategic,
        "customer-driven": allocation.customer_driven,
        "maintenance": allocation.maintenance,
    }
    counts = {c: math.ceil(shares[c] / PERCENT_PER_ITEM[c]) for c in CATEGORY_ORDER}
    total = sum(counts.values())
    while total < min_items:
        deficits = {
            c: shares[c] / 100 - (counts[c] / total if total else 0)
            for c in CATEGORY_ORDER
        }
        target = max(CATEGORY_ORDER, key=lambda c: deficits[c])
        counts[target] += 1
        total += 1
    return counts


def _item_priority(category: str, index: int) -> str:
    if category == "maintenance" and index == 0:
        return "high"
    return PRIORITY_CYCLE[index % len(PRIORITY_CYCLE)]


def _item_title(category: str, index: int, context: ContextBundle) -> str:
    title = f"{TEMPLATES[category]['title']} {index + 1}"
    if category == "strategic" and context.goal_titles:
        return f"{title}: {context.goal_titles[index % len(context.goal_titles)]}"
    if category == "customer-driven" and context.top_keywords:
        return f"{title}: {context.top_keywords[index % len(context.top_keywords)]}"
    return title


def _build_item(
    category: str,
    index: int,
    quarter: tuple[str, date],
    context: ContextBundle,
) -> dict[str, Any]:
    template = TEMPLATES[category]
    label, start = quarter
    end = start + timedelta(weeks=template["duration_weeks"])
    return {
        "title": _item_title(category, index, context),
        "description": template["description"].format(project=context.project_name),
        "category": category,
        "priority": _item_priority(category, index),
        "timeframe": {
            "quarter": label,
            "startDate": start.isoformat(),
            "endDate": end.isoformat(),
            "estimatedDuration": {"value": template["duration_weeks"], "unit": "weeks"},
        },
        "resourceAllocation": dict(template["resources"]),
        "dependencies": [],
        "relatedFeedback": [],
        "businessJustification": {**template["scores"], "riskLevel": template["risk"]},
        "successMetrics": list(template["metrics"]),
        "status": "proposed",
    }


class FallbackRoadmapGenerator:
    """Synthesizes a roadmap draft from the allocation percentages. Always succeeds."""

    def __init__(self, min_items: int | None = None, clock=None) -> None:
        self.min_items = min_items if min_items is not None else get_settings().roadmap_min_items
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    def build(
        self,
        context: ContextBundle,
        allocation: AllocationStrategy,
        parameters: GenerationParameters,
    ) -> RoadmapDraft:
        quarters = quarter_labels(parameters.time_horizon, self._clock().date())
        counts = category_counts(allocation, self.min_items)

        items = []
        for category in CATEGORY_ORDER:
            for index in range(counts[category]):
                items.append(_build_item(category, index, quarters[index % len(quarters)], context))

        rationale = (
            f"Generated {parameters.allocation_type} roadmap with {len(items)} items across "
            f"{len(quarters)} quarters, following {allocation.strategic:g}% strategic, "
            f"{allocation.customer_driven:g}% customer-driven, and {allocation.maintenance:g}% "
            "maintenance allocation."
        )
        return RoadmapDraft(
            generated_by=GeneratedBy.FALLBACK,
            name=parameters.name,
            description=parameters.description
            or f"Comprehensive {parameters.allocation_type} roadmap for {context.project_name}",
            type=parameters.allocation_type,
            time_horizon=parameters.time_horizon,
            allocation_strategy=allocation.model_dump(by_alias=True),
            items=items,
            rationale=rationale,
        )

    async def generate(
        self,
        context: ContextBundle,
        allocation: AllocationStrategy,
        parameters: GenerationParameters,
    ) -> RoadmapDraft:
        return self.build(context, allocation, parameters)
