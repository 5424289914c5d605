"""Draft normalizer: coerces an untrusted RoadmapDraft into typed roadmap values."""
import logging
import math
from dataclasses import dataclass, field
from datetime import date
from typing import Any

from roadmapper.engine.allocation import allocation_is_valid
from roadmapper.engine.draft import RoadmapDraft
from roadmapper.schemas.common import PRIORITIES
from roadmapper.schemas.roadmap import (
    DURATION_UNITS,
    ITEM_CATEGORIES,
    ITEM_STATUSES,
    RISK_LEVELS,
    ROADMAP_TYPES,
    TIME_HORIZONS,
    AllocationStrategy,
    BusinessJustification,
    EstimatedDuration,
    GeneratedBy,
    GenerationParameters,
    RelatedFeedback,
    ResourceAllocation,
    RoadmapItem,
    Timeframe,
)

logger = logging.getLogger(__name__)

TITLE_MAX_LENGTH = 200
DESCRIPTION_MAX_LENGTH = 1000
DEFAULT_TITLE = "Untitled roadmap item"

SINGULAR_UNITS = {"day": "days", "week": "weeks", "month": "months"}


@dataclass
class NormalizedRoadmap:
    """Roadmap-level values after normalization. Every enum holds a valid value."""

    name: str
    description: str | None
    type: str
    time_horizon: str
    allocation_strategy: AllocationStrategy
    items: list[RoadmapItem] = field(default_factory=list)
    rationale: str = ""
    generated_by: GeneratedBy = GeneratedBy.FALLBACK


def _choice(value: Any, allowed: tuple[str, ...], default: str, label: str) -> str:
    if isinstance(value, str):
        candidate = value.strip().lower()
        if candidate in allowed:
            return candidate
    if value is not None:
        logger.debug("Replaced invalid %s %r with %r", label, value, default)
    return default


def _number(value: Any, low: float, high: float | None = None, default: float | None = None) -> float | None:
    if isinstance(value, bool) or value is None:
        return default
    if isinstance(value, str):
        try:
            value = float(value.strip())
        except ValueError:
            return default
    if not isinstance(value, (int, float)):
        return default
    try:
        value = float(value)
    except OverflowError:
        return default
    if not math.isfinite(value):
        return default
    value = max(low, value)
    if high is not None:
        value = min(high, value)
    return value


def _text(value: Any, max_length: int) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text[:max_length] if text else None


def _string_list(value: Any) -> list[str]:
    if not isinstance(value, list):
        return []
    return [str(v).strip() for v in value if v is not None and str(v).strip()]


def _dict(value: Any) -> dict:
    return value if isinstance(value, dict) else {}


def _date(value: Any) -> date | None:
    if value is None:
        return None
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value)[:10])
    except ValueError:
        return None


def _unit(value: Any) -> str:
    if isinstance(value, str):
        candidate = value.strip().lower()
        candidate = SINGULAR_UNITS.get(candidate, candidate)
        if candidate in DURATION_UNITS:
            return candidate
    logger.debug("Replaced invalid duration unit %r with 'weeks'", value)
    return "weeks"


def _timeframe(raw: Any) -> Timeframe:
    data = _dict(raw)
    duration = None
    if isinstance(data.get("estimatedDuration"), dict):
        raw_duration = data["estimatedDuration"]
        duration = EstimatedDuration(
            value=_number(raw_duration.get("value"), 0, default=0),
            unit=_unit(raw_duration.get("unit")),
        )
    return Timeframe(
        quarter=_text(data.get("quarter"), 50),
        start_date=_date(data.get("startDate")),
        end_date=_date(data.get("endDate")),
        estimated_duration=duration,
    )


def _resource_allocation(raw: Any) -> ResourceAllocation:
    data = _dict(raw)
    team_members = _number(data.get("teamMembers"), 0)
    return ResourceAllocation(
        percentage=_number(data.get("percentage"), 0, 100, default=0),
        team_members=int(team_members) if team_members is not None else None,
        estimated_cost=_number(data.get("estimatedCost"), 0),
    )


def _related_feedback(raw: Any) -> list[RelatedFeedback]:
    if not isinstance(raw, list):
        return []
    related = []
    for entry in raw:
        if not isinstance(entry, dict):
            continue
        feedback_id = entry.get("feedbackId")
        related.append(
            RelatedFeedback(
                feedback_id=str(feedback_id) if feedback_id is not None else None,
                relevance_score=_number(entry.get("relevanceScore"), 0, 10),
                customer_quotes=_string_list(entry.get("customerQuotes")),
            )
        )
    return related


def _business_justification(raw: Any) -> BusinessJustification:
    data = _dict(raw)
    return BusinessJustification(
        strategic_alignment=_number(data.get("strategicAlignment"), 0, 10),
        customer_impact=_number(data.get("customerImpact"), 0, 10),
        revenue_impact=_number(data.get("revenueImpact"), 0, 10),
        risk_level=_choice(data.get("riskLevel"), RISK_LEVELS, "medium", "riskLevel"),
    )


def normalize_item(raw: dict[str, Any]) -> RoadmapItem:
    """Coerce one candidate item. Never raises for out-of-domain values; ids are left for storage."""
    return RoadmapItem(
        title=_text(raw.get("title"), TITLE_MAX_LENGTH) or DEFAULT_TITLE,
        description=_text(raw.get("description"), DESCRIPTION_MAX_LENGTH),
        category=_choice(raw.get("category"), ITEM_CATEGORIES, "strategic", "category"),
        priority=_choice(raw.get("priority"), PRIORITIES, "medium", "priority"),
        timeframe=_timeframe(raw.get("timeframe")),
        resource_allocation=_resource_allocation(raw.get("resourceAllocation")),
        dependencies=_string_list(raw.get("dependencies")),
        related_feedback=_related_feedback(raw.get("relatedFeedback")),
        business_justification=_business_justification(raw.get("businessJustification")),
        success_metrics=_string_list(raw.get("successMetrics")),
        status=_choice(raw.get("status"), ITEM_STATUSES, "proposed", "status"),
    )


def _allocation(raw: Any, default: AllocationStrategy) -> AllocationStrategy:
    data = _dict(raw)
    values = [
        _number(data.get(key), 0, 100)
        for key in ("strategic", "customerDriven", "maintenance")
    ]
    if any(v is None for v in values):
        return default.model_copy()
    candidate = AllocationStrategy(strategic=values[0], customer_driven=values[1], maintenance=values[2])
    return candidate if allocation_is_valid(candidate) else default.model_copy()


def normalize_draft(
    draft: RoadmapDraft,
    parameters: GenerationParameters,
    allocation: AllocationStrategy,
) -> NormalizedRoadmap:
    """Normalize a draft; roadmap-level fields missing from the draft fall back to the request values."""
    items = []
    for raw in draft.items:
        if not isinstance(raw, dict):
            logger.debug("Skipped non-object roadmap item %r", raw)
            continue
        items.append(normalize_item(raw))

    roadmap_type = _choice(draft.type, ROADMAP_TYPES, parameters.allocation_type, "type")
    time_horizon = _choice(draft.time_horizon, TIME_HORIZONS, parameters.time_horizon, "timeHorizon")
    rationale = _text(draft.rationale, 5000) or (
        f"Roadmap generated successfully with {roadmap_type} allocation strategy"
    )
    return NormalizedRoadmap(
        name=_text(draft.name, TITLE_MAX_LENGTH) or parameters.name,
        description=_text(draft.description, DESCRIPTION_MAX_LENGTH) or parameters.description or None,
        type=roadmap_type,
        time_horizon=time_horizon,
        allocation_strategy=_allocation(draft.allocation_strategy, allocation),
        items=items,
        rationale=rationale,
        generated_by=draft.generated_by,
    )
