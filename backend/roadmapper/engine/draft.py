"""Roadmap drafts: untrusted candidates produced by a generation strategy."""
from dataclasses import dataclass, field
from typing import Any, Protocol

from roadmapper.engine.context import ContextBundle
from roadmapper.schemas.roadmap import AllocationStrategy, GeneratedBy, GenerationParameters


@dataclass
class RoadmapDraft:
    """Loosely typed roadmap candidate. Every field may be missing or out of domain until normalized."""

    generated_by: GeneratedBy
    name: Any = None
    description: Any = None
    type: Any = None
    time_horizon: Any = None
    allocation_strategy: Any = None
    items: list[Any] = field(default_factory=list)
    rationale: Any = None
    prompt: str | None = None
    model: str | None = None

    @classmethod
    def from_reply(cls, data: dict[str, Any], **extra: Any) -> "RoadmapDraft":
        """Build a draft from a parsed camelCase JSON reply."""
        items = data.get("items")
        return cls(
            generated_by=GeneratedBy.AI,
            name=data.get("name"),
            description=data.get("description"),
            type=data.get("type"),
            time_horizon=data.get("timeHorizon"),
            allocation_strategy=data.get("allocationStrategy"),
            items=items if isinstance(items, list) else [],
            rationale=data.get("rationale"),
            **extra,
        )


class RoadmapGenerator(Protocol):
    """(context, allocation, parameters) -> RoadmapDraft."""

    async def generate(
        self,
        context: ContextBundle,
        allocation: AllocationStrategy,
        parameters: GenerationParameters,
    ) -> RoadmapDraft:
        ...
