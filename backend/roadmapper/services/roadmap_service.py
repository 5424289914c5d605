"""Roadmap orchestration: generation pipeline, manual edits, conversion and analytics."""
import logging
import math
from datetime import datetime, timezone

from roadmapper.config import Settings, get_settings
from roadmapper.engine.allocation import DEFAULT_ALLOCATION, resolve_allocation, validate_allocation
from roadmapper.engine.analytics import build_timeline, recompute, summarize_roadmaps
from roadmapper.engine.context import ContextBundle, build_context
from roadmapper.engine.draft import RoadmapDraft, RoadmapGenerator
from roadmapper.engine.fallback import FallbackRoadmapGenerator
from roadmapper.engine.normalizer import NormalizedRoadmap, normalize_draft
from roadmapper.errors import GenerationError, PartialConversionError, ValidationError
from roadmapper.schemas.roadmap import (
    AllocationStrategy,
    ConvertToTasksResponse,
    CreateRoadmapRequest,
    GenerateRoadmapRequest,
    GeneratedRoadmapResponse,
    GenerationContext,
    GenerationParameters,
    Pagination,
    ProjectRoadmapAnalytics,
    RoadmapDocument,
    RoadmapItem,
    RoadmapItemCreate,
    RoadmapItemUpdate,
    RoadmapListResponse,
    RoadmapTimelineResponse,
    RoadmapUpdate,
)
from roadmapper.services.task_converter import convert_to_tasks
from roadmapper.storage.base import Storage

logger = logging.getLogger(__name__)

FALLBACK_MODEL_NAME = "deterministic-fallback"
ANALYTICS_PAGE_SIZE = 100


def _require(project_id: str | None, name: str | None) -> tuple[str, str]:
    if not project_id or not project_id.strip() or not name or not name.strip():
        raise ValidationError("Project ID and name are required")
    return project_id.strip(), name.strip()


class RoadmapService:
    """Roadmap use cases over an injected Storage.

    `ai_generator` is None when the AI path is disabled; generation then goes straight to the fallback.
    """

    def __init__(
        self,
        storage: Storage,
        ai_generator: RoadmapGenerator | None = None,
        fallback: FallbackRoadmapGenerator | None = None,
        settings: Settings | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.storage = storage
        self.ai_generator = ai_generator
        self.fallback = fallback or FallbackRoadmapGenerator(min_items=self.settings.roadmap_min_items)

    def _ai_unavailable_reason(self) -> str:
        if not self.settings.ai_generation_enabled:
            return "AI generation disabled"
        if not self.settings.openai_api_key:
            return "AI generation unavailable: OPENAI_API_KEY not configured"
        return "AI generator not configured"

    async def _save(self, roadmap: RoadmapDocument) -> RoadmapDocument:
        roadmap.analytics = recompute(roadmap.items)
        roadmap.updated_at = datetime.now(timezone.utc)
        return await self.storage.save_roadmap(roadmap)

    async def _draft(
        self,
        context: ContextBundle,
        allocation: AllocationStrategy,
        parameters: GenerationParameters,
    ) -> tuple[NormalizedRoadmap, RoadmapDraft, str | None]:
        fallback_reason = None
        if self.ai_generator is None:
            fallback_reason = self._ai_unavailable_reason()
        else:
            try:
                draft = await self.ai_generator.generate(context, allocation, parameters)
                normalized = normalize_draft(draft, parameters, allocation)
                if normalized.items:
                    return normalized, draft, None
                fallback_reason = "AI reply contained no usable roadmap items"
            except GenerationError as e:
                fallback_reason = e.message
            logger.warning("AI roadmap generation failed, using fallback: %s", fallback_reason)

        draft = await self.fallback.generate(context, allocation, parameters)
        return normalize_draft(draft, parameters, allocation), draft, fallback_reason

    async def generate(self, request: GenerateRoadmapRequest) -> GeneratedRoadmapResponse:
        """Context, allocation, generation, normalization, single save."""
        project_id, name = _require(request.project_id, request.name)
        allocation = resolve_allocation(request.type, request.custom_allocation)

        project = await self.storage.get_project(project_id)
        feedback = await self.storage.list_active_feedback(project_id)
        context = build_context(project, feedback)

        parameters = GenerationParameters(
            name=name,
            description=request.description,
            time_horizon=request.time_horizon,
            allocation_type=request.type,
            focus_areas=request.focus_areas,
            constraints=request.constraints,
        )
        normalized, draft, fallback_reason = await self._draft(context, allocation, parameters)

        user_query = draft.prompt or (
            f'Generate a detailed {parameters.time_horizon} roadmap for project "{project.name}". '
            f"Allocation Strategy: {allocation.strategic:g}% Strategic, "
            f"{allocation.customer_driven:g}% Customer-driven, {allocation.maintenance:g}% Maintenance"
        )
        roadmap = RoadmapDocument(
            project_id=project_id,
            name=normalized.name,
            description=normalized.description,
            type=normalized.type,
            time_horizon=normalized.time_horizon,
            allocation_strategy=normalized.allocation_strategy,
            items=normalized.items,
            generation_context=GenerationContext(
                user_query=user_query,
                ai_model=draft.model or FALLBACK_MODEL_NAME,
                generated_by=normalized.generated_by,
                fallback_reason=fallback_reason,
                parameters=parameters,
            ),
        )
        saved = await self._save(roadmap)
        logger.info(
            "Generated roadmap %s for project %s with %d items (%s)",
            saved.id, project_id, len(saved.items), normalized.generated_by.value,
        )
        return GeneratedRoadmapResponse.model_validate({**saved.model_dump(), "rationale": normalized.rationale})

    async def create(self, request: CreateRoadmapRequest) -> RoadmapDocument:
        project_id, name = _require(request.project_id, request.name)
        allocation = (
            validate_allocation(request.allocation_strategy)
            if request.allocation_strategy is not None
            else DEFAULT_ALLOCATION.model_copy()
        )
        await self.storage.get_project(project_id)

        roadmap = RoadmapDocument(
            project_id=project_id,
            name=name,
            description=request.description,
            type=request.type,
            time_horizon=request.time_horizon,
            allocation_strategy=allocation,
            items=[RoadmapItem.model_validate(item.model_dump()) for item in request.items],
        )
        saved = await self._save(roadmap)
        logger.info("Created roadmap %s for project %s", saved.id, project_id)
        return saved

    async def get(self, roadmap_id: str) -> RoadmapDocument:
        return await self.storage.get_roadmap(roadmap_id)

    async def list_for_project(
        self,
        project_id: str,
        type: str | None = None,
        time_horizon: str | None = None,
        is_active: bool = True,
        page: int = 1,
        limit: int = 10,
    ) -> RoadmapListResponse:
        await self.storage.get_project(project_id)
        roadmaps, total = await self.storage.list_roadmaps(
            project_id,
            type=type,
            time_horizon=time_horizon,
            is_active=is_active,
            skip=(page - 1) * limit,
            limit=limit,
        )
        return RoadmapListResponse(
            data=roadmaps,
            pagination=Pagination(current=page, pages=math.ceil(total / limit), total=total),
        )

    async def update(self, roadmap_id: str, patch: RoadmapUpdate) -> RoadmapDocument:
        roadmap = await self.storage.get_roadmap(roadmap_id)
        if patch.allocation_strategy is not None:
            validate_allocation(patch.allocation_strategy)
        for field in patch.model_fields_set:
            value = getattr(patch, field)
            if value is not None:
                setattr(roadmap, field, value)
        roadmap.version += 1
        return await self._save(roadmap)

    async def soft_delete(self, roadmap_id: str) -> None:
        roadmap = await self.storage.get_roadmap(roadmap_id)
        roadmap.is_active = False
        await self._save(roadmap)
        logger.info("Deactivated roadmap %s", roadmap_id)

    async def add_item(self, roadmap_id: str, data: RoadmapItemCreate) -> RoadmapDocument:
        roadmap = await self.storage.get_roadmap(roadmap_id)
        roadmap.items.append(RoadmapItem.model_validate(data.model_dump()))
        roadmap.version += 1
        return await self._save(roadmap)

    async def update_item(self, roadmap_id: str, item_id: str, patch: RoadmapItemUpdate) -> RoadmapDocument:
        roadmap = await self.storage.get_roadmap(roadmap_id)
        item = roadmap.get_item(item_id)
        changes = {k: v for k, v in patch.model_dump(exclude_unset=True).items() if v is not None}
        roadmap.replace_item(item_id, RoadmapItem.model_validate({**item.model_dump(), **changes}))
        roadmap.version += 1
        return await self._save(roadmap)

    async def remove_item(self, roadmap_id: str, item_id: str) -> RoadmapDocument:
        roadmap = await self.storage.get_roadmap(roadmap_id)
        roadmap.remove_item(item_id)
        roadmap.version += 1
        return await self._save(roadmap)

    async def convert_to_tasks(self, roadmap_id: str, item_ids: list[str] | None = None) -> ConvertToTasksResponse:
        roadmap = await self.storage.get_roadmap(roadmap_id)
        try:
            tasks = await convert_to_tasks(self.storage, roadmap, item_ids)
        except PartialConversionError as e:
            # Keep the links for tasks that were created
            if e.converted_tasks:
                roadmap.version += 1
                await self._save(roadmap)
            raise
        if tasks:
            roadmap.version += 1
            roadmap = await self._save(roadmap)
        return ConvertToTasksResponse(roadmap=roadmap, converted_tasks=tasks)

    async def timeline(self, roadmap_id: str) -> RoadmapTimelineResponse:
        roadmap = await self.storage.get_roadmap(roadmap_id)
        return RoadmapTimelineResponse(
            roadmap=roadmap,
            timeline=build_timeline(roadmap),
            analytics=recompute(roadmap.items),
        )

    async def project_analytics(self, project_id: str) -> ProjectRoadmapAnalytics:
        await self.storage.get_project(project_id)
        roadmaps: list[RoadmapDocument] = []
        while True:
            page, total = await self.storage.list_roadmaps(
                project_id, skip=len(roadmaps), limit=ANALYTICS_PAGE_SIZE
            )
            roadmaps.extend(page)
            if not page or len(roadmaps) >= total:
                break
        return summarize_roadmaps(roadmaps)
