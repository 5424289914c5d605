"""Tests for the roadmap service."""
import asyncio
import json
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

from roadmapper.engine.draft import RoadmapDraft
from roadmapper.errors import GenerationError, NotFoundError, PartialConversionError, PersistenceError, ValidationError
from roadmapper.schemas.roadmap import (
    AllocationStrategy,
    CreateRoadmapRequest,
    GenerateRoadmapRequest,
    GeneratedBy,
    RoadmapItemCreate,
    RoadmapItemUpdate,
    RoadmapUpdate,
)
from roadmapper.services.ai_service import AIRoadmapGenerator
from roadmapper.services.roadmap_service import RoadmapService


def _ai_generator(draft=None, side_effect=None):
    generator = MagicMock()
    generator.generate = AsyncMock(return_value=draft, side_effect=side_effect)
    return generator


def _request(project_id, /, **overrides) -> GenerateRoadmapRequest:
    data = {"project_id": project_id, "name": "Q2 plan"}
    data.update(overrides)
    return GenerateRoadmapRequest(**data)


class TestGenerate:
    async def test_unreachable_ai_falls_back(self, storage, fallback, settings, project):
        ai = _ai_generator(side_effect=GenerationError("AI request failed: connection refused"))
        service = RoadmapService(storage, ai_generator=ai, fallback=fallback, settings=settings)

        roadmap = await service.generate(_request(project.id, type="balanced", time_horizon="quarter"))

        assert 8 <= len(roadmap.items) <= 14
        allocation = roadmap.allocation_strategy
        assert (allocation.strategic, allocation.customer_driven, allocation.maintenance) == (60, 30, 10)
        assert roadmap.generation_context.generated_by == GeneratedBy.FALLBACK
        assert roadmap.generation_context.fallback_reason == "AI request failed: connection refused"
        assert roadmap.generation_context.ai_model == "deterministic-fallback"
        assert roadmap.rationale.startswith("Generated balanced roadmap with")
        assert roadmap.analytics.total_items == len(roadmap.items)
        assert all(item.id for item in roadmap.items)
        assert roadmap.id in storage.roadmaps

    async def test_ai_disabled_uses_fallback(self, service, project):
        roadmap = await service.generate(_request(project.id))
        assert roadmap.generation_context.generated_by == GeneratedBy.FALLBACK
        assert "OPENAI_API_KEY" in roadmap.generation_context.fallback_reason

    async def test_ai_draft_normalized_before_save(self, storage, fallback, settings, project, feedback):
        draft = RoadmapDraft(
            generated_by=GeneratedBy.AI,
            name="AI plan",
            items=[
                {
                    "title": "Faster exports",
                    "priority": "urgent",
                    "category": "customer-driven",
                    "businessJustification": {"riskLevel": "extreme", "customerImpact": 9},
                },
            ],
            rationale="Exports dominate feedback",
            prompt="prompt text",
            model="gpt-4o-mini",
        )
        ai = _ai_generator(draft)
        service = RoadmapService(storage, ai_generator=ai, fallback=fallback, settings=settings)

        roadmap = await service.generate(_request(project.id))

        stored = storage.roadmaps[roadmap.id]
        assert stored.items[0].priority == "medium"
        assert stored.items[0].business_justification.risk_level == "medium"
        assert roadmap.name == "AI plan"
        assert roadmap.rationale == "Exports dominate feedback"
        assert roadmap.generation_context.generated_by == GeneratedBy.AI
        assert roadmap.generation_context.fallback_reason is None
        assert roadmap.generation_context.user_query == "prompt text"
        assert roadmap.analytics.customer_satisfaction_potential == 9

        context = ai.generate.await_args.args[0]
        assert context.active_feedback_count == 2

    @pytest.mark.parametrize(
        "error",
        [OSError("Name or service not known"), httpx.ConnectError("unreachable"), asyncio.TimeoutError()],
    )
    async def test_text_generator_failure_falls_back(self, storage, fallback, settings, project, error):
        text_generator = MagicMock()
        text_generator.model = "gpt-4o-mini"
        text_generator.complete = AsyncMock(side_effect=error)
        ai = AIRoadmapGenerator(text_generator, settings)
        service = RoadmapService(storage, ai_generator=ai, fallback=fallback, settings=settings)

        roadmap = await service.generate(_request(project.id))

        assert roadmap.generation_context.generated_by == GeneratedBy.FALLBACK
        assert roadmap.generation_context.fallback_reason.startswith("AI request failed")
        assert len(roadmap.items) == 8

    async def test_ai_draft_with_oversized_number_still_saved(self, storage, fallback, settings, project):
        items = json.loads('[{"title": "Scale out", "resourceAllocation": {"percentage": 1' + "0" * 400 + "}}]")
        ai = _ai_generator(RoadmapDraft(generated_by=GeneratedBy.AI, items=items))
        service = RoadmapService(storage, ai_generator=ai, fallback=fallback, settings=settings)

        roadmap = await service.generate(_request(project.id))

        assert roadmap.generation_context.generated_by == GeneratedBy.AI
        assert roadmap.items[0].resource_allocation.percentage == 0

    async def test_ai_draft_without_usable_items_falls_back(self, storage, fallback, settings, project):
        ai = _ai_generator(RoadmapDraft(generated_by=GeneratedBy.AI, items=["junk"]))
        service = RoadmapService(storage, ai_generator=ai, fallback=fallback, settings=settings)
        roadmap = await service.generate(_request(project.id))
        assert roadmap.generation_context.generated_by == GeneratedBy.FALLBACK
        assert len(roadmap.items) == 8

    async def test_custom_allocation(self, service, project):
        roadmap = await service.generate(
            _request(
                project.id,
                type="custom",
                custom_allocation=AllocationStrategy(strategic=20, customer_driven=20, maintenance=60),
            )
        )
        assert roadmap.allocation_strategy.maintenance == 60
        assert roadmap.type == "custom"

    @pytest.mark.parametrize("overrides", [{"name": None}, {"name": "  "}, {"project_id": None}])
    async def test_missing_fields_rejected(self, service, project, overrides):
        with pytest.raises(ValidationError, match="Project ID and name are required"):
            await service.generate(_request(project.id, **overrides))

    async def test_custom_without_allocation_rejected(self, service, project):
        with pytest.raises(ValidationError):
            await service.generate(_request(project.id, type="custom"))

    async def test_unknown_project(self, service):
        with pytest.raises(NotFoundError):
            await service.generate(_request("missing"))


class TestCreate:
    async def test_allocation_not_summing_to_100_rejected(self, service, storage, project):
        request = CreateRoadmapRequest(
            project_id=project.id,
            name="Manual",
            allocation_strategy=AllocationStrategy(strategic=40, customer_driven=40, maintenance=19),
        )
        with pytest.raises(ValidationError):
            await service.create(request)
        assert storage.roadmaps == {}

    async def test_defaults(self, service, project):
        roadmap = await service.create(
            CreateRoadmapRequest(
                project_id=project.id,
                name="Manual",
                items=[RoadmapItemCreate(title="First", status="completed")],
            )
        )
        assert roadmap.type == "custom"
        assert roadmap.allocation_strategy.total() == 100
        assert roadmap.version == 1
        assert roadmap.generation_context is None
        assert roadmap.analytics.completion_rate == 100
        assert roadmap.items[0].id


class TestEditing:
    @pytest.fixture
    async def roadmap(self, service, project):
        return await service.create(
            CreateRoadmapRequest(
                project_id=project.id,
                name="Manual",
                items=[RoadmapItemCreate(title="First"), RoadmapItemCreate(title="Second")],
            )
        )

    async def test_add_item(self, service, roadmap):
        updated = await service.add_item(roadmap.id, RoadmapItemCreate(title="Third", status="completed"))
        assert [i.title for i in updated.items] == ["First", "Second", "Third"]
        assert updated.items[2].id
        assert updated.version == 2
        assert updated.analytics.total_items == 3

    async def test_update_item_merges(self, service, roadmap):
        item_id = roadmap.items[0].id
        updated = await service.update_item(roadmap.id, item_id, RoadmapItemUpdate(status="in-progress"))
        item = updated.get_item(item_id)
        assert item.status == "in-progress"
        assert item.title == "First"
        assert updated.version == 2

    async def test_remove_item(self, service, roadmap):
        updated = await service.remove_item(roadmap.id, roadmap.items[0].id)
        assert [i.title for i in updated.items] == ["Second"]
        assert updated.analytics.total_items == 1

    async def test_unknown_item(self, service, roadmap):
        with pytest.raises(NotFoundError, match="Roadmap item not found"):
            await service.remove_item(roadmap.id, "missing")
        with pytest.raises(NotFoundError):
            await service.update_item(roadmap.id, "missing", RoadmapItemUpdate(title="x"))

    async def test_update_roadmap(self, service, roadmap):
        updated = await service.update(roadmap.id, RoadmapUpdate(name="Renamed", time_horizon="year"))
        assert updated.name == "Renamed"
        assert updated.time_horizon == "year"
        assert updated.version == 2
        assert len(updated.items) == 2

    async def test_update_rejects_bad_allocation(self, service, roadmap):
        patch = RoadmapUpdate(allocation_strategy=AllocationStrategy(strategic=50, customer_driven=50, maintenance=50))
        with pytest.raises(ValidationError):
            await service.update(roadmap.id, patch)

    async def test_soft_delete(self, service, roadmap, project):
        await service.soft_delete(roadmap.id)
        stored = await service.get(roadmap.id)
        assert stored.is_active is False
        assert stored.version == roadmap.version
        listing = await service.list_for_project(project.id)
        assert listing.pagination.total == 0

    async def test_unknown_roadmap(self, service):
        with pytest.raises(NotFoundError, match="Roadmap not found"):
            await service.get("missing")


class TestListingAndAnalytics:
    async def test_pagination(self, service, project):
        for n in range(3):
            await service.create(CreateRoadmapRequest(project_id=project.id, name=f"R{n}"))
        listing = await service.list_for_project(project.id, page=2, limit=2)
        assert len(listing.data) == 1
        assert listing.pagination.model_dump() == {"current": 2, "pages": 2, "total": 3}

    async def test_filter_by_type(self, service, project):
        await service.generate(_request(project.id, type="customer-only"))
        await service.generate(_request(project.id, type="balanced"))
        listing = await service.list_for_project(project.id, type="customer-only")
        assert [r.type for r in listing.data] == ["customer-only"]

    async def test_project_analytics(self, service, project):
        await service.generate(_request(project.id, type="customer-only"))
        await service.generate(_request(project.id, type="balanced"))
        analytics = await service.project_analytics(project.id)
        assert analytics.total_roadmaps == 2
        assert analytics.by_type == {"customer-only": 1, "balanced": 1}
        assert analytics.allocation_trends.strategic == 40

    async def test_project_analytics_counts_every_page(self, service, storage, project, monkeypatch):
        monkeypatch.setattr("roadmapper.services.roadmap_service.ANALYTICS_PAGE_SIZE", 2)
        for n in range(5):
            await service.create(CreateRoadmapRequest(project_id=project.id, name=f"R{n}"))
        list_roadmaps = storage.list_roadmaps
        calls = []

        async def tracking_list_roadmaps(*args, **kwargs):
            calls.append(kwargs)
            return await list_roadmaps(*args, **kwargs)

        monkeypatch.setattr(storage, "list_roadmaps", tracking_list_roadmaps)

        analytics = await service.project_analytics(project.id)

        assert analytics.total_roadmaps == 5
        assert [c["skip"] for c in calls] == [0, 2, 4]

    async def test_timeline(self, service, project):
        roadmap = await service.generate(_request(project.id, time_horizon="half-year"))
        timeline = await service.timeline(roadmap.id)
        assert list(timeline.timeline) == ["Q2 2026", "Q3 2026"]
        assert sum(p.summary.total_items for p in timeline.timeline.values()) == len(roadmap.items)
        assert timeline.analytics == roadmap.analytics


class TestConvertToTasks:
    async def test_convert_links_items_and_bumps_version(self, service, storage, project):
        roadmap = await service.generate(_request(project.id))
        target = [roadmap.items[0].id, roadmap.items[1].id]

        result = await service.convert_to_tasks(roadmap.id, target)
        assert len(result.converted_tasks) == 2
        assert result.roadmap.version == 2
        assert result.roadmap.items[0].task_id == result.converted_tasks[0].id

        again = await service.convert_to_tasks(roadmap.id, target)
        assert again.converted_tasks == []
        assert again.roadmap.version == 2
        assert len(await storage.list_tasks(project.id)) == 2

    async def test_partial_failure_persists_links(self, service, storage, project):
        roadmap = await service.generate(_request(project.id))
        original_create = storage.create_task
        calls = {"n": 0}

        async def flaky_create(data):
            calls["n"] += 1
            if calls["n"] > 2:
                raise PersistenceError("Failed to create task")
            return await original_create(data)

        storage.create_task = flaky_create
        with pytest.raises(PartialConversionError) as exc_info:
            await service.convert_to_tasks(roadmap.id)

        assert len(exc_info.value.converted_tasks) == 2
        assert len(exc_info.value.failed_item_ids) == len(roadmap.items) - 2
        stored = await service.get(roadmap.id)
        assert [i.task_id is not None for i in stored.items[:3]] == [True, True, False]
        assert stored.version == 2
