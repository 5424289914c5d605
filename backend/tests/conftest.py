"""Pytest configuration and fixtures for roadmapper tests."""
from datetime import datetime, timezone

import pytest

from roadmapper.config import Settings, get_settings
from roadmapper.engine.fallback import FallbackRoadmapGenerator
from roadmapper.schemas.project import FeedbackCreate, Goal, ProjectCreate
from roadmapper.services.roadmap_service import RoadmapService
from roadmapper.storage.memory import MemoryStorage

FIXED_NOW = datetime(2026, 5, 10, 12, 0, tzinfo=timezone.utc)


@pytest.fixture(autouse=True)
def reset_settings_cache(monkeypatch):
    """Run every test against in-memory storage with the AI path unconfigured."""
    monkeypatch.setenv("STORAGE_BACKEND", "memory")
    monkeypatch.setenv("OPENAI_API_KEY", "")
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def settings() -> Settings:
    return Settings(_env_file=None, storage_backend="memory", openai_api_key="")


@pytest.fixture
def storage() -> MemoryStorage:
    return MemoryStorage()


@pytest.fixture
def fallback() -> FallbackRoadmapGenerator:
    return FallbackRoadmapGenerator(min_items=8, clock=lambda: FIXED_NOW)


@pytest.fixture
def service(storage, fallback, settings) -> RoadmapService:
    return RoadmapService(storage, ai_generator=None, fallback=fallback, settings=settings)


@pytest.fixture
async def project(storage):
    return await storage.create_project(
        ProjectCreate(
            name="Acme Portal",
            description="Self-service customer portal",
            goals=[
                Goal(title="Expand to EU market", priority="high"),
                Goal(title="Reduce churn", priority="medium"),
            ],
        )
    )


@pytest.fixture
async def feedback(storage, project):
    items = [
        FeedbackCreate(
            content="Exporting reports to CSV is painfully slow",
            category="performance",
            priority="high",
            extracted_keywords=["export", "reports"],
        ),
        FeedbackCreate(
            content="Please add single sign-on",
            category="feature-request",
            priority="medium",
            extracted_keywords=["sso", "export"],
        ),
        FeedbackCreate(
            content="Spam entry",
            category="other",
            priority="critical",
            extracted_keywords=["spam"],
        ),
    ]
    created = [await storage.add_feedback(project.id, item) for item in items]
    await storage.set_feedback_ignored(project.id, created[2].id, True)
    return created
