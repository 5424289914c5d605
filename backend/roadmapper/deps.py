"""FastAPI dependencies: storage selection and service wiring."""
from collections.abc import AsyncGenerator
from functools import lru_cache
from typing import Annotated

from fastapi import Depends

from roadmapper.config import Settings, get_settings
from roadmapper.database import async_session_maker
from roadmapper.engine.fallback import FallbackRoadmapGenerator
from roadmapper.services.ai_service import AIRoadmapGenerator, OpenAITextGenerator
from roadmapper.services.roadmap_service import RoadmapService
from roadmapper.storage.base import Storage
from roadmapper.storage.memory import MemoryStorage
from roadmapper.storage.sql import SqlStorage


@lru_cache
def get_memory_storage() -> MemoryStorage:
    """Process-wide in-memory store used when storage_backend is "memory"."""
    return MemoryStorage()


async def get_storage(
    settings: Annotated[Settings, Depends(get_settings)],
) -> AsyncGenerator[Storage, None]:
    if settings.storage_backend == "memory":
        yield get_memory_storage()
        return
    async with async_session_maker() as session:
        yield SqlStorage(session)


def get_ai_generator(
    settings: Annotated[Settings, Depends(get_settings)],
) -> AIRoadmapGenerator | None:
    if not settings.ai_available:
        return None
    return AIRoadmapGenerator(OpenAITextGenerator(settings), settings)


def get_roadmap_service(
    storage: Annotated[Storage, Depends(get_storage)],
    ai_generator: Annotated[AIRoadmapGenerator | None, Depends(get_ai_generator)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> RoadmapService:
    return RoadmapService(
        storage,
        ai_generator=ai_generator,
        fallback=FallbackRoadmapGenerator(min_items=settings.roadmap_min_items),
        settings=settings,
    )
