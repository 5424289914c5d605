"""Storage capability injected into the roadmap service."""
from typing import Protocol

from roadmapper.models.project import new_id
from roadmapper.schemas.project import FeedbackCreate, FeedbackItemResponse, ProjectCreate, ProjectResponse
from roadmapper.schemas.roadmap import RoadmapDocument
from roadmapper.schemas.task import TaskCreate, TaskResponse


class Storage(Protocol):
    """Persistence operations used by the services. Implementations raise NotFoundError / PersistenceError."""

    async def get_project(self, project_id: str) -> ProjectResponse: ...

    async def create_project(self, data: ProjectCreate) -> ProjectResponse: ...

    async def list_active_feedback(self, project_id: str) -> list[FeedbackItemResponse]: ...

    async def list_feedback(self, project_id: str) -> list[FeedbackItemResponse]: ...

    async def add_feedback(self, project_id: str, data: FeedbackCreate) -> FeedbackItemResponse: ...

    async def set_feedback_ignored(
        self, project_id: str, feedback_id: str, is_ignored: bool
    ) -> FeedbackItemResponse: ...

    async def get_roadmap(self, roadmap_id: str) -> RoadmapDocument: ...

    async def list_roadmaps(
        self,
        project_id: str,
        type: str | None = None,
        time_horizon: str | None = None,
        is_active: bool = True,
        skip: int = 0,
        limit: int = 10,
    ) -> tuple[list[RoadmapDocument], int]: ...

    async def save_roadmap(self, roadmap: RoadmapDocument) -> RoadmapDocument: ...

    async def create_task(self, data: TaskCreate) -> TaskResponse: ...

    async def list_tasks(self, project_id: str) -> list[TaskResponse]: ...


def assign_ids(roadmap: RoadmapDocument) -> RoadmapDocument:
    """Give the roadmap and any new items their ids. Existing ids are kept."""
    if roadmap.id is None:
        roadmap.id = new_id()
    for item in roadmap.items:
        if item.id is None:
            item.id = new_id()
    return roadmap
