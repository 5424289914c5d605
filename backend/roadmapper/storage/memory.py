"""In-process storage for demo mode and tests."""
from datetime import datetime, timezone

from roadmapper.errors import NotFoundError
from roadmapper.models.project import new_id
from roadmapper.schemas.project import FeedbackCreate, FeedbackItemResponse, ProjectCreate, ProjectResponse
from roadmapper.schemas.roadmap import RoadmapDocument
from roadmapper.schemas.task import TaskCreate, TaskResponse
from roadmapper.storage.base import assign_ids


class MemoryStorage:
    """Dict-backed storage. Returns deep copies so callers never share state with the store."""

    def __init__(self) -> None:
        self.projects: dict[str, ProjectResponse] = {}
        self.feedback: dict[str, FeedbackItemResponse] = {}
        self.roadmaps: dict[str, RoadmapDocument] = {}
        self.tasks: dict[str, TaskResponse] = {}

    async def get_project(self, project_id: str) -> ProjectResponse:
        project = self.projects.get(project_id)
        if project is None:
            raise NotFoundError("Project not found")
        return project.model_copy(deep=True)

    async def create_project(self, data: ProjectCreate) -> ProjectResponse:
        project = ProjectResponse(
            id=new_id(),
            name=data.name,
            description=data.description,
            goals=[g.model_copy() for g in data.goals],
            created_at=datetime.now(timezone.utc),
        )
        self.projects[project.id] = project
        return project.model_copy(deep=True)

    async def list_feedback(self, project_id: str) -> list[FeedbackItemResponse]:
        await self.get_project(project_id)
        return [f.model_copy(deep=True) for f in self.feedback.values() if f.project_id == project_id]

    async def list_active_feedback(self, project_id: str) -> list[FeedbackItemResponse]:
        return [f for f in await self.list_feedback(project_id) if not f.is_ignored]

    async def add_feedback(self, project_id: str, data: FeedbackCreate) -> FeedbackItemResponse:
        await self.get_project(project_id)
        item = FeedbackItemResponse(
            id=new_id(),
            project_id=project_id,
            created_at=datetime.now(timezone.utc),
            **data.model_dump(),
        )
        self.feedback[item.id] = item
        return item.model_copy(deep=True)

    async def set_feedback_ignored(
        self, project_id: str, feedback_id: str, is_ignored: bool
    ) -> FeedbackItemResponse:
        item = self.feedback.get(feedback_id)
        if item is None or item.project_id != project_id:
            raise NotFoundError("Feedback item not found")
        item.is_ignored = is_ignored
        return item.model_copy(deep=True)

    async def get_roadmap(self, roadmap_id: str) -> RoadmapDocument:
        roadmap = self.roadmaps.get(roadmap_id)
        if roadmap is None:
            raise NotFoundError("Roadmap not found")
        return roadmap.model_copy(deep=True)

    async def list_roadmaps(
        self,
        project_id: str,
        type: str | None = None,
        time_horizon: str | None = None,
        is_active: bool = True,
        skip: int = 0,
        limit: int = 10,
    ) -> tuple[list[RoadmapDocument], int]:
        matches = [
            r for r in self.roadmaps.values()
            if r.project_id == project_id
            and r.is_active == is_active
            and (type is None or r.type == type)
            and (time_horizon is None or r.time_horizon == time_horizon)
        ]
        matches.sort(key=lambda r: r.created_at, reverse=True)
        page = matches[skip:skip + limit]
        return [r.model_copy(deep=True) for r in page], len(matches)

    async def save_roadmap(self, roadmap: RoadmapDocument) -> RoadmapDocument:
        stored = assign_ids(roadmap.model_copy(deep=True))
        self.roadmaps[stored.id] = stored
        return stored.model_copy(deep=True)

    async def create_task(self, data: TaskCreate) -> TaskResponse:
        task = TaskResponse(id=new_id(), created_at=datetime.now(timezone.utc), **data.model_dump())
        self.tasks[task.id] = task
        return task.model_copy(deep=True)

    async def list_tasks(self, project_id: str) -> list[TaskResponse]:
        return [t.model_copy(deep=True) for t in self.tasks.values() if t.project_id == project_id]
