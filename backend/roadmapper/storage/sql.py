"""PostgreSQL storage over an AsyncSession. Roadmap items live in a JSONB document column."""
import logging
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from roadmapper.errors import NotFoundError, PersistenceError
from roadmapper.models import FeedbackItem, Project, Roadmap, Task
from roadmapper.schemas.project import FeedbackCreate, FeedbackItemResponse, ProjectCreate, ProjectResponse
from roadmapper.schemas.roadmap import RoadmapDocument
from roadmapper.schemas.task import TaskCreate, TaskResponse
from roadmapper.storage.base import assign_ids

logger = logging.getLogger(__name__)


def _json(model) -> Any:
    return model.model_dump(mode="json", by_alias=True) if model is not None else None


def _project_response(project: Project) -> ProjectResponse:
    return ProjectResponse(
        id=project.id,
        name=project.name,
        description=project.description or "",
        goals=project.goals or [],
        created_at=project.created_at,
    )


def _feedback_response(item: FeedbackItem) -> FeedbackItemResponse:
    return FeedbackItemResponse(
        id=item.id,
        project_id=item.project_id,
        content=item.content,
        source=item.source,
        category=item.category,
        priority=item.priority,
        sentiment=item.sentiment,
        is_ignored=item.is_ignored,
        extracted_keywords=item.extracted_keywords or [],
        created_at=item.created_at,
    )


def _roadmap_document(row: Roadmap) -> RoadmapDocument:
    return RoadmapDocument.model_validate({
        "id": row.id,
        "project_id": row.project_id,
        "name": row.name,
        "description": row.description,
        "type": row.type,
        "time_horizon": row.time_horizon,
        "allocation_strategy": row.allocation_strategy,
        "items": row.items or [],
        "generation_context": row.generation_context,
        "analytics": row.analytics or {},
        "version": row.version,
        "is_active": row.is_active,
        "created_at": row.created_at,
        "updated_at": row.updated_at,
    })


def _task_response(task: Task) -> TaskResponse:
    return TaskResponse.model_validate({
        "id": task.id,
        "project_id": task.project_id,
        "title": task.title,
        "description": task.description,
        "category": task.category,
        "priority": task.priority,
        "status": task.status,
        "estimated_effort": task.estimated_effort,
        "timeline": task.timeline or {},
        "business_value": task.business_value or {},
        "acceptance_criteria": task.acceptance_criteria or [],
        "tags": task.tags or [],
        "roadmap_id": task.roadmap_id,
        "roadmap_item_id": task.roadmap_item_id,
        "created_at": task.created_at,
    })


class SqlStorage:
    """Each write commits on its own, so earlier writes in a batch survive a later failure."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def _commit(self, operation: str) -> None:
        try:
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error("Database write failed during %s: %s", operation, e)
            raise PersistenceError(f"Failed to {operation}") from e

    async def _project_row(self, project_id: str) -> Project:
        project = await self.session.get(Project, project_id)
        if project is None:
            raise NotFoundError("Project not found")
        return project

    async def get_project(self, project_id: str) -> ProjectResponse:
        return _project_response(await self._project_row(project_id))

    async def create_project(self, data: ProjectCreate) -> ProjectResponse:
        project = Project(
            name=data.name,
            description=data.description,
            goals=[_json(g) for g in data.goals],
        )
        self.session.add(project)
        await self._commit("create project")
        await self.session.refresh(project)
        return _project_response(project)

    async def list_feedback(self, project_id: str) -> list[FeedbackItemResponse]:
        await self._project_row(project_id)
        result = await self.session.execute(
            select(FeedbackItem)
            .where(FeedbackItem.project_id == project_id)
            .order_by(FeedbackItem.created_at)
        )
        return [_feedback_response(f) for f in result.scalars().all()]

    async def list_active_feedback(self, project_id: str) -> list[FeedbackItemResponse]:
        return [f for f in await self.list_feedback(project_id) if not f.is_ignored]

    async def add_feedback(self, project_id: str, data: FeedbackCreate) -> FeedbackItemResponse:
        await self._project_row(project_id)
        item = FeedbackItem(project_id=project_id, **data.model_dump())
        self.session.add(item)
        await self._commit("add feedback")
        await self.session.refresh(item)
        return _feedback_response(item)

    async def set_feedback_ignored(
        self, project_id: str, feedback_id: str, is_ignored: bool
    ) -> FeedbackItemResponse:
        item = await self.session.get(FeedbackItem, feedback_id)
        if item is None or item.project_id != project_id:
            raise NotFoundError("Feedback item not found")
        item.is_ignored = is_ignored
        await self._commit("update feedback")
        return _feedback_response(item)

    async def get_roadmap(self, roadmap_id: str) -> RoadmapDocument:
        row = await self.session.get(Roadmap, roadmap_id)
        if row is None:
            raise NotFoundError("Roadmap not found")
        return _roadmap_document(row)

    async def list_roadmaps(
        self,
        project_id: str,
        type: str | None = None,
        time_horizon: str | None = None,
        is_active: bool = True,
        skip: int = 0,
        limit: int = 10,
    ) -> tuple[list[RoadmapDocument], int]:
        conditions = [Roadmap.project_id == project_id, Roadmap.is_active == is_active]
        if type is not None:
            conditions.append(Roadmap.type == type)
        if time_horizon is not None:
            conditions.append(Roadmap.time_horizon == time_horizon)

        total = await self.session.scalar(select(func.count()).select_from(Roadmap).where(*conditions))
        result = await self.session.execute(
            select(Roadmap)
            .where(*conditions)
            .order_by(Roadmap.created_at.desc())
            .offset(skip)
            .limit(limit)
        )
        return [_roadmap_document(r) for r in result.scalars().all()], total or 0

    async def save_roadmap(self, roadmap: RoadmapDocument) -> RoadmapDocument:
        document = assign_ids(roadmap.model_copy(deep=True))
        row = await self.session.get(Roadmap, document.id)
        if row is None:
            row = Roadmap(id=document.id, project_id=document.project_id, created_at=document.created_at)
            self.session.add(row)
        row.name = document.name
        row.description = document.description
        row.type = document.type
        row.time_horizon = document.time_horizon
        row.allocation_strategy = _json(document.allocation_strategy)
        row.items = [_json(item) for item in document.items]
        row.generation_context = _json(document.generation_context)
        row.analytics = _json(document.analytics)
        row.version = document.version
        row.is_active = document.is_active
        row.updated_at = document.updated_at
        await self._commit("save roadmap")
        return document

    async def create_task(self, data: TaskCreate) -> TaskResponse:
        payload = data.model_dump(mode="json")
        task = Task(
            project_id=data.project_id,
            title=data.title,
            description=data.description,
            category=data.category,
            priority=data.priority,
            status=data.status,
            estimated_effort=_json(data.estimated_effort),
            timeline=_json(data.timeline),
            business_value=_json(data.business_value),
            acceptance_criteria=payload["acceptance_criteria"],
            tags=payload["tags"],
            roadmap_id=data.roadmap_id,
            roadmap_item_id=data.roadmap_item_id,
        )
        self.session.add(task)
        await self._commit("create task")
        await self.session.refresh(task)
        return _task_response(task)

    async def list_tasks(self, project_id: str) -> list[TaskResponse]:
        result = await self.session.execute(
            select(Task).where(Task.project_id == project_id).order_by(Task.created_at)
        )
        return [_task_response(t) for t in result.scalars().all()]
