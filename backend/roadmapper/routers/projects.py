"""Project, feedback and task API routes."""
from typing import Annotated

from fastapi import APIRouter, Depends, status

from roadmapper.deps import get_storage
from roadmapper.schemas.project import (
    FeedbackCreate,
    FeedbackItemResponse,
    FeedbackUpdate,
    ProjectCreate,
    ProjectResponse,
)
from roadmapper.schemas.task import TaskResponse
from roadmapper.storage.base import Storage

router = APIRouter(prefix="/projects", tags=["projects"])

StorageDep = Annotated[Storage, Depends(get_storage)]


@router.post("", response_model=ProjectResponse, status_code=status.HTTP_201_CREATED)
async def create_project(data: ProjectCreate, storage: StorageDep):
    return await storage.create_project(data)


@router.get("/{project_id}", response_model=ProjectResponse)
async def get_project(project_id: str, storage: StorageDep):
    return await storage.get_project(project_id)


@router.post(
    "/{project_id}/feedback",
    response_model=FeedbackItemResponse,
    status_code=status.HTTP_201_CREATED,
)
async def add_feedback(project_id: str, data: FeedbackCreate, storage: StorageDep):
    return await storage.add_feedback(project_id, data)


@router.get("/{project_id}/feedback", response_model=list[FeedbackItemResponse])
async def list_feedback(project_id: str, storage: StorageDep):
    return await storage.list_feedback(project_id)


@router.patch("/{project_id}/feedback/{feedback_id}", response_model=FeedbackItemResponse)
async def update_feedback(project_id: str, feedback_id: str, data: FeedbackUpdate, storage: StorageDep):
    return await storage.set_feedback_ignored(project_id, feedback_id, data.is_ignored)


@router.get("/{project_id}/tasks", response_model=list[TaskResponse])
async def list_tasks(project_id: str, storage: StorageDep):
    await storage.get_project(project_id)
    return await storage.list_tasks(project_id)
