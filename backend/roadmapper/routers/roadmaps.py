"""Roadmap API routes."""
from typing import Annotated

from fastapi import APIRouter, Depends, Query, status

from roadmapper.deps import get_roadmap_service
from roadmapper.schemas.roadmap import (
    ConvertToTasksRequest,
    ConvertToTasksResponse,
    CreateRoadmapRequest,
    GenerateRoadmapRequest,
    GeneratedRoadmapResponse,
    ProjectRoadmapAnalytics,
    RoadmapDocument,
    RoadmapItemCreate,
    RoadmapItemUpdate,
    RoadmapListResponse,
    RoadmapTimelineResponse,
    RoadmapType,
    RoadmapUpdate,
    TimeHorizon,
)
from roadmapper.services.roadmap_service import RoadmapService

router = APIRouter(prefix="/roadmaps", tags=["roadmaps"])
project_router = APIRouter(prefix="/projects/{project_id}/roadmaps", tags=["roadmaps"])

Service = Annotated[RoadmapService, Depends(get_roadmap_service)]


@router.post("/generate", response_model=GeneratedRoadmapResponse, status_code=status.HTTP_201_CREATED)
async def generate_roadmap(data: GenerateRoadmapRequest, service: Service):
    return await service.generate(data)


@router.post("", response_model=RoadmapDocument, status_code=status.HTTP_201_CREATED)
async def create_roadmap(data: CreateRoadmapRequest, service: Service):
    return await service.create(data)


@router.get("/{roadmap_id}", response_model=RoadmapDocument)
async def get_roadmap(roadmap_id: str, service: Service):
    return await service.get(roadmap_id)


@router.put("/{roadmap_id}", response_model=RoadmapDocument)
async def update_roadmap(roadmap_id: str, data: RoadmapUpdate, service: Service):
    return await service.update(roadmap_id, data)


@router.delete("/{roadmap_id}")
async def delete_roadmap(roadmap_id: str, service: Service):
    await service.soft_delete(roadmap_id)
    return {"message": "Roadmap deleted successfully"}


@router.post("/{roadmap_id}/items", response_model=RoadmapDocument, status_code=status.HTTP_201_CREATED)
async def add_roadmap_item(roadmap_id: str, data: RoadmapItemCreate, service: Service):
    return await service.add_item(roadmap_id, data)


@router.put("/{roadmap_id}/items/{item_id}", response_model=RoadmapDocument)
async def update_roadmap_item(roadmap_id: str, item_id: str, data: RoadmapItemUpdate, service: Service):
    return await service.update_item(roadmap_id, item_id, data)


@router.delete("/{roadmap_id}/items/{item_id}", response_model=RoadmapDocument)
async def remove_roadmap_item(roadmap_id: str, item_id: str, service: Service):
    return await service.remove_item(roadmap_id, item_id)


@router.post("/{roadmap_id}/convert-to-tasks", response_model=ConvertToTasksResponse)
async def convert_roadmap_to_tasks(
    roadmap_id: str,
    service: Service,
    data: ConvertToTasksRequest | None = None,
):
    return await service.convert_to_tasks(roadmap_id, data.item_ids if data else None)


@router.get("/{roadmap_id}/timeline", response_model=RoadmapTimelineResponse)
async def get_roadmap_timeline(roadmap_id: str, service: Service):
    return await service.timeline(roadmap_id)


@project_router.get("", response_model=RoadmapListResponse)
async def list_project_roadmaps(
    project_id: str,
    service: Service,
    type: RoadmapType | None = None,
    time_horizon: Annotated[TimeHorizon | None, Query(alias="timeHorizon")] = None,
    is_active: Annotated[bool, Query(alias="isActive")] = True,
    page: Annotated[int, Query(ge=1)] = 1,
    limit: Annotated[int, Query(ge=1, le=100)] = 10,
):
    return await service.list_for_project(
        project_id,
        type=type,
        time_horizon=time_horizon,
        is_active=is_active,
        page=page,
        limit=limit,
    )


@project_router.get("/analytics", response_model=ProjectRoadmapAnalytics)
async def get_project_roadmap_analytics(project_id: str, service: Service):
    return await service.project_analytics(project_id)
