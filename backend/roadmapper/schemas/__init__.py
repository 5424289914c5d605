"""Pydantic schemas."""
from roadmapper.schemas.project import (
    FeedbackCreate,
    FeedbackItemResponse,
    FeedbackUpdate,
    Goal,
    ProjectCreate,
    ProjectResponse,
)
from roadmapper.schemas.roadmap import (
    AllocationStrategy,
    ConvertToTasksRequest,
    ConvertToTasksResponse,
    CreateRoadmapRequest,
    GenerateRoadmapRequest,
    GeneratedBy,
    GeneratedRoadmapResponse,
    ProjectRoadmapAnalytics,
    RoadmapAnalytics,
    RoadmapDocument,
    RoadmapItem,
    RoadmapItemCreate,
    RoadmapItemUpdate,
    RoadmapListResponse,
    RoadmapTimelineResponse,
    RoadmapUpdate,
)
from roadmapper.schemas.task import TaskCreate, TaskResponse

__all__ = [
    "FeedbackCreate",
    "FeedbackItemResponse",
    "FeedbackUpdate",
    "Goal",
    "ProjectCreate",
    "ProjectResponse",
    "AllocationStrategy",
    "ConvertToTasksRequest",
    "ConvertToTasksResponse",
    "CreateRoadmapRequest",
    "GenerateRoadmapRequest",
    "GeneratedBy",
    "GeneratedRoadmapResponse",
    "ProjectRoadmapAnalytics",
    "RoadmapAnalytics",
    "RoadmapDocument",
    "RoadmapItem",
    "RoadmapItemCreate",
    "RoadmapItemUpdate",
    "RoadmapListResponse",
    "RoadmapTimelineResponse",
    "RoadmapUpdate",
    "TaskCreate",
    "TaskResponse",
]
