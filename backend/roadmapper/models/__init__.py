"""SQLAlchemy models."""
from roadmapper.models.project import FeedbackItem, Project
from roadmapper.models.roadmap import Roadmap
from roadmapper.models.task import Task

__all__ = [
    "FeedbackItem",
    "Project",
    "Roadmap",
    "Task",
]
