"""Roadmap item to task conversion."""
import logging

from roadmapper.engine.tasks import build_task
from roadmapper.errors import PartialConversionError, PersistenceError
from roadmapper.schemas.roadmap import RoadmapDocument
from roadmapper.schemas.task import TaskResponse
from roadmapper.storage.base import Storage

logger = logging.getLogger(__name__)


async def convert_to_tasks(
    storage: Storage,
    roadmap: RoadmapDocument,
    item_ids: list[str] | None = None,
) -> list[TaskResponse]:
    """Create one task per eligible item and link it back via item.task_id.

    Mutates `roadmap` in place; the caller persists it. Items already linked to a task are skipped.
    On a task-store failure, tasks created so far stay linked and PartialConversionError is raised.
    """
    wanted = set(item_ids) if item_ids else None
    eligible = [
        item for item in roadmap.items
        if item.task_id is None and (wanted is None or item.id in wanted)
    ]

    converted: list[TaskResponse] = []
    for index, item in enumerate(eligible):
        try:
            task = await storage.create_task(build_task(roadmap, item))
        except PersistenceError as e:
            failed = [i.id for i in eligible[index:]]
            logger.error(
                "Task conversion for roadmap %s stopped after %d of %d items: %s",
                roadmap.id, len(converted), len(eligible), e.message,
            )
            raise PartialConversionError(
                f"Converted {len(converted)} of {len(eligible)} items before a task could not be created",
                converted_tasks=converted,
                failed_item_ids=failed,
            ) from e
        item.task_id = task.id
        converted.append(task)

    logger.info("Converted %d roadmap items to tasks for roadmap %s", len(converted), roadmap.id)
    return converted
