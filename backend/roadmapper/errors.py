"""Error taxonomy for roadmap generation and management.

Services raise these; the application maps them onto HTTP responses.
"""


class RoadmapperError(Exception):
    """Base exception for all roadmapper errors."""

    status_code = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(RoadmapperError):
    """Request rejected before any generation attempt (missing fields, bad allocation)."""

    status_code = 400


class NotFoundError(RoadmapperError):
    """Unknown project, roadmap or roadmap item."""

    status_code = 404


class GenerationError(RoadmapperError):
    """AI call failed, timed out or returned an unparseable reply.

    Recovered locally by the fallback generator; never surfaced to callers.
    """


class PersistenceError(RoadmapperError):
    """Write to the document store failed."""

    status_code = 500


class PartialConversionError(RoadmapperError):
    """Task creation failed part-way through a conversion batch.

    Tasks created before the failure stay created and linked; nothing is rolled back.
    """

    status_code = 500

    def __init__(self, message: str, converted_tasks: list, failed_item_ids: list[str]) -> None:
        super().__init__(message)
        self.converted_tasks = converted_tasks
        self.failed_item_ids = failed_item_ids
