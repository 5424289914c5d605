"""Context aggregation over a project and its active feedback."""
from collections import Counter
from dataclasses import dataclass, field

from roadmapper.schemas.project import FeedbackItemResponse, ProjectResponse

TOP_CATEGORY_COUNT = 3
TOP_KEYWORD_COUNT = 5
HIGH_PRIORITY_EXCERPT_COUNT = 3
EXCERPT_LENGTH = 100


@dataclass
class ContextBundle:
    """Point-in-time summary of a project and its feedback, fed to the generators."""

    project_name: str
    project_summary: str
    feedback_summary: str
    active_feedback_count: int
    top_categories: list[tuple[str, int]] = field(default_factory=list)
    top_keywords: list[str] = field(default_factory=list)
    goal_titles: list[str] = field(default_factory=list)
    high_priority_excerpts: list[str] = field(default_factory=list)


def _project_summary(project: ProjectResponse) -> str:
    goals = "; ".join(f"{g.title} ({g.priority} priority)" for g in project.goals)
    return "\n".join([
        f"Project: {project.name}",
        f"Description: {project.description or 'Not specified'}",
        f"Goals: {goals or 'None specified'}",
    ])


def _ranked(counter: Counter, limit: int) -> list[tuple[str, int]]:
    # Ties keep first-seen order
    return counter.most_common(limit)


def build_context(
    project: ProjectResponse,
    feedback_items: list[FeedbackItemResponse],
) -> ContextBundle:
    """Summarise project goals and active (non-ignored) feedback."""
    active = [f for f in feedback_items if not f.is_ignored]

    categories: Counter = Counter()
    keywords: Counter = Counter()
    for item in active:
        categories[item.category] += 1
        for keyword in item.extracted_keywords:
            keywords[keyword] += 1

    top_categories = _ranked(categories, TOP_CATEGORY_COUNT)
    top_keywords = [k for k, _ in _ranked(keywords, TOP_KEYWORD_COUNT)]
    excerpts = [
        f"{item.content[:EXCERPT_LENGTH]}..."
        for item in active
        if item.priority in ("critical", "high")
    ][:HIGH_PRIORITY_EXCERPT_COUNT]

    category_text = ", ".join(f"{c}: {n}" for c, n in top_categories)
    excerpt_text = "; ".join(f'"{e}"' for e in excerpts)
    feedback_summary = "\n".join([
        f"Total Feedback Items: {len(active)}",
        f"Top Categories: {category_text or 'None'}",
        f"Key Themes: {', '.join(top_keywords) or 'None'}",
        f"Recent High-Priority Items: {excerpt_text or 'None'}",
    ])

    return ContextBundle(
        project_name=project.name,
        project_summary=_project_summary(project),
        feedback_summary=feedback_summary,
        active_feedback_count=len(active),
        top_categories=top_categories,
        top_keywords=top_keywords,
        goal_titles=[g.title for g in project.goals],
        high_priority_excerpts=excerpts,
    )
