"""Seed a demo project with goals and customer feedback."""
import asyncio
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from sqlalchemy import select

from roadmapper.database import async_session_maker, init_db
from roadmapper.models import Project
from roadmapper.schemas.project import FeedbackCreate, Goal, ProjectCreate
from roadmapper.storage.sql import SqlStorage

DEMO_PROJECT = ProjectCreate(
    name="Demo Project",
    description="Customer self-service portal for a B2B analytics product",
    goals=[
        Goal(title="Expand to the EU market", priority="high"),
        Goal(title="Reduce monthly churn below 2%", priority="high"),
        Goal(title="Launch a partner API", priority="medium"),
    ],
)

DEMO_FEEDBACK = [
    FeedbackCreate(
        content="Exporting large reports to CSV takes minutes and often times out",
        category="performance",
        priority="high",
        sentiment="negative",
        extracted_keywords=["export", "reports", "performance"],
    ),
    FeedbackCreate(
        content="We need single sign-on with Azure AD before we can roll out company-wide",
        category="feature-request",
        priority="critical",
        sentiment="neutral",
        extracted_keywords=["sso", "security"],
    ),
    FeedbackCreate(
        content="Dashboard filters reset every time I switch tabs",
        category="bug",
        priority="medium",
        sentiment="negative",
        extracted_keywords=["dashboard", "filters"],
    ),
    FeedbackCreate(
        content="Love the new scheduled reports, would like to export them as PDF too",
        category="feature-request",
        priority="low",
        sentiment="positive",
        extracted_keywords=["reports", "export", "pdf"],
    ),
]


async def seed():
    await init_db()
    async with async_session_maker() as db:
        existing = await db.execute(select(Project).where(Project.name == DEMO_PROJECT.name))
        if existing.scalar_one_or_none():
            print("Demo project already exists")
            return
        storage = SqlStorage(db)
        project = await storage.create_project(DEMO_PROJECT)
        for item in DEMO_FEEDBACK:
            await storage.add_feedback(project.id, item)
    print(f"Seeded demo project {project.id} with {len(DEMO_FEEDBACK)} feedback items")


if __name__ == "__main__":
    asyncio.run(seed())
