"""FastAPI application entry point."""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from roadmapper.config import get_settings
from roadmapper.database import init_db
from roadmapper.errors import PartialConversionError, RoadmapperError
from roadmapper.routers import projects, roadmaps

settings = get_settings()

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    if settings.storage_backend == "postgres":
        await init_db()
    else:
        logger.info("Running with in-memory storage")
    yield


app = FastAPI(
    title="Roadmapper",
    description="AI-assisted product roadmap generation from project goals and customer feedback",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(PartialConversionError)
async def partial_conversion_handler(request: Request, exc: PartialConversionError):
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "detail": exc.message,
            "convertedTasks": [t.model_dump(mode="json", by_alias=True) for t in exc.converted_tasks],
            "failedItemIds": exc.failed_item_ids,
        },
    )


@app.exception_handler(RoadmapperError)
async def roadmapper_error_handler(request: Request, exc: RoadmapperError):
    if exc.status_code >= 500:
        logger.error("%s on %s %s: %s", type(exc).__name__, request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


app.include_router(projects.router)
app.include_router(roadmaps.router)
app.include_router(roadmaps.project_router)


@app.get("/health")
async def health():
    return {"status": "ok", "storage": settings.storage_backend, "aiAvailable": settings.ai_available}
