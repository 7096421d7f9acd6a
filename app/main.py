from contextlib import asynccontextmanager

from fastapi import FastAPI, Depends
from fastapi.middleware.cors import CORSMiddleware

from app.config import settings
from app.database import create_tables, async_session
from app.dependencies import verify_api_key
from app.seed import seed_data
from app.routers.bulk import router as bulk_router
from app.routers.changes import router as changes_router
from app.routers.comments import router as comments_router
from app.routers.gantt import router as gantt_router
from app.routers.locations import router as locations_router
from app.routers.planning import router as planning_router
from app.routers.project import router as project_router
from app.routers.share_links import public_router as shared_router, router as share_links_router
from app.routers.tasks import router as tasks_router
from app.routers.team_members import router as team_members_router
from app.routers.vehicles import router as vehicles_router
from app.utils.exceptions import register_exception_handlers
from app.utils.logging_setup import setup_logging

SERVICE_NAME = "installation-planner-api"
VERSION = "0.1.0"

setup_logging(settings.log_level)


@asynccontextmanager
async def lifespan(app: FastAPI):
    await create_tables()
    async with async_session() as session:
        await seed_data(session)
    yield


app = FastAPI(
    title="Installation Planner API",
    description="Planning and tracking backend for vehicle GPS and fuel-sensor installations",
    version=VERSION,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

_api_key_dep = [Depends(verify_api_key)]

# bulk routes first so /tasks/bulk/... never reaches /tasks/{task_id}
app.include_router(bulk_router, prefix="/api/v1", dependencies=_api_key_dep)
app.include_router(tasks_router, prefix="/api/v1", dependencies=_api_key_dep)
app.include_router(vehicles_router, prefix="/api/v1", dependencies=_api_key_dep)
app.include_router(locations_router, prefix="/api/v1", dependencies=_api_key_dep)
app.include_router(team_members_router, prefix="/api/v1", dependencies=_api_key_dep)
app.include_router(comments_router, prefix="/api/v1", dependencies=_api_key_dep)
app.include_router(project_router, prefix="/api/v1", dependencies=_api_key_dep)
app.include_router(gantt_router, prefix="/api/v1", dependencies=_api_key_dep)
app.include_router(planning_router, prefix="/api/v1", dependencies=_api_key_dep)
app.include_router(share_links_router, prefix="/api/v1", dependencies=_api_key_dep)
app.include_router(shared_router, prefix="/api/v1")
app.include_router(changes_router)


@app.get("/health")
async def health_check():
    return {"status": "success", "data": {"service": SERVICE_NAME, "version": VERSION}, "message": None}
