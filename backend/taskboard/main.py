from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from taskboard.core.config import settings
from taskboard.core.errors import register_exception_handlers
from taskboard.core.logging import RequestIdMiddleware, setup_logging
from taskboard.db.session import create_sqlite_schema
import taskboard.models  # noqa: F401  # force model registration

from taskboard.api.v1.auth import router as auth_router
from taskboard.api.v1.session import router as session_router
from taskboard.api.v1.tenants import router as tenants_router
from taskboard.api.v1.join_requests import router as join_requests_router
from taskboard.api.v1.tasks import router as tasks_router
from taskboard.api.v1.leaderboard import router as leaderboard_router
from taskboard.api.v1.messages import router as messages_router


@asynccontextmanager
async def lifespan(_app: FastAPI):
    await create_sqlite_schema()
    yield


def create_application() -> FastAPI:
    setup_logging()

    app = FastAPI(title="Taskboard API", lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestIdMiddleware)

    register_exception_handlers(app)

    @app.get("/")
    def root():
        return {"status": "ok", "service": "taskboard"}

    # Routers
    app.include_router(auth_router, prefix="/api/v1")
    app.include_router(session_router, prefix="/api/v1")
    app.include_router(tenants_router, prefix="/api/v1")
    app.include_router(join_requests_router, prefix="/api/v1")
    app.include_router(tasks_router, prefix="/api/v1")
    app.include_router(leaderboard_router, prefix="/api/v1")
    app.include_router(messages_router, prefix="/api/v1")

    return app


app = create_application()
