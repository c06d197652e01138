"""FastAPI application factory."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI

from swadrive.auth.router import router as auth_router
from swadrive.chat.router import router as chat_router
from swadrive.config import Settings, get_settings
from swadrive.database import Database
from swadrive.health.router import router as health_router
from swadrive.middleware import setup_middleware
from swadrive.notifications.router import router as notifications_router
from swadrive.tasks.router import router as tasks_router

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup and shutdown lifecycle."""
    settings: Settings = app.state.settings
    database: Database = app.state.database
    if settings.create_tables_on_startup:
        await database.create_all()
        logger.info("tables_created", url=database.engine.url.render_as_string(hide_password=True))

    yield

    await database.dispose()


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = settings or get_settings()

    app = FastAPI(
        title="SwaDrive API",
        description="Task marketplace backend connecting customers with helpers",
        version=settings.app_version,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.database = Database(settings.database_url)

    setup_middleware(app, settings)
    app.include_router(health_router, tags=["Health"])
    app.include_router(auth_router)
    app.include_router(tasks_router)
    app.include_router(notifications_router)
    app.include_router(chat_router)

    return app


def run() -> None:
    """Console entry point: serve the app with uvicorn."""
    import uvicorn

    settings = get_settings()
    uvicorn.run("swadrive.main:app", host=settings.host, port=settings.port)


app = create_app()
