"""Root banner plus liveness, readiness and version probes. No auth."""

from fastapi import APIRouter, Request
from fastapi.responses import PlainTextResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from swadrive.config import Settings
from swadrive.database import Database

router = APIRouter()


@router.get("/", response_class=PlainTextResponse)
async def root() -> str:
    """Banner kept for clients that ping the root URL."""
    return "SwaDrive Backend is running"


@router.get("/health")
async def health() -> dict[str, str]:
    """Liveness probe. Returns 200 while the process is up."""
    return {"status": "healthy"}


@router.get("/ready")
async def readiness(request: Request) -> dict[str, object]:
    """Readiness probe: can the configured database answer a query?"""
    database: Database = request.app.state.database
    checks: dict[str, object] = {}

    try:
        async with database.engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        checks["database"] = "ok"
    except (SQLAlchemyError, OSError) as exc:
        checks["database"] = f"error: {exc}"

    ready = all(v == "ok" for v in checks.values())
    return {
        "status": "ready" if ready else "degraded",
        "backend": database.engine.dialect.name,
        "checks": checks,
    }


@router.get("/version")
async def version(request: Request) -> dict[str, str]:
    """API version and deployment environment."""
    settings: Settings = request.app.state.settings
    return {
        "version": settings.app_version,
        "environment": settings.environment,
    }
