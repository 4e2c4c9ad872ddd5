import logging
from typing import Literal

from fastapi import APIRouter
from pydantic import BaseModel
from sqlalchemy import text

from hrdesk.config import get_settings
from hrdesk.db import SessionDep

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


class HealthResponse(BaseModel):
    """Liveness plus a database round-trip."""

    status: Literal["ok", "degraded"]
    name: str
    version: str
    environment: str
    database: Literal["reachable", "unreachable"]


@router.get("/health", response_model=HealthResponse)
async def health(session: SessionDep) -> HealthResponse:
    """Report the service version and whether the database answers."""
    settings = get_settings()
    try:
        await session.execute(text("SELECT 1"))
        database: Literal["reachable", "unreachable"] = "reachable"
    except Exception:
        logger.exception("Health check: database ping failed")
        database = "unreachable"

    return HealthResponse(
        status="ok" if database == "reachable" else "degraded",
        name=settings.app_name,
        version=settings.app_version,
        environment=settings.environment,
        database=database,
    )
