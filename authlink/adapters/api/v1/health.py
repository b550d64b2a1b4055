from datetime import datetime, timezone
from typing import Any, Dict

from fastapi import APIRouter
from pydantic import BaseModel

from authlink.core.config.settings import settings
from authlink.infrastructure.database.async_db import check_database_health

router = APIRouter()


class HealthResponse(BaseModel):
    status: str
    env: str
    services: Dict[str, Any]
    timestamp: datetime


@router.get("", response_model=HealthResponse)
async def health_check():
    """
    Health check endpoint that verifies the database is reachable.
    """
    db_healthy = await check_database_health()

    return HealthResponse(
        status="ok" if db_healthy else "degraded",
        env=settings.APP_ENV,
        services={"database": {"status": "healthy" if db_healthy else "unhealthy"}},
        timestamp=datetime.now(timezone.utc),
    )
