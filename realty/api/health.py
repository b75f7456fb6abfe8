from __future__ import annotations

from datetime import UTC, datetime

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from realty.schemas.analytics import KeyValueHealth
from realty.services.dependencies import ServiceContainer, get_container

router = APIRouter()


@router.get("/kv", response_model=KeyValueHealth, responses={503: {"model": KeyValueHealth}})
async def key_value_health(
    container: ServiceContainer = Depends(get_container),
) -> JSONResponse:
    """Round-trip a probe through the key-value store; 503 when it fails."""

    healthy = await container.cache.health_check()
    payload = KeyValueHealth(
        status="healthy" if healthy else "unhealthy",
        timestamp=datetime.now(UTC).isoformat(),
    )
    return JSONResponse(status_code=200 if healthy else 503, content=payload.model_dump(by_alias=True))
