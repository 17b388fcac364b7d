"""Health check endpoints."""

import logging
from datetime import datetime

from fastapi import APIRouter, Depends, Response, status

from api.config import Settings
from api.dependencies import get_settings_dependency
from core.models import HealthResponse, ReadinessResponse
from llm.factory import get_llm_provider

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get(
    "/health",
    response_model=HealthResponse,
    status_code=status.HTTP_200_OK,
    summary="Liveness probe",
    description="Simple health check that returns 200 if the service is running.",
)
async def health_check() -> HealthResponse:
    """
    Liveness probe endpoint.

    This endpoint does not check external dependencies.
    """
    return HealthResponse(
        status="healthy",
        timestamp=datetime.utcnow(),
        version="0.1.0",
    )


@router.get(
    "/ready",
    response_model=ReadinessResponse,
    status_code=status.HTTP_200_OK,
    summary="Readiness probe",
    description="Checks if the text generation service is configured and reachable.",
)
async def readiness_check(
    http_response: Response,
    settings: Settings = Depends(get_settings_dependency),
) -> ReadinessResponse:
    """
    Readiness probe endpoint.

    Returns 200 if the LLM provider answers its health check, 503 otherwise.
    """
    services_status: dict[str, bool] = {}

    try:
        provider = get_llm_provider(settings)
        services_status["llm"] = await provider.health_check()
    except ValueError as exc:
        logger.warning("LLM provider is not configured: %s", exc)
        services_status["llm"] = False

    all_ready = all(services_status.values())

    if not all_ready:
        http_response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE

    return ReadinessResponse(
        status="ready" if all_ready else "not_ready",
        timestamp=datetime.utcnow(),
        services=services_status,
    )
