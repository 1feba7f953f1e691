"""
Favorite Places AI Backend - Service Info & Health Routes
==========================================================

What:  GET / (service banner) and GET /health (liveness probe).
How:   Reports uptime and whether Gemini and Vision are configured. No
       upstream call is made: probing Gemini would spend quota on every check.
Who:   Load balancers, container health checks and monitoring.
"""

import logging
import time
from datetime import datetime, timezone

from fastapi import APIRouter, Depends

from places_ai import __version__
from places_ai.dependencies import get_ai_service
from places_ai.schemas.ai import HealthResponse, ServiceInfoResponse
from places_ai.services.ai_service import AIService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

SERVICE_NAME = "Favorite Places Backend"

# Module load time, for uptime reporting
_start_time = time.time()


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


@router.get("/", response_model=ServiceInfoResponse, summary="Service info")
async def service_info() -> ServiceInfoResponse:
    return ServiceInfoResponse(
        status="ok",
        service=SERVICE_NAME,
        version=__version__,
        timestamp=_now_iso(),
    )


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
    description="Liveness plus configuration status of the Gemini and Vision integrations.",
)
async def health_check(service: AIService = Depends(get_ai_service)) -> HealthResponse:
    return HealthResponse(
        status="healthy",
        version=__version__,
        uptime_seconds=round(time.time() - _start_time, 2),
        timestamp=_now_iso(),
        gemini="configured" if service.generator.is_configured() else "unconfigured",
        vision="enabled" if service.signal_extractor.enabled else "disabled",
    )
