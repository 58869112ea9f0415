# Copyright 2025 John Brosnihan
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
"""Health check endpoint router.

This module implements the GET /health endpoint that reports service
status, configuration metadata, and uptime without exposing secrets. It is
not authenticated and not rate limited.
"""

import time

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from interview_engine.api.responses import build_success_response
from interview_engine.config import Settings, get_settings
from interview_engine.config.logging import get_logger
from interview_engine.db import check_database_health
from interview_engine.schemas.responses import HealthResponse

logger = get_logger(__name__)

router = APIRouter(tags=["health"])


@router.get(
    "/health",
    summary="Health check endpoint",
    description=(
        "Returns service health status, configuration metadata, and uptime. "
        "Status is 'healthy' or 'degraded'."
    ),
    responses={
        200: {
            "description": "Service is healthy or degraded",
            "content": {
                "application/json": {
                    "example": {
                        "success": True,
                        "data": {
                            "status": "healthy",
                            "environment": "production",
                            "debug": False,
                            "model": "gpt-4o-mini",
                            "uptime_seconds": 3600.5,
                            "database": "ok",
                            "config_status": "ok",
                        },
                    }
                }
            },
        }
    },
)
async def health_check(request: Request, settings: Settings = Depends(get_settings)) -> JSONResponse:
    """Health check endpoint with configuration metadata.

    Args:
        request: The incoming request (to access app state)
        settings: Application settings injected via dependency

    Returns:
        Envelope wrapping a HealthResponse
    """
    start_time = getattr(request.app.state, "start_time", time.time())
    uptime_seconds = time.time() - start_time

    config_status = "ok"
    health_status = "healthy"

    if not settings.openai_api_key or len(settings.openai_api_key) < 10:
        config_status = "warning"
        health_status = "degraded"
        logger.warning("Health check detected invalid API key configuration")

    if not settings.api_tokens:
        config_status = "warning"
        logger.debug("No API tokens configured; every API request will be rejected")

    engine = getattr(request.app.state, "engine", None)
    database = "ok" if engine is not None and check_database_health(engine) else "unavailable"
    if database != "ok":
        health_status = "degraded"

    health = HealthResponse(
        status=health_status,
        environment=settings.env.value,
        debug=settings.debug,
        model=settings.openai_model,
        uptime_seconds=uptime_seconds,
        database=database,
        config_status=config_status,
    )

    logger.debug(
        "Health check completed",
        extra={"status": health_status, "database": database, "uptime_seconds": uptime_seconds},
    )

    return build_success_response(health.model_dump(), mutating=False)
