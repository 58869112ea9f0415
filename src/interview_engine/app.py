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
"""Main FastAPI application factory.

This module creates and configures the FastAPI application with
dependency injection, middleware, and routes.
"""

import time
import uuid
from collections.abc import AsyncGenerator, Awaitable, Callable
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from interview_engine.api.auth import TokenActorResolver
from interview_engine.api.pipeline import RequestPipeline
from interview_engine.api.responses import build_error_response
from interview_engine.api.routes import feedback, generate, health, interviews
from interview_engine.clients.generation import build_text_generator
from interview_engine.config import get_settings
from interview_engine.config.logging import get_logger, setup_logging
from interview_engine.db import create_engine_from_settings, create_session_factory, create_tables
from interview_engine.db.models import MockInterview, UserAnswer
from interview_engine.db.repositories import SqlRecordStore
from interview_engine.exceptions import FieldValidationError, InternalError, InterviewEngineError
from interview_engine.services.generation import GenerationService
from interview_engine.services.rate_limiter import FixedWindowRateLimiter

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Lifespan context manager for application startup and shutdown.

    Builds the shared pipeline, generator and stores and keeps them on
    app.state for the request dependencies.

    Args:
        app: FastAPI application instance

    Yields:
        Control back to the application during its lifecycle
    """
    # Startup
    settings = get_settings()
    setup_logging(settings)
    app.state.start_time = time.time()
    logger.info("Starting Interview Engine API")
    logger.info(f"Environment: {settings.env.value}")
    logger.info(f"Debug mode: {settings.debug}")
    logger.debug(f"Configuration: {settings.get_safe_dict()}")

    app.state.pipeline = RequestPipeline(
        actor_resolver=TokenActorResolver(settings.api_tokens),
        rate_limiter=FixedWindowRateLimiter(),
        rate_limit=settings.rate_limit_requests,
        window_ms=settings.rate_limit_window_ms,
    )
    app.state.generation_service = GenerationService(build_text_generator(settings))

    engine = create_engine_from_settings(settings)
    if settings.db_auto_create:
        create_tables(engine)
    session_factory = create_session_factory(engine)
    app.state.engine = engine
    app.state.interview_store = SqlRecordStore(session_factory, MockInterview)
    app.state.answer_store = SqlRecordStore(session_factory, UserAnswer)

    yield

    # Shutdown
    engine.dispose()
    logger.info("Shutting down Interview Engine API")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    Returns:
        Configured FastAPI application instance
    """
    app = FastAPI(
        title="Interview Engine API",
        description="Mock interview question and answer feedback generation",
        version="0.1.0",
        lifespan=lifespan,
    )

    @app.middleware("http")
    async def logging_middleware(
        request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        """Middleware to log requests with request IDs.

        Adds a unique request_id to each request and logs request/response
        information without storing payloads.

        Args:
            request: Incoming HTTP request
            call_next: Next middleware/route handler in the chain

        Returns:
            HTTP response
        """
        request_id = str(uuid.uuid4())
        request.state.request_id = request_id

        start_time = time.time()
        logger.info(
            "Incoming request",
            extra={
                "request_id": request_id,
                "method": request.method,
                "path": request.url.path,
            },
        )

        response = await call_next(request)

        elapsed_time = time.time() - start_time
        logger.info(
            "Request completed",
            extra={
                "request_id": request_id,
                "method": request.method,
                "path": request.url.path,
                "status_code": response.status_code,
                "elapsed_time": f"{elapsed_time:.3f}s",
            },
        )

        response.headers["X-Request-ID"] = request_id
        return response

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        """Report framework-level parameter validation failures as field errors."""
        errors = [
            {
                "field": ".".join(str(part) for part in error.get("loc", ())[1:]) or "request",
                "message": str(error.get("msg", "")),
                "code": "TYPE_ERROR",
            }
            for error in exc.errors()
        ]
        logger.warning(
            "Request parameter validation error",
            extra={
                "request_id": getattr(request.state, "request_id", "unknown"),
                "fields": [error["field"] for error in errors],
            },
        )
        return build_error_response(FieldValidationError(errors))

    @app.exception_handler(InterviewEngineError)
    async def interview_engine_exception_handler(
        request: Request, exc: InterviewEngineError
    ) -> JSONResponse:
        """Handle domain exceptions raised outside the request pipeline."""
        logger.error(
            "Domain exception outside pipeline",
            extra={
                "request_id": getattr(request.state, "request_id", "unknown"),
                "code": exc.code,
                "message": exc.message,
            },
        )
        return build_error_response(exc)

    @app.exception_handler(Exception)
    async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Handle unexpected exceptions (500) with a generic message."""
        logger.error(
            "Unexpected exception",
            extra={"request_id": getattr(request.state, "request_id", "unknown")},
            exc_info=True,
        )
        return build_error_response(InternalError())

    app.include_router(generate.router)
    app.include_router(feedback.router)
    app.include_router(interviews.router)
    app.include_router(health.router)

    @app.get("/", tags=["root"])
    async def root() -> dict:
        """Root endpoint with API information."""
        return {
            "message": "Interview Engine API",
            "version": "0.1.0",
            "docs": "/docs",
        }

    return app


# Create app instance
app = create_app()
