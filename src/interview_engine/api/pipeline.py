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
"""Request pipeline orchestrator.

Every API request passes through the same stages in a fixed order:
resolve actor, rate-limit, parse body, validate, sanitize, then the
endpoint handler. Any stage may short-circuit with a typed error; the
outermost boundary turns every outcome, including unclassified
exceptions, into a response envelope.
"""

import json
import time
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass
from typing import Any

from fastapi import Request
from fastapi.responses import JSONResponse

from interview_engine.api.auth import ActorResolver
from interview_engine.api.responses import (
    build_error_response,
    build_success_response,
    status_for,
)
from interview_engine.config.logging import get_logger
from interview_engine.exceptions import (
    AuthRequiredError,
    FieldValidationError,
    InternalError,
    InterviewEngineError,
    MalformedBodyError,
    RateLimitExceededError,
)
from interview_engine.schemas.requests import SANITIZE_MAX_LENGTHS
from interview_engine.schemas.validation import REQUIRED_FIELD_MISSING, FieldSchema, validate
from interview_engine.services.rate_limiter import FixedWindowRateLimiter
from interview_engine.services.sanitizer import sanitize_fields

logger = get_logger(__name__)

Schema = Mapping[str, FieldSchema]
SchemaSelector = Callable[[Any], Schema]


@dataclass(frozen=True)
class AdmittedRequest:
    """A request that passed every admission stage.

    Attributes:
        actor_id: Resolved caller identity
        data: Validated, coerced and sanitized body fields
        request_id: Correlation id assigned by the HTTP middleware
    """

    actor_id: str
    data: dict[str, Any]
    request_id: str


Handler = Callable[[AdmittedRequest], Awaitable[dict[str, Any]]]


class RequestPipeline:
    """Sequences the admission stages around an endpoint handler.

    Attributes:
        actor_resolver: Maps credentials to an actor id
        rate_limiter: Shared fixed-window limiter
        rate_limit: Requests allowed per window and actor
        window_ms: Window length in milliseconds
    """

    def __init__(
        self,
        actor_resolver: ActorResolver,
        rate_limiter: FixedWindowRateLimiter,
        rate_limit: int,
        window_ms: int,
    ):
        self.actor_resolver = actor_resolver
        self.rate_limiter = rate_limiter
        self.rate_limit = rate_limit
        self.window_ms = window_ms

    def resolve_actor(self, request: Request) -> str:
        """Resolve the caller or raise AuthRequiredError."""
        actor_id = self.actor_resolver.resolve_actor(request.headers.get("Authorization"))
        if not actor_id:
            raise AuthRequiredError()
        return actor_id

    def check_rate_limit(self, actor_id: str) -> None:
        """Consume one request from the actor's window.

        Raises:
            RateLimitExceededError: If the window is exhausted
        """
        key = f"actor:{actor_id}"
        if not self.rate_limiter.is_allowed(key, self.rate_limit, self.window_ms):
            raise RateLimitExceededError(self.rate_limiter.retry_after_seconds(key))

    async def parse_body(self, request: Request) -> Any:
        """Parse the request body as JSON.

        Raises:
            MalformedBodyError: If the body is empty or not valid JSON
        """
        raw = await request.body()
        if not raw.strip():
            raise MalformedBodyError("Request body is required")
        try:
            return json.loads(raw)
        except ValueError as e:
            raise MalformedBodyError() from e

    def admit_fields(self, body: Any, schema: Schema) -> dict[str, Any]:
        """Validate and sanitize a parsed body.

        Required string fields that sanitize to nothing are reported as
        missing, since nothing usable was supplied.

        Raises:
            FieldValidationError: With every field error found
        """
        outcome = validate(body, schema)
        if not outcome.valid:
            raise FieldValidationError([error.model_dump() for error in outcome.errors])

        data = sanitize_fields(outcome.data or {}, SANITIZE_MAX_LENGTHS)
        emptied = [
            {
                "field": name,
                "message": "Field is empty after removing markup",
                "code": REQUIRED_FIELD_MISSING,
            }
            for name, field_schema in schema.items()
            if field_schema.required and field_schema.type == "string" and data.get(name) == ""
        ]
        if emptied:
            raise FieldValidationError(emptied)
        return data

    async def run(
        self,
        request: Request,
        handler: Handler,
        schema: Schema | SchemaSelector | None = None,
        mutating: bool = True,
    ) -> JSONResponse:
        """Run a request through every stage and build its response.

        Args:
            request: Incoming HTTP request
            handler: Endpoint logic, invoked with the admitted request
            schema: Body schema, or a callable choosing one from the parsed
                body. None means the endpoint takes no body.
            mutating: Whether the endpoint changes state

        Returns:
            Response envelope with fixed headers
        """
        request_id = getattr(request.state, "request_id", "unknown")
        start_time = time.time()
        try:
            actor_id = self.resolve_actor(request)
            self.check_rate_limit(actor_id)

            data: dict[str, Any] = {}
            if schema is not None:
                body = await self.parse_body(request)
                if callable(schema):
                    schema = schema(body)
                data = self.admit_fields(body, schema)

            payload = await handler(AdmittedRequest(actor_id, data, request_id))
        except InterviewEngineError as e:
            self._log_failure(request, request_id, e)
            return build_error_response(e, mutating=mutating)
        except Exception:
            logger.error(
                "Unexpected exception in request pipeline",
                extra={"request_id": request_id, "path": request.url.path},
                exc_info=True,
            )
            return build_error_response(InternalError(), mutating=mutating)

        logger.info(
            "Request pipeline succeeded",
            extra={
                "request_id": request_id,
                "path": request.url.path,
                "elapsed_time": f"{time.time() - start_time:.2f}s",
            },
        )
        return build_success_response(payload, mutating=mutating)

    @staticmethod
    def _log_failure(request: Request, request_id: str, error: InterviewEngineError) -> None:
        status_code = status_for(error)
        extra: dict[str, Any] = {
            "request_id": request_id,
            "path": request.url.path,
            "code": error.code,
            "status_code": status_code,
        }
        if status_code < 500:
            if isinstance(error, FieldValidationError):
                extra["fields"] = [item["field"] for item in error.errors]
            logger.warning("Request rejected", extra=extra)
        else:
            extra["details"] = error.details
            logger.error(f"Request failed: {error.message}", extra=extra)
