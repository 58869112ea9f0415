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
"""Response builder.

Maps pipeline outcomes to HTTP responses. Every response carries the same
envelope and the same security headers. Upstream and internal failures are
reported with fixed public messages; their details only reach the logs.
"""

from typing import Any

from fastapi import status
from fastapi.responses import JSONResponse

from interview_engine.exceptions import (
    AuthRequiredError,
    ExtractionFailedError,
    FieldValidationError,
    InterviewEngineError,
    MalformedBodyError,
    NoTextInReplyError,
    NotFoundError,
    RateLimitExceededError,
    StructureInvalidError,
)
from interview_engine.schemas.responses import ErrorItem, ResponseEnvelope

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "strict-origin-when-cross-origin",
}

NO_STORE_HEADERS = {
    "Cache-Control": "no-store, no-cache, must-revalidate",
    "Pragma": "no-cache",
}

UNEXPECTED_FORMAT_MESSAGE = "AI service returned an unexpected response format"
NO_TEXT_MESSAGE = "AI service returned an empty response"
INTERNAL_ERROR_MESSAGE = "An unexpected error occurred"

# Caller faults whose messages are safe to return verbatim.
_CALLER_FAULTS: tuple[tuple[type[InterviewEngineError], int], ...] = (
    (AuthRequiredError, status.HTTP_401_UNAUTHORIZED),
    (RateLimitExceededError, status.HTTP_429_TOO_MANY_REQUESTS),
    (MalformedBodyError, status.HTTP_400_BAD_REQUEST),
    (FieldValidationError, status.HTTP_400_BAD_REQUEST),
    (NotFoundError, status.HTTP_404_NOT_FOUND),
)

_UPSTREAM_FAULTS: tuple[tuple[type[InterviewEngineError], str], ...] = (
    (NoTextInReplyError, NO_TEXT_MESSAGE),
    (ExtractionFailedError, UNEXPECTED_FORMAT_MESSAGE),
    (StructureInvalidError, UNEXPECTED_FORMAT_MESSAGE),
)


def status_for(error: InterviewEngineError) -> int:
    """Return the HTTP status code for a pipeline error."""
    for error_type, status_code in _CALLER_FAULTS:
        if isinstance(error, error_type):
            return status_code
    for error_type, _ in _UPSTREAM_FAULTS:
        if isinstance(error, error_type):
            return status.HTTP_502_BAD_GATEWAY
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def public_message(error: InterviewEngineError) -> str:
    """Return the message that may be shown to the caller for an error."""
    if any(isinstance(error, error_type) for error_type, _ in _CALLER_FAULTS):
        return error.message
    for error_type, message in _UPSTREAM_FAULTS:
        if isinstance(error, error_type):
            return message
    return INTERNAL_ERROR_MESSAGE


def response_headers(mutating: bool) -> dict[str, str]:
    """Build the fixed header set for a response."""
    headers = dict(SECURITY_HEADERS)
    if mutating:
        headers.update(NO_STORE_HEADERS)
    return headers


def build_success_response(
    data: dict[str, Any],
    status_code: int = status.HTTP_200_OK,
    mutating: bool = True,
) -> JSONResponse:
    """Wrap a payload in a success envelope.

    Args:
        data: Response payload
        status_code: HTTP status code
        mutating: Whether the endpoint changes state; adds no-store headers

    Returns:
        JSON response
    """
    envelope = ResponseEnvelope(success=True, data=data)
    return JSONResponse(
        status_code=status_code,
        content=envelope.model_dump(exclude_none=True),
        headers=response_headers(mutating),
    )


def build_error_response(error: InterviewEngineError, mutating: bool = True) -> JSONResponse:
    """Translate a pipeline error into an error envelope.

    Field-level errors are included only for validation failures; 429
    responses carry a Retry-After header.

    Args:
        error: Pipeline error
        mutating: Whether the endpoint changes state; adds no-store headers

    Returns:
        JSON response
    """
    errors = None
    if isinstance(error, FieldValidationError):
        errors = [ErrorItem(field=item["field"], message=item["message"]) for item in error.errors]

    envelope = ResponseEnvelope(success=False, error=public_message(error), errors=errors)
    headers = response_headers(mutating)
    if isinstance(error, RateLimitExceededError):
        headers["Retry-After"] = str(error.retry_after)

    return JSONResponse(
        status_code=status_for(error),
        content=envelope.model_dump(exclude_none=True),
        headers=headers,
    )
