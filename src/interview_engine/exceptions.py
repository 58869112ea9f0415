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
"""Domain exceptions for Interview Engine.

This module defines the outcome taxonomy of the request pipeline. Every
exception carries a machine-readable code used for HTTP status mapping and
a message. Caller-input faults carry messages that are safe to return;
upstream and internal faults carry diagnostic details that are only logged.
"""

from typing import Any


class InterviewEngineError(Exception):
    """Base exception for all Interview Engine errors.

    Attributes:
        message: Human-readable error message
        code: Machine-readable error code for HTTP translation
        details: Optional additional error details
    """

    def __init__(self, message: str, code: str = "INTERNAL_ERROR", details: dict | None = None):
        """Initialize the exception.

        Args:
            message: Human-readable error message
            code: Machine-readable error code
            details: Optional additional error details
        """
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}


class AuthRequiredError(InterviewEngineError):
    """The caller could not be resolved to an actor."""

    def __init__(self, message: str = "Authentication required", details: dict | None = None):
        super().__init__(message, "AUTH_REQUIRED", details)


class RateLimitExceededError(InterviewEngineError):
    """The actor exhausted its request window.

    Attributes:
        retry_after: Seconds until the current window resets
    """

    def __init__(self, retry_after: int, details: dict | None = None):
        """Initialize rate limit error.

        Args:
            retry_after: Seconds until the caller may retry
            details: Optional additional error details
        """
        super().__init__(
            f"Too many requests. Retry after {retry_after}s",
            "RATE_LIMIT_EXCEEDED",
            details,
        )
        self.retry_after = retry_after


class MalformedBodyError(InterviewEngineError):
    """The request body is not a JSON object."""

    def __init__(self, message: str = "Invalid JSON in request body", details: dict | None = None):
        super().__init__(message, "INVALID_JSON", details)


class FieldValidationError(InterviewEngineError):
    """One or more request fields failed schema validation.

    Attributes:
        errors: Every field error found, as dicts with field, message and code
    """

    def __init__(
        self,
        errors: list[dict[str, Any]],
        message: str = "Validation failed",
        details: dict | None = None,
    ):
        """Initialize field validation error.

        Args:
            errors: Accumulated field errors
            message: Human-readable error message
            details: Optional additional error details
        """
        super().__init__(message, "VALIDATION_ERROR", details)
        self.errors = errors


class NotFoundError(InterviewEngineError):
    """A requested record does not exist or is not owned by the actor."""

    def __init__(self, message: str = "Resource not found", details: dict | None = None):
        super().__init__(message, "NOT_FOUND", details)


class NoTextInReplyError(InterviewEngineError):
    """The generation service reply carried no usable text."""

    def __init__(self, message: str = "No text content in AI response", details: dict | None = None):
        super().__init__(message, "NO_TEXT_IN_REPLY", details)


class ExtractionFailedError(InterviewEngineError):
    """No extraction strategy recovered JSON from the reply text.

    Attributes:
        snippet: First 100 characters of the offending text, for server logs only
    """

    def __init__(self, snippet: str, details: dict | None = None):
        """Initialize extraction error.

        Args:
            snippet: Leading fragment of the text that could not be parsed
            details: Optional additional error details
        """
        super().__init__(
            f"Failed to extract JSON from text: {snippet}...",
            "EXTRACTION_FAILED",
            details,
        )
        self.snippet = snippet


class StructureInvalidError(InterviewEngineError):
    """Extracted JSON matched none of the known response contracts."""

    def __init__(self, message: str = "Invalid response structure", details: dict | None = None):
        super().__init__(message, "STRUCTURE_INVALID", details)


class InternalError(InterviewEngineError):
    """Unclassified failure inside the pipeline."""

    def __init__(self, message: str = "An unexpected error occurred", details: dict | None = None):
        super().__init__(message, "INTERNAL_ERROR", details)


class PersistenceError(InterviewEngineError):
    """The record store failed to read or write."""

    def __init__(self, message: str = "Database operation failed", details: dict | None = None):
        super().__init__(message, "PERSISTENCE_ERROR", details)


class LLMServiceError(InterviewEngineError):
    """Exception for generation service errors.

    Used for wrapping OpenAI API errors and transport failures.
    """

    def __init__(self, message: str, code: str = "LLM_SERVICE_ERROR", details: dict | None = None):
        """Initialize LLM service error.

        Args:
            message: Human-readable error message
            code: Machine-readable error code
            details: Optional additional error details
        """
        super().__init__(message, code, details)


class LLMTimeoutError(LLMServiceError):
    """Exception for LLM request timeouts."""

    def __init__(self, message: str = "LLM request timed out", details: dict | None = None):
        super().__init__(message, "LLM_TIMEOUT", details)


class LLMRateLimitError(LLMServiceError):
    """Exception for LLM rate limit errors."""

    def __init__(self, message: str = "LLM rate limit exceeded", details: dict | None = None):
        super().__init__(message, "LLM_RATE_LIMIT", details)


class LLMAuthenticationError(LLMServiceError):
    """Exception for LLM authentication errors."""

    def __init__(self, message: str = "LLM authentication failed", details: dict | None = None):
        super().__init__(message, "LLM_AUTH_ERROR", details)
