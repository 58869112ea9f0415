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
"""Response contracts for generated content and the response envelope.

The two generated shapes, question set and feedback, are the only payloads
the service returns from the generation service. Unrecognized marks an
extracted payload that matches neither.
"""

from typing import Any, Literal

from pydantic import BaseModel, Field


class InterviewQuestion(BaseModel):
    """One generated interview question with its model answer."""

    question: str = Field(..., min_length=1)
    answer: str = Field(..., min_length=1)


class NormalizedQuestionSet(BaseModel):
    """Validated question-set payload.

    Attributes:
        questions: Non-empty list of question and answer pairs
    """

    kind: Literal["question_set"] = "question_set"
    questions: list[InterviewQuestion] = Field(..., min_length=1)


class NormalizedFeedback(BaseModel):
    """Validated feedback payload.

    Attributes:
        rating: Score clamped into 1..10
        feedback: Short free-text assessment
        strengths: Positive observations
        improvements: Suggested improvements
    """

    kind: Literal["feedback"] = "feedback"
    rating: int = Field(..., ge=1, le=10)
    feedback: str
    strengths: list[str] = Field(default_factory=list)
    improvements: list[str] = Field(default_factory=list)


class Unrecognized(BaseModel):
    """Extracted payload matching no known contract."""

    kind: Literal["unrecognized"] = "unrecognized"
    reason: str


NormalizedPayload = NormalizedQuestionSet | NormalizedFeedback | Unrecognized


class ErrorItem(BaseModel):
    """Field-level error returned to the caller."""

    field: str
    message: str


class ResponseEnvelope(BaseModel):
    """Uniform wrapper for every response body.

    Attributes:
        success: True for successful requests
        data: Payload on success
        error: Stable public message on failure
        errors: Field-level details for caller-input failures
    """

    success: bool
    data: dict[str, Any] | None = None
    error: str | None = None
    errors: list[ErrorItem] | None = None


class HealthResponse(BaseModel):
    """Payload of the GET /health endpoint.

    Attributes:
        status: Service health status
        environment: Application environment
        debug: Debug mode flag
        model: Generation model name
        uptime_seconds: Service uptime in seconds
        database: Database connectivity status
        config_status: Configuration sanity check status
    """

    status: str = Field(..., description="Service health status (healthy, degraded)")
    environment: str = Field(..., description="Application environment")
    debug: bool = Field(..., description="Debug mode flag")
    model: str = Field(..., description="Generation model name")
    uptime_seconds: float = Field(..., description="Service uptime in seconds")
    database: str = Field(..., description="Database connectivity (ok, unavailable)")
    config_status: str = Field(..., description="Configuration sanity status (ok, warning)")
