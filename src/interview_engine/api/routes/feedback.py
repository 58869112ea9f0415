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
"""Answer feedback endpoint router.

This module implements POST /api/feedback. Two body shapes are accepted:
a free-form prompt, or an answer given in a stored interview whose role
and stack are added to the review prompt.
"""

from collections.abc import Mapping
from typing import Any

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from interview_engine.api.dependencies import (
    get_generation_service,
    get_interview_store,
    get_request_pipeline,
)
from interview_engine.api.pipeline import AdmittedRequest, RequestPipeline
from interview_engine.config.logging import get_logger
from interview_engine.db.repositories import RecordStore
from interview_engine.exceptions import FieldValidationError
from interview_engine.schemas.requests import FEEDBACK_ANSWER_SCHEMA, FEEDBACK_PROMPT_SCHEMA
from interview_engine.schemas.validation import FieldSchema
from interview_engine.services.extraction import extract_json_with_strategy
from interview_engine.services.generation import GenerationService, build_answer_review_prompt
from interview_engine.services.interviews import get_owned_interview
from interview_engine.services.normalizer import normalize_feedback

logger = get_logger(__name__)

router = APIRouter(prefix="/api", tags=["feedback"])


def select_feedback_schema(body: Any) -> Mapping[str, FieldSchema]:
    """Pick the prompt shape when the body has a prompt key, else the answer shape."""
    if isinstance(body, Mapping) and "prompt" in body:
        return FEEDBACK_PROMPT_SCHEMA
    return FEEDBACK_ANSWER_SCHEMA


@router.post(
    "/feedback",
    summary="Generate answer feedback",
    description=(
        "Rates an interview answer from 1 to 10 and returns short feedback with "
        "strengths and improvements. Accepts either a prompt or a reference to a "
        "stored interview plus the candidate answer."
    ),
    responses={
        200: {
            "description": "Feedback generated",
            "content": {
                "application/json": {
                    "example": {
                        "success": True,
                        "data": {
                            "rating": 7,
                            "feedback": "Solid answer with a clear example.",
                            "strengths": ["Clear structure"],
                            "improvements": ["Mention trade-offs"],
                        },
                    }
                }
            },
        },
        400: {"description": "Malformed body, field validation failure or unknown interview"},
        401: {"description": "Authentication required"},
        429: {"description": "Rate limit exceeded"},
        502: {"description": "Generation service returned unusable content"},
    },
)
async def generate_feedback(
    request: Request,
    pipeline: RequestPipeline = Depends(get_request_pipeline),
    generation_service: GenerationService = Depends(get_generation_service),
    interview_store: RecordStore = Depends(get_interview_store),
) -> JSONResponse:
    """Generate feedback for a candidate answer."""

    async def handle(admitted: AdmittedRequest) -> dict[str, Any]:
        data = admitted.data
        if "prompt" in data:
            prompt = data["prompt"]
        else:
            interview = get_owned_interview(interview_store, data["mockIdRef"], admitted.actor_id)
            if interview is None:
                raise FieldValidationError(
                    [
                        {
                            "field": "mockIdRef",
                            "message": "Interview not found",
                            "code": "NOT_FOUND",
                        }
                    ]
                )
            prompt = build_answer_review_prompt(
                interview["job_position"],
                interview["job_desc"],
                data.get("question"),
                data["userAnswer"],
            )

        text = await generation_service.generate_feedback(prompt)
        payload, strategy = extract_json_with_strategy(text)
        feedback = normalize_feedback(payload)
        logger.info(
            "Feedback normalized",
            extra={
                "request_id": admitted.request_id,
                "strategy": strategy,
                "rating": feedback.rating,
            },
        )
        return feedback.model_dump(exclude={"kind"})

    return await pipeline.run(request, handle, select_feedback_schema)
