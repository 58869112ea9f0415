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
"""Interview question generation endpoint router.

This module implements POST /api/generate: admit the request, ask the
generation service for questions, extract and normalize them, and persist
the interview.
"""

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
from interview_engine.schemas.requests import INTERVIEW_REQUEST_SCHEMA
from interview_engine.services.extraction import extract_json_with_strategy
from interview_engine.services.generation import GenerationService
from interview_engine.services.interviews import create_interview
from interview_engine.services.normalizer import normalize_question_set

logger = get_logger(__name__)

router = APIRouter(prefix="/api", tags=["generate"])


@router.post(
    "/generate",
    summary="Generate interview questions",
    description=(
        "Generates 5 to 10 interview questions with model answers for a job position, "
        "description and experience level, and stores them as a new mock interview."
    ),
    responses={
        200: {
            "description": "Questions generated and interview stored",
            "content": {
                "application/json": {
                    "example": {
                        "success": True,
                        "data": {
                            "mockId": "550e8400-e29b-41d4-a716-446655440000",
                            "questions": [
                                {"question": "What is a closure?", "answer": "A function..."}
                            ],
                            "role": "Backend Engineer",
                            "experience": 3,
                        },
                    }
                }
            },
        },
        400: {"description": "Malformed body or field validation failure"},
        401: {"description": "Authentication required"},
        429: {"description": "Rate limit exceeded"},
        502: {"description": "Generation service returned unusable content"},
    },
)
async def generate_questions(
    request: Request,
    pipeline: RequestPipeline = Depends(get_request_pipeline),
    generation_service: GenerationService = Depends(get_generation_service),
    interview_store: RecordStore = Depends(get_interview_store),
) -> JSONResponse:
    """Generate and store a mock interview."""

    async def handle(admitted: AdmittedRequest) -> dict:
        role = admitted.data["jobPosition"]
        stack = admitted.data["jobDesc"]
        years = admitted.data["jobExperience"]

        text = await generation_service.generate_questions(role, stack, years)
        payload, strategy = extract_json_with_strategy(text)
        question_set = normalize_question_set(payload)
        logger.info(
            "Questions normalized",
            extra={
                "request_id": admitted.request_id,
                "strategy": strategy,
                "question_count": len(question_set.questions),
            },
        )
        return create_interview(interview_store, admitted.actor_id, role, stack, years, question_set)

    return await pipeline.run(request, handle, INTERVIEW_REQUEST_SCHEMA)
