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
"""Interview and answer record endpoints.

Stored interviews and answers are only visible to the actor that created
them; a record owned by someone else is reported as not found.
"""

from typing import Any

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from interview_engine.api.dependencies import (
    get_answer_store,
    get_interview_store,
    get_request_pipeline,
)
from interview_engine.api.pipeline import AdmittedRequest, RequestPipeline
from interview_engine.db.repositories import RecordStore
from interview_engine.exceptions import FieldValidationError, NotFoundError
from interview_engine.schemas.requests import SAVE_ANSWER_SCHEMA
from interview_engine.services.interviews import (
    get_owned_interview,
    interview_detail,
    list_answers,
    list_interviews,
    save_answer,
)

router = APIRouter(prefix="/api", tags=["interviews"])


def _require_interview(store: RecordStore, mock_id: str, actor_id: str) -> dict[str, Any]:
    interview = get_owned_interview(store, mock_id, actor_id)
    if interview is None:
        raise NotFoundError("Interview not found")
    return interview


@router.get("/interviews", summary="List the caller's interviews")
async def get_interviews(
    request: Request,
    pipeline: RequestPipeline = Depends(get_request_pipeline),
    interview_store: RecordStore = Depends(get_interview_store),
) -> JSONResponse:
    """List interviews created by the caller, newest first."""

    async def handle(admitted: AdmittedRequest) -> dict[str, Any]:
        return {"interviews": list_interviews(interview_store, admitted.actor_id)}

    return await pipeline.run(request, handle, mutating=False)


@router.get("/interviews/{mock_id}", summary="Get one interview with its questions")
async def get_interview(
    mock_id: str,
    request: Request,
    pipeline: RequestPipeline = Depends(get_request_pipeline),
    interview_store: RecordStore = Depends(get_interview_store),
) -> JSONResponse:
    """Return one of the caller's interviews."""

    async def handle(admitted: AdmittedRequest) -> dict[str, Any]:
        return interview_detail(_require_interview(interview_store, mock_id, admitted.actor_id))

    return await pipeline.run(request, handle, mutating=False)


@router.get("/interviews/{mock_id}/answers", summary="List answers recorded for an interview")
async def get_interview_answers(
    mock_id: str,
    request: Request,
    pipeline: RequestPipeline = Depends(get_request_pipeline),
    interview_store: RecordStore = Depends(get_interview_store),
    answer_store: RecordStore = Depends(get_answer_store),
) -> JSONResponse:
    """Return the caller's answers for one of their interviews."""

    async def handle(admitted: AdmittedRequest) -> dict[str, Any]:
        _require_interview(interview_store, mock_id, admitted.actor_id)
        return {"mockId": mock_id, "answers": list_answers(answer_store, mock_id, admitted.actor_id)}

    return await pipeline.run(request, handle, mutating=False)


@router.post("/answers", summary="Record an answer to an interview question")
async def post_answer(
    request: Request,
    pipeline: RequestPipeline = Depends(get_request_pipeline),
    interview_store: RecordStore = Depends(get_interview_store),
    answer_store: RecordStore = Depends(get_answer_store),
) -> JSONResponse:
    """Store one answer for an interview owned by the caller."""

    async def handle(admitted: AdmittedRequest) -> dict[str, Any]:
        mock_id = admitted.data["mockIdRef"]
        if get_owned_interview(interview_store, mock_id, admitted.actor_id) is None:
            raise FieldValidationError(
                [{"field": "mockIdRef", "message": "Interview not found", "code": "NOT_FOUND"}]
            )
        return save_answer(answer_store, admitted.actor_id, admitted.data)

    return await pipeline.run(request, handle, SAVE_ANSWER_SCHEMA)
