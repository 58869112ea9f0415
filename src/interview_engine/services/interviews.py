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
"""Interview and answer records.

Translates between API payloads and the records kept in the interview and
answer stores. Every lookup is scoped to the actor that created the record.
"""

import json
import uuid
from datetime import UTC, datetime
from typing import Any

from interview_engine.config.logging import get_logger
from interview_engine.db.repositories import RecordStore
from interview_engine.schemas.responses import NormalizedQuestionSet

logger = get_logger(__name__)


def _now_iso() -> str:
    return datetime.now(UTC).isoformat()


def _format_number(value: int | float) -> str:
    return f"{value:g}"


def create_interview(
    store: RecordStore,
    actor_id: str,
    role: str,
    stack: str,
    years: int | float,
    question_set: NormalizedQuestionSet,
) -> dict[str, Any]:
    """Persist a generated interview.

    Args:
        store: Interview store
        actor_id: Owner of the interview
        role: Sanitized job position
        stack: Sanitized job description
        years: Years of experience
        question_set: Normalized generated questions

    Returns:
        Response payload with the new mockId and the questions

    Raises:
        PersistenceError: If the record cannot be written
    """
    mock_id = str(uuid.uuid4())
    questions = [question.model_dump() for question in question_set.questions]
    store.insert(
        {
            "mock_id": mock_id,
            "json_mock_resp": json.dumps(questions),
            "job_position": role,
            "job_desc": stack,
            "job_experience": _format_number(years),
            "created_by": actor_id,
            "created_at": _now_iso(),
        }
    )
    logger.info(
        "Interview created",
        extra={"mock_id": mock_id, "question_count": len(questions)},
    )
    return {"mockId": mock_id, "questions": questions, "role": role, "experience": years}


def get_owned_interview(store: RecordStore, mock_id: str, actor_id: str) -> dict[str, Any] | None:
    """Return the interview with mock_id if actor_id created it."""
    records = store.select({"mock_id": mock_id, "created_by": actor_id})
    return records[0] if records else None


def interview_summary(record: dict[str, Any]) -> dict[str, Any]:
    """Public fields of an interview record, without its questions."""
    return {
        "mockId": record["mock_id"],
        "jobPosition": record["job_position"],
        "jobDesc": record["job_desc"],
        "jobExperience": record["job_experience"],
        "createdAt": record["created_at"],
    }


def interview_detail(record: dict[str, Any]) -> dict[str, Any]:
    """Public fields of an interview record with its decoded questions.

    Rows whose stored questions cannot be decoded are returned with an
    empty question list.
    """
    try:
        questions = json.loads(record["json_mock_resp"])
    except (TypeError, ValueError):
        logger.warning(
            "Stored interview questions are not valid JSON",
            extra={"mock_id": record["mock_id"]},
        )
        questions = []
    if not isinstance(questions, list):
        questions = []
    return {**interview_summary(record), "questions": questions}


def list_interviews(store: RecordStore, actor_id: str) -> list[dict[str, Any]]:
    """List an actor's interviews, newest first."""
    records = store.select({"created_by": actor_id})
    return [interview_summary(record) for record in reversed(records)]


def save_answer(store: RecordStore, actor_id: str, data: dict[str, Any]) -> dict[str, Any]:
    """Persist one recorded answer.

    Args:
        store: Answer store
        actor_id: Actor recording the answer
        data: Admitted fields of a save-answer request

    Returns:
        Response payload with the new answer id

    Raises:
        PersistenceError: If the record cannot be written
    """
    rating = data.get("rating")
    answer_id = store.insert(
        {
            "mock_id_ref": data["mockIdRef"],
            "question": data["question"],
            "user_ans": data["userAnswer"],
            "correct_answer": data.get("correctAnswer"),
            "feedback": data.get("feedback"),
            "score": _format_number(rating) if rating is not None else None,
            "is_skipped": data.get("isSkipped", "false"),
            "created_by": actor_id,
            "created_at": _now_iso(),
        }
    )
    return {"id": answer_id, "mockIdRef": data["mockIdRef"]}


def answer_view(record: dict[str, Any]) -> dict[str, Any]:
    """Public fields of an answer record."""
    return {
        "id": record["id"],
        "mockIdRef": record["mock_id_ref"],
        "question": record["question"],
        "userAnswer": record["user_ans"],
        "correctAnswer": record["correct_answer"],
        "feedback": record["feedback"],
        "rating": record["score"],
        "isSkipped": record["is_skipped"] == "true",
        "createdAt": record["created_at"],
    }


def list_answers(store: RecordStore, mock_id: str, actor_id: str) -> list[dict[str, Any]]:
    """List an actor's answers for one interview, oldest first."""
    records = store.select({"mock_id_ref": mock_id, "created_by": actor_id})
    return [answer_view(record) for record in records]
