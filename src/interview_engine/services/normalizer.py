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
"""Normalization of extracted generation payloads.

Payloads are classified structurally into a question set, a feedback
record, or unrecognized. Values are coerced and sanitized on the way in:
malformed question entries are dropped, the feedback rating is clamped,
and optional lists default to empty.
"""

import math
from typing import Any

from interview_engine.config.logging import get_logger
from interview_engine.exceptions import StructureInvalidError
from interview_engine.schemas.responses import (
    InterviewQuestion,
    NormalizedFeedback,
    NormalizedPayload,
    NormalizedQuestionSet,
    Unrecognized,
)
from interview_engine.services.sanitizer import sanitize

logger = get_logger(__name__)

QUESTION_KEYS = ("questions", "interviewQuestions")
FEEDBACK_KEYS = ("rating", "feedback")

RATING_MIN = 1
RATING_MAX = 10

QUESTION_MAX_LENGTH = 1000
ANSWER_MAX_LENGTH = 2000
FEEDBACK_MAX_LENGTH = 5000
LIST_ITEM_MAX_LENGTH = 500


def _question_items(payload: Any) -> list | None:
    if isinstance(payload, list):
        return payload
    if isinstance(payload, dict):
        for key in QUESTION_KEYS:
            items = payload.get(key)
            if isinstance(items, list):
                return items
    return None


def _coerce_question(item: Any) -> InterviewQuestion | None:
    if not isinstance(item, dict):
        return None
    question = sanitize(item.get("question"), QUESTION_MAX_LENGTH)
    answer = sanitize(item.get("answer"), ANSWER_MAX_LENGTH)
    if not question or not answer:
        return None
    return InterviewQuestion(question=question, answer=answer)


def _string_list(value: Any) -> list[str]:
    if not isinstance(value, list):
        return []
    cleaned = (sanitize(item, LIST_ITEM_MAX_LENGTH) for item in value if isinstance(item, str))
    return [item for item in cleaned if item]


def _to_question_set(items: list) -> NormalizedQuestionSet | Unrecognized:
    questions = [q for q in (_coerce_question(item) for item in items) if q is not None]
    if not questions:
        return Unrecognized(reason="no valid question entries")
    dropped = len(items) - len(questions)
    if dropped:
        logger.info("Dropped malformed question entries", extra={"dropped_count": dropped})
    return NormalizedQuestionSet(questions=questions)


def _to_feedback(payload: dict) -> NormalizedFeedback | Unrecognized:
    rating = payload.get("rating")
    if isinstance(rating, bool) or not isinstance(rating, int | float):
        return Unrecognized(reason="rating must be a number")
    if isinstance(rating, float) and not math.isfinite(rating):
        return Unrecognized(reason="rating must be finite")
    if not isinstance(payload.get("feedback"), str):
        return Unrecognized(reason="feedback must be a string")

    clamped = min(max(round(rating), RATING_MIN), RATING_MAX)
    return NormalizedFeedback(
        rating=clamped,
        feedback=sanitize(payload["feedback"], FEEDBACK_MAX_LENGTH),
        strengths=_string_list(payload.get("strengths")),
        improvements=_string_list(payload.get("improvements")),
    )


def classify(payload: Any) -> NormalizedPayload:
    """Classify and normalize an extracted payload by its structure.

    A list, or an object holding a questions/interviewQuestions list, is a
    question set. An object with a rating or feedback key is feedback.

    Args:
        payload: Extracted JSON value

    Returns:
        NormalizedQuestionSet, NormalizedFeedback, or Unrecognized
    """
    items = _question_items(payload)
    if items is not None:
        return _to_question_set(items)
    if isinstance(payload, dict) and any(key in payload for key in FEEDBACK_KEYS):
        return _to_feedback(payload)
    return Unrecognized(reason="no recognized keys")


def normalize_question_set(payload: Any) -> NormalizedQuestionSet:
    """Normalize a payload expected to be a question set.

    Args:
        payload: Extracted JSON value

    Returns:
        NormalizedQuestionSet with at least one question

    Raises:
        StructureInvalidError: If the payload is not a usable question set
    """
    result = classify(payload)
    if isinstance(result, NormalizedQuestionSet):
        return result
    reason = result.reason if isinstance(result, Unrecognized) else "got feedback payload"
    logger.warning("Question set payload rejected", extra={"reason": reason})
    raise StructureInvalidError(
        "No valid questions found in AI response", details={"reason": reason}
    )


def normalize_feedback(payload: Any) -> NormalizedFeedback:
    """Normalize a payload expected to be feedback.

    Args:
        payload: Extracted JSON value

    Returns:
        NormalizedFeedback with rating clamped into 1..10

    Raises:
        StructureInvalidError: If the payload is not usable feedback
    """
    result = classify(payload)
    if isinstance(result, NormalizedFeedback):
        return result
    reason = result.reason if isinstance(result, Unrecognized) else "got question set payload"
    logger.warning("Feedback payload rejected", extra={"reason": reason})
    raise StructureInvalidError(
        "Invalid feedback response structure", details={"reason": reason}
    )
