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
"""Recovery of JSON payloads from free-form generation replies.

Generation services are asked for raw JSON but often wrap it in code
fences or commentary. Strategies are tried in order and the first one that
parses to a JSON object or array wins:

1. the whole text
2. the interior of a single fenced block (optionally tagged json)
3. the span from the first "{" to the last "}"
4. the span from the first "[" to the last "]"
"""

import json
import re
from collections.abc import Callable
from typing import Any

from interview_engine.config.logging import get_logger
from interview_engine.exceptions import ExtractionFailedError

logger = get_logger(__name__)

SNIPPET_LENGTH = 100

_FENCE_PATTERN = re.compile(r"^```(?:json)?\s*([\s\S]*?)\s*```$", re.IGNORECASE)


def _reject_constant(name: str) -> Any:
    raise ValueError(f"Non-standard JSON constant: {name}")


def _parse(candidate: str) -> dict | list | None:
    try:
        value = json.loads(candidate, parse_constant=_reject_constant)
    except ValueError:
        return None
    return value if isinstance(value, dict | list) else None


def _direct(text: str) -> dict | list | None:
    return _parse(text)


def _fenced(text: str) -> dict | list | None:
    match = _FENCE_PATTERN.match(text.strip())
    if match is None or not match.group(1):
        return None
    return _parse(match.group(1))


def _enclosed(opening: str, closing: str) -> Callable[[str], dict | list | None]:
    def strategy(text: str) -> dict | list | None:
        first = text.find(opening)
        last = text.rfind(closing)
        if first == -1 or last <= first:
            return None
        return _parse(text[first : last + 1])

    return strategy


STRATEGIES: tuple[tuple[str, Callable[[str], dict | list | None]], ...] = (
    ("direct", _direct),
    ("fenced", _fenced),
    ("object_span", _enclosed("{", "}")),
    ("array_span", _enclosed("[", "]")),
)


def extract_json_with_strategy(text: str) -> tuple[dict | list, str]:
    """Recover a JSON value from text and report which strategy found it.

    Args:
        text: Raw reply text

    Returns:
        Tuple of (parsed object or array, strategy name)

    Raises:
        ExtractionFailedError: If no strategy yields an object or array
    """
    if isinstance(text, str) and text:
        for name, strategy in STRATEGIES:
            value = strategy(text)
            if value is not None:
                logger.debug("Extracted JSON from reply", extra={"strategy": name})
                return value, name

    snippet = text[:SNIPPET_LENGTH] if isinstance(text, str) else ""
    logger.warning(
        "No extraction strategy recovered JSON",
        extra={"snippet": snippet, "text_length": len(text) if isinstance(text, str) else 0},
    )
    raise ExtractionFailedError(snippet)


def extract_json(text: str) -> dict | list:
    """Recover a JSON object or array from free-form text.

    Args:
        text: Raw reply text

    Returns:
        Parsed JSON object or array

    Raises:
        ExtractionFailedError: If every strategy fails
    """
    value, _ = extract_json_with_strategy(text)
    return value
