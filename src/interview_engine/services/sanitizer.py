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
"""Text sanitization for request fields and generated content.

Every string accepted from a caller, and every string taken from a
generation reply, passes through sanitize() before use. No markup survives:
script and style blocks are dropped with their content, remaining tags are
stripped, then a second pass removes entities, stray angle brackets,
script URL schemes and inline event-handler attributes.
"""

import re
from collections.abc import Mapping
from typing import Any

_BLOCK_ELEMENTS = re.compile(
    r"<(script|style|iframe|object|embed|noscript|template)\b[^>]*>.*?</\1\s*>",
    re.IGNORECASE | re.DOTALL,
)
# Unterminated block elements swallow the rest of the input
_OPEN_BLOCK_ELEMENTS = re.compile(
    r"<(script|style|iframe|object|embed|noscript|template)\b.*\Z",
    re.IGNORECASE | re.DOTALL,
)
_COMMENTS = re.compile(r"<!--.*?(-->|\Z)", re.DOTALL)
_TAGS = re.compile(r"</?[A-Za-z!?][^>]*>")

_ENTITIES = re.compile(r"&(#\d+|#x[0-9a-f]+|[a-z][a-z0-9]*);", re.IGNORECASE)
_RESIDUAL_TAGS = re.compile(r"<[^>]*>")
_ANGLE_BRACKETS = re.compile(r"[<>]")
_SCRIPT_SCHEMES = re.compile(r"(javascript|vbscript|livescript)\s*:", re.IGNORECASE)
_EVENT_HANDLERS = re.compile(r"\bon\w+\s*=", re.IGNORECASE)

_RESIDUAL_PASSES = (
    _ENTITIES,
    _RESIDUAL_TAGS,
    _ANGLE_BRACKETS,
    _SCRIPT_SCHEMES,
    _EVENT_HANDLERS,
)


def _strip_markup(text: str) -> str:
    text = _BLOCK_ELEMENTS.sub("", text)
    text = _OPEN_BLOCK_ELEMENTS.sub("", text)
    text = _COMMENTS.sub("", text)
    return _TAGS.sub("", text)


def _strip_residue(text: str) -> str:
    # Removing one pattern can splice together another, so repeat to a fixpoint
    while True:
        cleaned = text
        for pattern in _RESIDUAL_PASSES:
            cleaned = pattern.sub("", cleaned)
        if cleaned == text:
            return cleaned
        text = cleaned


def sanitize(text: Any, max_length: int | None = None) -> str:
    """Remove markup and script vectors from text.

    Never raises. Sanitizing an already sanitized string returns it unchanged.

    Args:
        text: Value to sanitize; anything but a string yields ""
        max_length: Optional maximum length of the result

    Returns:
        Sanitized text
    """
    if not isinstance(text, str):
        return ""

    sanitized = _strip_markup(text.strip())
    sanitized = _strip_residue(sanitized).strip()

    if max_length is not None and len(sanitized) > max_length:
        sanitized = sanitized[:max_length].rstrip()

    return sanitized


def sanitize_fields(
    data: Mapping[str, Any], max_lengths: Mapping[str, int] | None = None
) -> dict[str, Any]:
    """Sanitize every string value of a validated field mapping.

    Args:
        data: Validated field values
        max_lengths: Optional per-field maximum lengths

    Returns:
        New mapping with string values sanitized and other values untouched
    """
    limits = max_lengths or {}
    return {
        name: sanitize(value, limits.get(name)) if isinstance(value, str) else value
        for name, value in data.items()
    }
