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
"""Declarative field validation for inbound request bodies.

Each request type declares a mapping of field name to FieldSchema. The
validator walks every declared field and accumulates all errors before
returning, so a caller can fix every problem in one round trip.
"""

import math
import re
from collections.abc import Mapping
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from interview_engine.config.logging import get_logger

logger = get_logger(__name__)

REQUIRED_FIELD_MISSING = "REQUIRED_FIELD_MISSING"
TYPE_ERROR = "TYPE_ERROR"
MIN_LENGTH_ERROR = "MIN_LENGTH_ERROR"
MAX_LENGTH_ERROR = "MAX_LENGTH_ERROR"
PATTERN_ERROR = "PATTERN_ERROR"
NAN_ERROR = "NAN_ERROR"
MIN_VALUE_ERROR = "MIN_VALUE_ERROR"
MAX_VALUE_ERROR = "MAX_VALUE_ERROR"


class FieldSchema(BaseModel):
    """Constraints for a single request field.

    Attributes:
        type: Expected value type
        required: Whether the field must be present and non-null
        min_length: Minimum string length
        max_length: Maximum string length
        min: Minimum numeric value
        max: Maximum numeric value
        pattern: Regular expression the string must match
    """

    model_config = ConfigDict(frozen=True)

    type: Literal["string", "number"]
    required: bool = False
    min_length: int | None = Field(default=None, ge=0)
    max_length: int | None = Field(default=None, ge=0)
    min: float | None = None
    max: float | None = None
    pattern: str | None = None

    @field_validator("pattern")
    @classmethod
    def validate_pattern(cls, v: str | None) -> str | None:
        """Ensure the pattern compiles when the schema is declared."""
        if v is not None:
            try:
                re.compile(v)
            except re.error as e:
                raise ValueError(f"Invalid pattern: {e}") from e
        return v


class FieldError(BaseModel):
    """A single field-level validation failure."""

    field: str
    message: str
    code: str


class ValidationOutcome(BaseModel):
    """Result of validating a request body against a schema.

    Attributes:
        valid: True when no field produced an error
        data: Coerced field values, only set when valid
        errors: Every error found across all fields
    """

    valid: bool
    data: dict[str, Any] | None = None
    errors: list[FieldError] = Field(default_factory=list)


def _parse_number(value: Any) -> int | float | None:
    """Coerce a JSON number or numeric string to a finite number.

    Returns:
        The number (int when integral), or None if it cannot be parsed
    """
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        number = value
    else:
        # float() also reads digit groups like "1_000"
        if "_" in value:
            return None
        try:
            number = float(value.strip())
        except ValueError:
            return None

    if not math.isfinite(number):
        return None
    return int(number) if number.is_integer() else number


def _check_string(
    name: str, value: Any, schema: FieldSchema, errors: list[FieldError]
) -> str | None:
    if not isinstance(value, str):
        errors.append(
            FieldError(
                field=name,
                message=f"Expected string, got {type(value).__name__}",
                code=TYPE_ERROR,
            )
        )
        return None

    found = len(errors)
    if schema.min_length is not None and len(value) < schema.min_length:
        errors.append(
            FieldError(
                field=name,
                message=f"Minimum length is {schema.min_length} characters",
                code=MIN_LENGTH_ERROR,
            )
        )
    if schema.max_length is not None and len(value) > schema.max_length:
        errors.append(
            FieldError(
                field=name,
                message=f"Maximum length is {schema.max_length} characters",
                code=MAX_LENGTH_ERROR,
            )
        )
    if schema.pattern is not None and not re.search(schema.pattern, value):
        errors.append(FieldError(field=name, message="Invalid format", code=PATTERN_ERROR))

    return value if len(errors) == found else None


def _check_number(
    name: str, value: Any, schema: FieldSchema, errors: list[FieldError]
) -> int | float | None:
    # bool is an int subclass but never a valid number here
    if isinstance(value, bool) or not isinstance(value, int | float | str):
        errors.append(
            FieldError(
                field=name,
                message=f"Expected number, got {type(value).__name__}",
                code=TYPE_ERROR,
            )
        )
        return None

    number = _parse_number(value)
    if number is None:
        errors.append(FieldError(field=name, message="Invalid number format", code=NAN_ERROR))
        return None

    found = len(errors)
    if schema.min is not None and number < schema.min:
        errors.append(
            FieldError(
                field=name,
                message=f"Minimum value is {schema.min:g}",
                code=MIN_VALUE_ERROR,
            )
        )
    if schema.max is not None and number > schema.max:
        errors.append(
            FieldError(
                field=name,
                message=f"Maximum value is {schema.max:g}",
                code=MAX_VALUE_ERROR,
            )
        )

    return number if len(errors) == found else None


def validate(body: Any, schema: Mapping[str, FieldSchema]) -> ValidationOutcome:
    """Validate a request body against a field schema.

    Every declared field is checked and all errors are collected. Fields not
    declared in the schema are ignored and never appear in the output data.

    Args:
        body: Parsed request body
        schema: Mapping of field name to constraints

    Returns:
        ValidationOutcome with coerced data when valid, or the full error list
    """
    if not isinstance(body, Mapping):
        return ValidationOutcome(
            valid=False,
            errors=[
                FieldError(
                    field="body",
                    message="Request body must be an object",
                    code=TYPE_ERROR,
                )
            ],
        )

    errors: list[FieldError] = []
    data: dict[str, Any] = {}

    for name, field_schema in schema.items():
        value = body.get(name)

        if value is None:
            if field_schema.required:
                errors.append(
                    FieldError(
                        field=name,
                        message="Required field is missing",
                        code=REQUIRED_FIELD_MISSING,
                    )
                )
            continue

        if field_schema.type == "string":
            checked = _check_string(name, value, field_schema, errors)
        else:
            checked = _check_number(name, value, field_schema, errors)

        if checked is not None:
            data[name] = checked

    if errors:
        logger.debug(
            "Request body failed validation",
            extra={"error_count": len(errors), "fields": sorted({e.field for e in errors})},
        )
        return ValidationOutcome(valid=False, errors=errors)

    return ValidationOutcome(valid=True, data=data)
