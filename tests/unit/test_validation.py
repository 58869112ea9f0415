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
"""Unit tests for request schema validation."""

from types import MappingProxyType

import pytest
from pydantic import ValidationError

from interview_engine.schemas.requests import (
    FEEDBACK_ANSWER_SCHEMA,
    INTERVIEW_REQUEST_SCHEMA,
    SAVE_ANSWER_SCHEMA,
)
from interview_engine.schemas.validation import (
    MAX_LENGTH_ERROR,
    MAX_VALUE_ERROR,
    MIN_LENGTH_ERROR,
    MIN_VALUE_ERROR,
    NAN_ERROR,
    PATTERN_ERROR,
    REQUIRED_FIELD_MISSING,
    TYPE_ERROR,
    FieldSchema,
    validate,
)

ROLE_SCHEMA = MappingProxyType(
    {
        "jobPosition": FieldSchema(type="string", required=True, min_length=2, max_length=100),
        "jobDesc": FieldSchema(type="string", required=True, min_length=10, max_length=1000),
    }
)


def _codes(outcome) -> dict[str, list[str]]:
    codes: dict[str, list[str]] = {}
    for error in outcome.errors:
        codes.setdefault(error.field, []).append(error.code)
    return codes


class TestValidateStrings:
    """Test suite for string field checks."""

    def test_short_field_is_the_only_error(self) -> None:
        """Test a too-short description is reported while a valid title passes."""
        outcome = validate({"jobPosition": "Backend Engineer", "jobDesc": "Node"}, ROLE_SCHEMA)

        assert outcome.valid is False
        assert outcome.data is None
        assert len(outcome.errors) == 1
        assert outcome.errors[0].field == "jobDesc"
        assert outcome.errors[0].code == MIN_LENGTH_ERROR

    def test_valid_body_returns_declared_fields_only(self) -> None:
        """Test undeclared fields are dropped from the validated data."""
        body = {
            "jobPosition": "Backend Engineer",
            "jobDesc": "Python, FastAPI, PostgreSQL",
            "extra": "ignored",
        }

        outcome = validate(body, ROLE_SCHEMA)

        assert outcome.valid is True
        assert outcome.errors == []
        assert outcome.data == {
            "jobPosition": "Backend Engineer",
            "jobDesc": "Python, FastAPI, PostgreSQL",
        }

    def test_max_length(self) -> None:
        """Test over-long strings are rejected."""
        outcome = validate({"jobPosition": "A" * 101, "jobDesc": "x" * 20}, ROLE_SCHEMA)

        assert _codes(outcome) == {"jobPosition": [MAX_LENGTH_ERROR]}

    def test_non_string_is_type_error(self) -> None:
        """Test a number given for a string field is a type error."""
        outcome = validate({"jobPosition": 42, "jobDesc": "x" * 20}, ROLE_SCHEMA)

        assert _codes(outcome) == {"jobPosition": [TYPE_ERROR]}

    def test_pattern_mismatch(self) -> None:
        """Test job titles with disallowed characters fail the pattern."""
        body = {"jobPosition": "<b>Engineer</b>", "jobDesc": "x" * 20, "jobExperience": 3}

        outcome = validate(body, INTERVIEW_REQUEST_SCHEMA)

        assert _codes(outcome) == {"jobPosition": [PATTERN_ERROR]}

    def test_pattern_accepts_common_punctuation(self) -> None:
        """Test titles like C#/.NET developer pass."""
        body = {"jobPosition": "Sr. C#/.NET Developer (R&D)", "jobDesc": "x" * 20, "jobExperience": 3}

        assert validate(body, INTERVIEW_REQUEST_SCHEMA).valid is True

    def test_pattern_on_optional_enum_field(self) -> None:
        """Test isSkipped only accepts true or false."""
        body = {
            "mockIdRef": "abc",
            "question": "What is a closure?",
            "userAnswer": "A function with captured scope",
            "isSkipped": "maybe",
        }

        assert _codes(validate(body, SAVE_ANSWER_SCHEMA)) == {"isSkipped": [PATTERN_ERROR]}


class TestValidateNumbers:
    """Test suite for numeric field checks and coercion."""

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [(3, 3), (2.5, 2.5), ("7", 7), (" 4 ", 4), ("1e1", 10), (5.0, 5)],
    )
    def test_coercion(self, raw: object, expected: float) -> None:
        """Test JSON numbers and numeric strings are coerced."""
        body = {"jobPosition": "Engineer", "jobDesc": "x" * 20, "jobExperience": raw}

        outcome = validate(body, INTERVIEW_REQUEST_SCHEMA)

        assert outcome.valid is True
        assert outcome.data["jobExperience"] == expected
        assert type(outcome.data["jobExperience"]) is type(expected)

    @pytest.mark.parametrize("raw", ["abc", "", "NaN", "Infinity", "-inf", "1_0", "2_5.5"])
    def test_unparseable_is_nan_error(self, raw: str) -> None:
        """Test non-numeric, non-finite and digit-grouped strings produce NAN_ERROR."""
        body = {"jobPosition": "Engineer", "jobDesc": "x" * 20, "jobExperience": raw}

        assert _codes(validate(body, INTERVIEW_REQUEST_SCHEMA)) == {"jobExperience": [NAN_ERROR]}

    @pytest.mark.parametrize("raw", [True, [3], {"years": 3}])
    def test_non_numeric_types_are_type_errors(self, raw: object) -> None:
        """Test booleans and containers are rejected outright."""
        body = {"jobPosition": "Engineer", "jobDesc": "x" * 20, "jobExperience": raw}

        assert _codes(validate(body, INTERVIEW_REQUEST_SCHEMA)) == {"jobExperience": [TYPE_ERROR]}

    def test_range(self) -> None:
        """Test values outside min and max are rejected."""
        low = {"jobPosition": "Engineer", "jobDesc": "x" * 20, "jobExperience": -1}
        high = {"jobPosition": "Engineer", "jobDesc": "x" * 20, "jobExperience": "81"}

        assert _codes(validate(low, INTERVIEW_REQUEST_SCHEMA)) == {"jobExperience": [MIN_VALUE_ERROR]}
        assert _codes(validate(high, INTERVIEW_REQUEST_SCHEMA)) == {
            "jobExperience": [MAX_VALUE_ERROR]
        }

    def test_bounds_are_inclusive(self) -> None:
        """Test the boundary values themselves are accepted."""
        for years in (0, 80):
            body = {"jobPosition": "Engineer", "jobDesc": "x" * 20, "jobExperience": years}
            assert validate(body, INTERVIEW_REQUEST_SCHEMA).valid is True


class TestValidateCollectsAll:
    """Test suite for error accumulation and required fields."""

    def test_all_errors_are_collected(self) -> None:
        """Test every failing field is reported in one pass."""
        outcome = validate({"jobPosition": "X", "jobExperience": "many"}, INTERVIEW_REQUEST_SCHEMA)

        assert _codes(outcome) == {
            "jobPosition": [MIN_LENGTH_ERROR],
            "jobDesc": [REQUIRED_FIELD_MISSING],
            "jobExperience": [NAN_ERROR],
        }

    def test_null_required_field_is_missing(self) -> None:
        """Test an explicit null counts as missing."""
        outcome = validate({"jobPosition": None, "jobDesc": "x" * 20}, ROLE_SCHEMA)

        assert _codes(outcome) == {"jobPosition": [REQUIRED_FIELD_MISSING]}

    def test_optional_field_may_be_absent(self) -> None:
        """Test optional fields are omitted from data when absent."""
        body = {"mockIdRef": "abc", "userAnswer": "My answer"}

        outcome = validate(body, FEEDBACK_ANSWER_SCHEMA)

        assert outcome.valid is True
        assert "question" not in outcome.data

    @pytest.mark.parametrize("body", [[1, 2], "text", 5, None])
    def test_non_object_body(self, body: object) -> None:
        """Test a body that is not an object yields a single body error."""
        outcome = validate(body, ROLE_SCHEMA)

        assert outcome.valid is False
        assert [(e.field, e.code) for e in outcome.errors] == [("body", TYPE_ERROR)]


class TestFieldSchema:
    """Test suite for FieldSchema declarations."""

    def test_invalid_pattern_is_rejected(self) -> None:
        """Test a schema with an uncompilable pattern cannot be declared."""
        with pytest.raises(ValidationError):
            FieldSchema(type="string", pattern="([a-z")

    def test_schema_is_immutable(self) -> None:
        """Test field schemas cannot be modified after declaration."""
        schema = FieldSchema(type="string", min_length=1)

        with pytest.raises(ValidationError):
            schema.min_length = 5
