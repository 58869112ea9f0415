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
"""Unit tests for JSON extraction from generation replies."""

import logging

import pytest

from interview_engine.exceptions import ExtractionFailedError
from interview_engine.services.extraction import (
    SNIPPET_LENGTH,
    extract_json,
    extract_json_with_strategy,
)


class TestExtractionStrategies:
    """Test suite for the ordered extraction strategies."""

    def test_direct_parse(self) -> None:
        """Test a bare JSON object is parsed by the first strategy."""
        assert extract_json_with_strategy('{"a":1}') == ({"a": 1}, "direct")

    def test_direct_parse_of_array(self) -> None:
        """Test a bare JSON array is accepted."""
        assert extract_json_with_strategy('[{"question":"Q"}]') == ([{"question": "Q"}], "direct")

    def test_fenced_json(self) -> None:
        """Test a json code fence is unwrapped by the second strategy."""
        text = '```json\n{"rating":12,"feedback":"Good"}\n```'

        value, strategy = extract_json_with_strategy(text)

        assert strategy == "fenced"
        assert value == {"rating": 12, "feedback": "Good"}

    def test_fence_without_language_tag(self) -> None:
        """Test a plain code fence is also unwrapped."""
        value, strategy = extract_json_with_strategy('```\n[1, 2]\n```')

        assert (value, strategy) == ([1, 2], "fenced")

    def test_fence_tag_is_case_insensitive(self) -> None:
        """Test JSON as the fence tag is accepted."""
        value, strategy = extract_json_with_strategy('  ```JSON\n{"a": true}\n```  ')

        assert (value, strategy) == ({"a": True}, "fenced")

    def test_embedded_object(self) -> None:
        """Test an object surrounded by prose is found by the object span."""
        text = 'Here you go: {"questions":[{"question":"Q1","answer":"A1"}]} Thanks'

        value, strategy = extract_json_with_strategy(text)

        assert strategy == "object_span"
        assert value == {"questions": [{"question": "Q1", "answer": "A1"}]}

    def test_embedded_array(self) -> None:
        """Test an array of scalars surrounded by prose is found by the array span."""
        assert extract_json_with_strategy('Tags: ["python", "sql"] done') == (
            ["python", "sql"],
            "array_span",
        )

    def test_object_span_takes_precedence_over_array_span(self) -> None:
        """Test an embedded array of objects yields its enclosed object first."""
        text = 'Questions: [{"question":"Q1","answer":"A1"}] end'

        value, strategy = extract_json_with_strategy(text)

        assert (value, strategy) == ({"question": "Q1", "answer": "A1"}, "object_span")

    def test_array_span_when_object_span_is_invalid(self) -> None:
        """Test the array span is tried after the object span fails."""
        text = 'Result: ["a", "b"] and a stray } brace'

        assert extract_json_with_strategy(text) == (["a", "b"], "array_span")

    def test_extract_json_returns_value_only(self) -> None:
        """Test extract_json drops the strategy name."""
        assert extract_json('{"ok": 1}') == {"ok": 1}


class TestExtractionFailures:
    """Test suite for extraction failures."""

    def test_no_json(self) -> None:
        """Test prose without JSON fails every strategy."""
        with pytest.raises(ExtractionFailedError) as exc_info:
            extract_json("no json here")

        assert exc_info.value.code == "EXTRACTION_FAILED"
        assert exc_info.value.snippet == "no json here"

    @pytest.mark.parametrize("text", ["42", '"just a string"', "true", "null"])
    def test_scalars_are_rejected(self, text: str) -> None:
        """Test JSON scalars are not accepted as extracted payloads."""
        with pytest.raises(ExtractionFailedError):
            extract_json(text)

    def test_non_standard_constants_are_rejected(self) -> None:
        """Test NaN and Infinity literals do not parse."""
        with pytest.raises(ExtractionFailedError):
            extract_json('{"rating": NaN}')

    def test_empty_text(self) -> None:
        """Test empty input fails with an empty snippet."""
        with pytest.raises(ExtractionFailedError) as exc_info:
            extract_json("")

        assert exc_info.value.snippet == ""

    def test_snippet_is_truncated_and_logged(self, caplog: pytest.LogCaptureFixture) -> None:
        """Test the failure snippet is limited to the first 100 characters."""
        text = "x" * 500

        with caplog.at_level(logging.WARNING, logger="interview_engine.services.extraction"):
            with pytest.raises(ExtractionFailedError) as exc_info:
                extract_json(text)

        assert exc_info.value.snippet == "x" * SNIPPET_LENGTH
        assert any(record.snippet == "x" * SNIPPET_LENGTH for record in caplog.records)

    def test_unbalanced_braces(self) -> None:
        """Test a closing brace before the opening one is not a span."""
        with pytest.raises(ExtractionFailedError):
            extract_json("} nothing here {")
