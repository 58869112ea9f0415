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
"""Unit tests for SQL record stores."""

from unittest.mock import MagicMock

import pytest
from sqlalchemy.exc import OperationalError

from interview_engine.db.models import MockInterview, UserAnswer
from interview_engine.db.repositories import SqlRecordStore
from interview_engine.exceptions import PersistenceError


def _interview(mock_id: str, created_by: str = "alice") -> dict:
    return {
        "mock_id": mock_id,
        "json_mock_resp": '[{"question": "Q", "answer": "A"}]',
        "job_position": "Backend Engineer",
        "job_desc": "Python and PostgreSQL",
        "job_experience": "3",
        "created_by": created_by,
        "created_at": "2025-01-01T00:00:00+00:00",
    }


class TestSqlRecordStore:
    """Test suite for SqlRecordStore against SQLite."""

    def test_insert_returns_id(self, session_factory) -> None:
        """Test inserts return increasing primary keys."""
        store = SqlRecordStore(session_factory, MockInterview)

        first = store.insert(_interview("m-1"))
        second = store.insert(_interview("m-2"))

        assert isinstance(first, int)
        assert second > first

    def test_select_by_equality(self, session_factory) -> None:
        """Test select returns only rows matching every condition."""
        store = SqlRecordStore(session_factory, MockInterview)
        store.insert(_interview("m-1", "alice"))
        store.insert(_interview("m-2", "bob"))
        store.insert(_interview("m-3", "alice"))

        records = store.select({"created_by": "alice"})

        assert [record["mock_id"] for record in records] == ["m-1", "m-3"]
        assert store.select({"mock_id": "m-2", "created_by": "alice"}) == []

    def test_records_are_keyed_by_attribute(self, session_factory) -> None:
        """Test records use attribute names, not column names."""
        store = SqlRecordStore(session_factory, MockInterview)
        store.insert(_interview("m-1"))

        record = store.select({"mock_id": "m-1"})[0]

        assert record["job_position"] == "Backend Engineer"
        assert "jobPosition" not in record
        assert set(record) == {
            "id",
            "mock_id",
            "json_mock_resp",
            "job_position",
            "job_desc",
            "job_experience",
            "created_by",
            "created_at",
        }

    def test_answer_defaults(self, session_factory) -> None:
        """Test isSkipped defaults to false for answers."""
        store = SqlRecordStore(session_factory, UserAnswer)
        store.insert({"mock_id_ref": "m-1", "question": "What is a closure?"})

        record = store.select({"mock_id_ref": "m-1"})[0]

        assert record["is_skipped"] == "false"
        assert record["user_ans"] is None

    def test_unknown_fields_are_rejected(self, session_factory) -> None:
        """Test unknown field names are a programming error."""
        store = SqlRecordStore(session_factory, MockInterview)

        with pytest.raises(ValueError, match="password"):
            store.insert({**_interview("m-1"), "password": "x"})
        with pytest.raises(ValueError):
            store.select({"jobPosition": "Backend Engineer"})

    def test_missing_required_column_is_persistence_error(self, session_factory) -> None:
        """Test integrity failures roll back and surface as PersistenceError."""
        store = SqlRecordStore(session_factory, MockInterview)

        with pytest.raises(PersistenceError):
            store.insert({"mock_id": "m-1"})

        assert store.select({}) == []

    def test_database_errors_are_wrapped(self) -> None:
        """Test driver failures on read surface as PersistenceError."""
        session = MagicMock()
        session.scalars.side_effect = OperationalError("SELECT", {}, Exception("down"))
        store = SqlRecordStore(MagicMock(return_value=session), MockInterview)

        with pytest.raises(PersistenceError) as exc_info:
            store.select({"mock_id": "m-1"})

        assert exc_info.value.details == {"table": "mockInterview"}
        session.close.assert_called_once()
