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
"""Unit tests for logging setup."""

import logging
from collections.abc import Generator
from unittest.mock import MagicMock

import pytest

from interview_engine.config.logging import (
    GENERATION_LOGGERS,
    PERSISTENCE_LOGGERS,
    RequestIdFilter,
    setup_logging,
)

TOUCHED_LOGGERS = ("interview_engine", "uvicorn", "fastapi", *GENERATION_LOGGERS, *PERSISTENCE_LOGGERS)


@pytest.fixture(autouse=True)
def restore_logging() -> Generator[None, None, None]:
    """Put root handlers and logger levels back after each test."""
    root = logging.getLogger()
    handlers = list(root.handlers)
    root_level = root.level
    levels = {name: logging.getLogger(name).level for name in TOUCHED_LOGGERS}
    yield
    root.handlers[:] = handlers
    root.setLevel(root_level)
    for name, level in levels.items():
        logging.getLogger(name).setLevel(level)


def _settings(log_level: str, debug: bool) -> MagicMock:
    return MagicMock(log_level=log_level, debug=debug)


class TestSetupLogging:
    """Test suite for setup_logging."""

    def test_production_holds_back_generation_and_sql_loggers(self) -> None:
        """Test transport and SQL loggers stay at WARNING outside development."""
        setup_logging(_settings("WARNING", debug=False))

        for name in (*GENERATION_LOGGERS, *PERSISTENCE_LOGGERS):
            assert logging.getLogger(name).level == logging.WARNING

    def test_testing_env_keeps_app_at_info(self) -> None:
        """Test the application logger follows the environment level."""
        setup_logging(_settings("INFO", debug=False))

        assert logging.getLogger("interview_engine").level == logging.INFO
        assert logging.getLogger("openai").level == logging.WARNING

    def test_development_opens_generation_and_sql_loggers(self) -> None:
        """Test debug mode lets the generation transport and SQL echo through."""
        setup_logging(_settings("DEBUG", debug=True))

        for name in GENERATION_LOGGERS:
            assert logging.getLogger(name).level == logging.DEBUG
        for name in PERSISTENCE_LOGGERS:
            assert logging.getLogger(name).level == logging.INFO

    def test_root_handler_carries_request_id_filter(self) -> None:
        """Test the stdout handler stamps records with a request id."""
        setup_logging(_settings("INFO", debug=False))

        handlers = logging.getLogger().handlers
        assert len(handlers) == 1
        assert any(isinstance(f, RequestIdFilter) for f in handlers[0].filters)


class TestRequestIdFilter:
    """Test suite for RequestIdFilter."""

    def _record(self, **extra: str) -> logging.LogRecord:
        record = logging.LogRecord("interview_engine.test", logging.INFO, __file__, 1, "msg", None, None)
        for key, value in extra.items():
            setattr(record, key, value)
        return record

    def test_defaults_missing_request_id(self) -> None:
        """Test records logged outside a request get a placeholder id."""
        record = self._record()

        assert RequestIdFilter().filter(record) is True
        assert record.request_id == "-"

    def test_keeps_request_id_from_extra(self) -> None:
        """Test an id passed through extra is left untouched."""
        record = self._record(request_id="req-123")

        RequestIdFilter().filter(record)

        assert record.request_id == "req-123"
