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
"""Shared pytest fixtures and configuration for all tests.

This module provides reusable fixtures for settings configuration, a
scripted text generator standing in for the OpenAI service, an in-memory
SQLite database, and a FastAPI test client wired to both.
"""

import json
from collections.abc import Generator
from typing import Any

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from interview_engine.clients.generation import PlainText, ReplyText

TEST_TOKENS = {"token-alice-0001": "alice", "token-bob-0002": "bob"}


class ScriptedTextGenerator:
    """TextGenerator returning queued replies and recording every prompt.

    Queued items may be strings, ReplyText objects, or exceptions to raise.
    When the queue is empty the default reply is returned.
    """

    def __init__(self, default: str | None = None):
        self.default = default
        self.replies: list[Any] = []
        self.prompts: list[str] = []

    def queue(self, *replies: Any) -> None:
        self.replies.extend(replies)

    async def generate(self, prompt: str) -> ReplyText:
        self.prompts.append(prompt)
        reply = self.replies.pop(0) if self.replies else self.default
        if isinstance(reply, Exception):
            raise reply
        if isinstance(reply, str) or reply is None:
            return PlainText(reply)
        return reply


@pytest.fixture
def sample_questions() -> list[dict[str, str]]:
    """Fixture for a valid generated question list."""
    return [
        {"question": "What is dependency injection?", "answer": "Passing collaborators in."},
        {"question": "Explain the event loop.", "answer": "A scheduler for coroutines."},
        {"question": "What is an index?", "answer": "A structure speeding up lookups."},
        {"question": "How do you version an API?", "answer": "Path or header versioning."},
        {"question": "What is idempotency?", "answer": "Repeating has no further effect."},
    ]


@pytest.fixture
def sample_feedback() -> dict[str, Any]:
    """Fixture for a valid generated feedback payload."""
    return {
        "rating": 7,
        "feedback": "Clear answer with a relevant example.",
        "strengths": ["Structured", "Concise"],
        "improvements": ["Discuss trade-offs"],
    }


@pytest.fixture
def scripted_generator() -> ScriptedTextGenerator:
    """Fixture for a generator with no default reply."""
    return ScriptedTextGenerator()


@pytest.fixture
def valid_test_env(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """Set up valid test environment for integration tests.

    Uses an in-memory SQLite database and two known API tokens, and clears
    the settings cache before and after use.
    """
    from interview_engine.config.settings import get_settings

    get_settings.cache_clear()

    monkeypatch.setenv("OPENAI_API_KEY", "sk-test-key-for-integration-tests")
    monkeypatch.setenv("OPENAI_MODEL", "gpt-4o-mini")
    monkeypatch.setenv("TEMPERATURE", "0.7")
    monkeypatch.setenv("ENV", "testing")
    monkeypatch.setenv("DATABASE_URL", "sqlite://")
    monkeypatch.setenv("API_TOKENS", json.dumps(TEST_TOKENS))
    monkeypatch.setenv("RATE_LIMIT_REQUESTS", "10")
    monkeypatch.setenv("RATE_LIMIT_WINDOW_MS", "60000")

    yield

    get_settings.cache_clear()


@pytest.fixture
def test_client(
    valid_test_env: None, scripted_generator: ScriptedTextGenerator
) -> Generator[TestClient, None, None]:
    """Create FastAPI test client backed by the scripted generator.

    Yields:
        TestClient instance for making test requests
    """
    from interview_engine.api.dependencies import get_generation_service
    from interview_engine.app import create_app
    from interview_engine.services.generation import GenerationService

    app = create_app()
    app.dependency_overrides[get_generation_service] = lambda: GenerationService(
        scripted_generator
    )
    with TestClient(app) as client:
        yield client
    app.dependency_overrides.clear()


@pytest.fixture
def alice_headers() -> dict[str, str]:
    """Authorization headers for the first test actor."""
    return {"Authorization": "Bearer token-alice-0001"}


@pytest.fixture
def bob_headers() -> dict[str, str]:
    """Authorization headers for the second test actor."""
    return {"Authorization": "Bearer token-bob-0002"}


@pytest.fixture
def session_factory() -> Generator[sessionmaker[Session], None, None]:
    """Session factory bound to a fresh in-memory SQLite database."""
    from interview_engine.db import create_session_factory, create_tables

    engine = create_engine(
        "sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool
    )
    create_tables(engine)
    yield create_session_factory(engine)
    engine.dispose()
