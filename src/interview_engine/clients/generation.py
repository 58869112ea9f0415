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
"""Generation service clients for Interview Engine.

This module defines the TextGenerator interface the pipeline depends on,
the two reply shapes a generator may return, an OpenAI-backed generator,
and decorators that add timeout and retry policies around any generator.
"""

import asyncio
import inspect
import time
import uuid
from collections.abc import Awaitable, Callable
from typing import Protocol

from openai import (
    APIConnectionError,
    APIStatusError,
    APITimeoutError,
    AsyncOpenAI,
    AuthenticationError,
    RateLimitError,
)

from interview_engine.config.logging import get_logger
from interview_engine.config.settings import Settings
from interview_engine.exceptions import (
    LLMAuthenticationError,
    LLMRateLimitError,
    LLMServiceError,
    LLMTimeoutError,
)

logger = get_logger(__name__)


class ReplyText(Protocol):
    """Text-bearing part of a generation reply."""

    async def resolve(self) -> str | None: ...


class PlainText:
    """Reply text that is already available."""

    def __init__(self, text: str | None):
        self.text = text

    async def resolve(self) -> str | None:
        return self.text if isinstance(self.text, str) else None


class DeferredText:
    """Reply text produced on demand by a zero-argument callable.

    The callable may return the text directly or an awaitable of it.
    """

    def __init__(self, producer: Callable[[], str | Awaitable[str]]):
        self.producer = producer

    async def resolve(self) -> str | None:
        value = self.producer()
        if inspect.isawaitable(value):
            value = await value
        return value if isinstance(value, str) else None


class TextGenerator(Protocol):
    """External generative text service: one prompt in, one reply out."""

    async def generate(self, prompt: str) -> ReplyText: ...


class OpenAITextGenerator:
    """Generator backed by the OpenAI Responses API.

    Attributes:
        client: Async OpenAI SDK client instance
        model: Model name to use for API calls
        temperature: Temperature setting for response generation
    """

    def __init__(self, settings: Settings, client: AsyncOpenAI | None = None):
        """Initialize the OpenAI generator.

        Args:
            settings: Application settings containing API key and model configuration
            client: Optional preconfigured SDK client
        """
        # SDK-level retries are disabled; retry policy lives in RetryingTextGenerator
        self.client = client or AsyncOpenAI(api_key=settings.openai_api_key, max_retries=0)
        self.model = settings.openai_model
        self.temperature = settings.temperature
        logger.debug(f"OpenAI generator initialized with model={self.model}")

    async def generate(self, prompt: str) -> ReplyText:
        """Send one prompt and return the reply text.

        Args:
            prompt: Complete prompt text

        Returns:
            PlainText holding the aggregated output text

        Raises:
            LLMAuthenticationError: If API authentication fails
            LLMRateLimitError: If the provider rate limits the request
            LLMTimeoutError: If the request times out
            LLMServiceError: For connection and other API errors
        """
        request_id = str(uuid.uuid4())
        start_time = time.time()
        context = {"request_id": request_id, "model": self.model}

        logger.info("Starting OpenAI request", extra=context)

        try:
            response = await self.client.responses.create(
                model=self.model,
                input=prompt,
                temperature=self.temperature,
            )
        except AuthenticationError as e:
            logger.error("OpenAI authentication failed", extra={**context, "error": str(e)})
            raise LLMAuthenticationError(
                f"OpenAI authentication failed: {str(e)}", details=context
            ) from e
        except RateLimitError as e:
            logger.warning("OpenAI rate limited", extra={**context, "error": str(e)})
            raise LLMRateLimitError(
                f"OpenAI rate limit exceeded: {str(e)}", details={**context, "retryable": True}
            ) from e
        except APITimeoutError as e:
            logger.warning("OpenAI request timed out", extra={**context, "error": str(e)})
            raise LLMTimeoutError(
                f"OpenAI request timed out: {str(e)}", details={**context, "retryable": True}
            ) from e
        except APIConnectionError as e:
            logger.warning("OpenAI connection error", extra={**context, "error": str(e)})
            raise LLMServiceError(
                f"OpenAI connection error: {str(e)}",
                code="LLM_CONNECTION_ERROR",
                details={**context, "retryable": True},
            ) from e
        except APIStatusError as e:
            logger.error(
                "OpenAI API error",
                extra={**context, "status_code": e.status_code, "error": str(e)},
            )
            raise LLMServiceError(
                f"OpenAI API error: {str(e)}",
                details={**context, "status_code": e.status_code},
            ) from e

        elapsed_time = time.time() - start_time
        logger.info(
            "OpenAI request completed successfully",
            extra={**context, "elapsed_time": f"{elapsed_time:.2f}s", "status": "success"},
        )

        return PlainText(getattr(response, "output_text", None))


class TimeoutTextGenerator:
    """Decorator that bounds each generation call.

    When the timeout expires the in-flight call is cancelled.
    """

    def __init__(self, inner: TextGenerator, timeout_seconds: float):
        self.inner = inner
        self.timeout_seconds = timeout_seconds

    async def generate(self, prompt: str) -> ReplyText:
        try:
            return await asyncio.wait_for(self.inner.generate(prompt), self.timeout_seconds)
        except TimeoutError as e:
            logger.warning(
                "Generation call exceeded timeout",
                extra={"timeout_seconds": self.timeout_seconds},
            )
            raise LLMTimeoutError(
                f"Generation call exceeded {self.timeout_seconds:g}s",
                details={"retryable": True},
            ) from e


class RetryingTextGenerator:
    """Decorator that retries transient generation failures.

    Only timeouts, provider rate limits and connection errors are retried,
    with exponential backoff between attempts.
    """

    def __init__(
        self,
        inner: TextGenerator,
        max_attempts: int,
        initial_backoff_seconds: float,
        backoff_multiplier: float,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.inner = inner
        self.max_attempts = max_attempts
        self.initial_backoff_seconds = initial_backoff_seconds
        self.backoff_multiplier = backoff_multiplier
        self.sleep = sleep

    @staticmethod
    def is_retryable(error: LLMServiceError) -> bool:
        """Check whether a generation failure is worth another attempt."""
        if isinstance(error, LLMAuthenticationError):
            return False
        return bool(error.details.get("retryable")) or isinstance(
            error, LLMTimeoutError | LLMRateLimitError
        )

    async def generate(self, prompt: str) -> ReplyText:
        attempt = 0
        while True:
            attempt += 1
            try:
                return await self.inner.generate(prompt)
            except LLMServiceError as e:
                if attempt >= self.max_attempts or not self.is_retryable(e):
                    raise

                backoff_delay = self.initial_backoff_seconds * (
                    self.backoff_multiplier ** (attempt - 1)
                )
                logger.warning(
                    f"Generation {e.code}, retrying in {backoff_delay:.2f}s "
                    f"(attempt {attempt}/{self.max_attempts})",
                    extra={
                        "code": e.code,
                        "attempt": attempt,
                        "max_attempts": self.max_attempts,
                        "backoff_delay": backoff_delay,
                    },
                )
                await self.sleep(backoff_delay)


def build_text_generator(settings: Settings) -> TextGenerator:
    """Build the configured generator stack.

    Timeout applies per attempt; retry wraps the bounded call.

    Args:
        settings: Application settings

    Returns:
        TextGenerator with timeout and retry policies applied
    """
    generator: TextGenerator = OpenAITextGenerator(settings)
    if settings.generation_timeout_seconds > 0:
        generator = TimeoutTextGenerator(generator, settings.generation_timeout_seconds)
    if settings.generation_max_attempts > 1:
        generator = RetryingTextGenerator(
            generator,
            max_attempts=settings.generation_max_attempts,
            initial_backoff_seconds=settings.retry_initial_backoff_seconds,
            backoff_multiplier=settings.retry_backoff_multiplier,
        )
    return generator
