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
"""Generation client wrapper.

Builds deterministic prompts from sanitized request fields, sends each one
to the configured TextGenerator exactly once, and resolves the reply into
a plain string. Parsing the reply is left to the extractor.
"""

import time

from interview_engine.clients.generation import TextGenerator
from interview_engine.config.logging import get_logger
from interview_engine.exceptions import NoTextInReplyError

logger = get_logger(__name__)

QUESTIONS_PROMPT_TEMPLATE = """You are an interview generator bot.
Role: {role}
Tech stack: {stack}
Experience: {years} years

Generate minimum 5 and maximum 10 interview questions and answers.
Return output in JSON format ONLY. Do NOT wrap the JSON in markdown or code fences; \
return raw JSON only.
Expected format:
{{
  "questions": [
    {{ "question": "...", "answer": "..." }},
    ...
  ]
}}
"""

FEEDBACK_FORMAT_INSTRUCTION = """

IMPORTANT: Return ONLY valid JSON in this exact format, with NO additional text, \
markdown, or code fences:
{
  "rating": <number between 1-10>,
  "feedback": "<brief 3-5 line feedback>",
  "strengths": ["<strength 1>", "<strength 2>"],
  "improvements": ["<improvement 1>", "<improvement 2>"]
}"""

ANSWER_REVIEW_TEMPLATE = """You are reviewing a candidate's answer in a mock interview.
Role: {role}
Tech stack: {stack}
Question: {question}
Candidate answer: {answer}

Rate the answer from 1 to 10 and give brief feedback on correctness, \
depth and clarity."""


def build_questions_prompt(role: str, stack: str, years: int | float) -> str:
    """Build the question-generation prompt.

    Args:
        role: Sanitized job position
        stack: Sanitized job description or tech stack
        years: Years of experience

    Returns:
        Prompt text
    """
    return QUESTIONS_PROMPT_TEMPLATE.format(role=role, stack=stack, years=f"{years:g}")


def build_feedback_prompt(prompt: str) -> str:
    """Append the feedback response-format instruction to a caller prompt."""
    return f"{prompt}{FEEDBACK_FORMAT_INSTRUCTION}"


def build_answer_review_prompt(role: str, stack: str, question: str | None, answer: str) -> str:
    """Build a review prompt for an answer given in a stored interview.

    Args:
        role: Job position of the interview
        stack: Job description of the interview
        question: Question being answered, if the caller supplied it
        answer: Sanitized candidate answer

    Returns:
        Prompt text, without the response-format instruction
    """
    return ANSWER_REVIEW_TEMPLATE.format(
        role=role,
        stack=stack,
        question=question or "(not provided)",
        answer=answer,
    )


class GenerationService:
    """Prompt construction and invocation of the generation service.

    Attributes:
        generator: External text generator, possibly wrapped in retry/timeout decorators
    """

    def __init__(self, generator: TextGenerator):
        self.generator = generator

    async def generate_questions(self, role: str, stack: str, years: int | float) -> str:
        """Generate interview questions and return the raw reply text.

        Raises:
            NoTextInReplyError: If the reply carries no text
            LLMServiceError: For generation service failures
        """
        return await self._generate(build_questions_prompt(role, stack, years), "questions")

    async def generate_feedback(self, prompt: str) -> str:
        """Generate feedback for a prompt and return the raw reply text.

        Raises:
            NoTextInReplyError: If the reply carries no text
            LLMServiceError: For generation service failures
        """
        return await self._generate(build_feedback_prompt(prompt), "feedback")

    async def _generate(self, prompt: str, step_name: str) -> str:
        start_time = time.time()
        reply = await self.generator.generate(prompt)
        text = await reply.resolve()

        if text is None or not text.strip():
            logger.error(
                "Generation reply carried no text",
                extra={"step_name": step_name, "reply_type": type(reply).__name__},
            )
            raise NoTextInReplyError(details={"step_name": step_name})

        logger.info(
            "Generation reply received",
            extra={
                "step_name": step_name,
                "text_length": len(text),
                "elapsed_time": f"{time.time() - start_time:.2f}s",
            },
        )
        return text
