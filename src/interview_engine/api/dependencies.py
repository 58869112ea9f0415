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
"""API dependencies for dependency injection.

Shared services are built once in the application lifespan and kept on
app.state. These dependencies hand them to route handlers; tests replace
them through app.dependency_overrides.
"""

from fastapi import Request

from interview_engine.api.pipeline import RequestPipeline
from interview_engine.db.repositories import RecordStore
from interview_engine.services.generation import GenerationService


def get_request_pipeline(request: Request) -> RequestPipeline:
    """Get the shared request pipeline."""
    return request.app.state.pipeline


def get_generation_service(request: Request) -> GenerationService:
    """Get the generation service wrapping the configured text generator."""
    return request.app.state.generation_service


def get_interview_store(request: Request) -> RecordStore:
    """Get the store for generated interviews."""
    return request.app.state.interview_store


def get_answer_store(request: Request) -> RecordStore:
    """Get the store for recorded answers."""
    return request.app.state.answer_store
