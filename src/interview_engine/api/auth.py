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
"""Caller identity resolution.

Identity issuance lives outside this service. Callers present an opaque
bearer token that the resolver maps to an actor id; the actor id keys rate
limiting and record ownership.
"""

import secrets
from collections.abc import Mapping
from typing import Protocol

from interview_engine.config.logging import get_logger

logger = get_logger(__name__)

BEARER_SCHEME = "bearer"


class ActorResolver(Protocol):
    """Maps request credentials to an actor id."""

    def resolve_actor(self, credentials: str | None) -> str | None: ...


class TokenActorResolver:
    """Resolve actors from a static bearer token table.

    Every configured token is compared in constant time so lookup time does
    not reveal how much of a guessed token matched.
    """

    def __init__(self, tokens: Mapping[str, str]):
        self._tokens = [(token.encode(), actor_id) for token, actor_id in tokens.items()]

    def resolve_actor(self, credentials: str | None) -> str | None:
        """Resolve an Authorization header value to an actor id.

        Args:
            credentials: Raw Authorization header value

        Returns:
            Actor id, or None if the credentials are missing or unknown
        """
        if not credentials:
            return None

        scheme, _, token = credentials.strip().partition(" ")
        token = token.strip()
        if scheme.lower() != BEARER_SCHEME or not token:
            logger.debug("Unsupported authorization scheme")
            return None

        presented = token.encode()
        actor: str | None = None
        for known, actor_id in self._tokens:
            if secrets.compare_digest(known, presented):
                actor = actor_id
        return actor
