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
"""Logging setup for Interview Engine.

Log lines carry the request id that the HTTP middleware and the request
pipeline pass through ``extra``. Loggers of the generation transport and
of the record store are held back outside development: at DEBUG the
OpenAI client logs request options, which contain the prompt, and the
SQLAlchemy engine logs bound parameters, which contain user answers.
"""

import logging
import sys

from interview_engine.config.settings import Settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - [%(request_id)s] %(message)s"

# Loggers around the outbound generation call
GENERATION_LOGGERS = ("openai", "httpx", "httpcore")
# Loggers around the record store
PERSISTENCE_LOGGERS = ("sqlalchemy.engine", "sqlalchemy.pool")


class RequestIdFilter(logging.Filter):
    """Give every record a request_id so the format never fails.

    Records logged outside a request (startup, shutdown, third-party
    libraries) get ``-``.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "request_id"):
            record.request_id = "-"
        return True


def setup_logging(settings: Settings) -> None:
    """Configure application logging based on settings.

    Args:
        settings: Application settings containing log level and debug mode
    """
    log_level = getattr(logging, settings.log_level)

    handler = logging.StreamHandler(sys.stdout)
    handler.addFilter(RequestIdFilter())
    logging.basicConfig(
        level=log_level,
        format=LOG_FORMAT,
        handlers=[handler],
        force=True,
    )

    logging.getLogger("uvicorn").setLevel(log_level)
    logging.getLogger("fastapi").setLevel(log_level)
    logging.getLogger("interview_engine").setLevel(log_level)

    generation_level = log_level if settings.debug else logging.WARNING
    for name in GENERATION_LOGGERS:
        logging.getLogger(name).setLevel(generation_level)

    # SQL echo stays off unless debugging
    persistence_level = logging.INFO if settings.debug else logging.WARNING
    for name in PERSISTENCE_LOGGERS:
        logging.getLogger(name).setLevel(persistence_level)


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance for the given name.

    Args:
        name: Logger name (typically __name__ of the module)

    Returns:
        Configured logger instance
    """
    return logging.getLogger(name)
