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
"""Database module for Interview Engine.

This module provides SQLAlchemy engine and session management with support for
PostgreSQL connection pooling and SQLite for local runs and tests.
"""

import logging
from typing import Any

from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from interview_engine.config.settings import Settings

logger = logging.getLogger(__name__)

# Base class for declarative models
Base = declarative_base()


def create_engine_from_settings(settings: Settings) -> Engine:
    """Create a SQLAlchemy engine from application settings.

    SQLite URLs share one connection across threads so that in-memory
    databases survive for the life of the engine; other URLs use a
    standard connection pool.

    Args:
        settings: Application settings with database configuration

    Returns:
        Configured SQLAlchemy Engine instance

    Raises:
        ValueError: If required configuration is missing
    """
    url = settings.database_url

    if url.startswith("sqlite"):
        logger.info("Creating engine with SQLite connection")
        engine = create_engine(
            url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    else:
        logger.info(f"Creating engine with standard DSN connection to {settings.db_host}")
        engine = create_engine(
            url,
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
            pool_timeout=settings.db_pool_timeout,
            pool_pre_ping=True,
        )

    @event.listens_for(engine, "connect")
    def receive_connect(dbapi_conn: Any, connection_record: Any) -> None:
        """Log database connections."""
        logger.debug("Database connection established")

    logger.info("Database engine created successfully")
    return engine


def create_session_factory(engine: Engine) -> sessionmaker[Session]:
    """Create a session factory from a SQLAlchemy engine.

    Args:
        engine: SQLAlchemy Engine instance

    Returns:
        Session factory for creating database sessions
    """
    return sessionmaker(autocommit=False, autoflush=False, bind=engine, expire_on_commit=False)


def create_tables(engine: Engine) -> None:
    """Create every table registered on Base that does not exist yet."""
    # Import models so their tables are registered on Base.metadata
    from interview_engine.db import models  # noqa: F401

    Base.metadata.create_all(engine)


def check_database_health(engine: Engine) -> bool:
    """Check if the database is reachable and healthy.

    Args:
        engine: SQLAlchemy Engine instance

    Returns:
        True if database is healthy, False otherwise
    """
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1")).fetchone()
        return True
    except Exception as e:
        logger.error(f"Database health check failed: {e}", exc_info=True)
        return False


__all__ = [
    "Base",
    "create_engine_from_settings",
    "create_session_factory",
    "create_tables",
    "check_database_health",
]
