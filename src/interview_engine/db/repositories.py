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
"""Repository layer for database operations.

Stores expose the two operations the request pipeline needs from
persistence: insert one record and select records by equality filter.
Records are plain dicts keyed by model attribute name.
"""

from collections.abc import Mapping
from typing import Any, Protocol

from sqlalchemy import inspect, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from interview_engine.config.logging import get_logger
from interview_engine.db import Base
from interview_engine.exceptions import PersistenceError

logger = get_logger(__name__)


class RecordStore(Protocol):
    """Persistence operations consumed by the pipeline."""

    def insert(self, record: Mapping[str, Any]) -> int: ...

    def select(self, filter: Mapping[str, Any]) -> list[dict[str, Any]]: ...


class SqlRecordStore:
    """RecordStore backed by one SQLAlchemy model.

    Attributes:
        session_factory: Factory producing one session per operation
        model: Declarative model class the store reads and writes
    """

    def __init__(self, session_factory: sessionmaker[Session], model: type[Base]):
        self.session_factory = session_factory
        self.model = model
        self.columns = frozenset(attr.key for attr in inspect(model).column_attrs)

    def _check_keys(self, keys: Any) -> None:
        unknown = set(keys) - self.columns
        if unknown:
            raise ValueError(
                f"Unknown {self.model.__name__} fields: {', '.join(sorted(unknown))}"
            )

    def _to_record(self, instance: Any) -> dict[str, Any]:
        return {key: getattr(instance, key) for key in self.columns}

    def insert(self, record: Mapping[str, Any]) -> int:
        """Insert one record.

        Args:
            record: Field values keyed by model attribute name

        Returns:
            Primary key of the new row

        Raises:
            ValueError: If the record names a field the model does not have
            PersistenceError: If the database operation fails
        """
        self._check_keys(record.keys())
        session = self.session_factory()
        try:
            instance = self.model(**record)
            session.add(instance)
            session.commit()
            logger.info(
                f"Inserted {self.model.__name__} record",
                extra={"table": self.model.__tablename__, "record_id": instance.id},
            )
            return instance.id
        except SQLAlchemyError as e:
            session.rollback()
            logger.error(
                f"Failed to insert {self.model.__name__}: {e}",
                extra={"table": self.model.__tablename__},
                exc_info=True,
            )
            raise PersistenceError(details={"table": self.model.__tablename__}) from e
        finally:
            session.close()

    def select(self, filter: Mapping[str, Any]) -> list[dict[str, Any]]:
        """Select records matching every equality condition in filter.

        Args:
            filter: Field values keyed by model attribute name

        Returns:
            Matching records ordered by primary key

        Raises:
            ValueError: If the filter names a field the model does not have
            PersistenceError: If the database operation fails
        """
        self._check_keys(filter.keys())
        statement = select(self.model).filter_by(**filter).order_by(self.model.id)
        session = self.session_factory()
        try:
            return [self._to_record(row) for row in session.scalars(statement)]
        except SQLAlchemyError as e:
            logger.error(
                f"Failed to select {self.model.__name__}: {e}",
                extra={"table": self.model.__tablename__},
                exc_info=True,
            )
            raise PersistenceError(details={"table": self.model.__tablename__}) from e
        finally:
            session.close()
