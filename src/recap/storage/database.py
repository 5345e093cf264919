"""Connection and transaction management for the recap database."""
import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional, Union

from sqlalchemy import inspect
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from recap.config import config
from recap.exceptions import (
    ErrorCode,
    RecapError,
    StorageError,
    StorageUnavailableError,
)
from recap.models.db_models import create_db_engine, get_session_factory, init_db

logger = logging.getLogger(__name__)


class Database:
    """Owns the engine for one storage location.

    Schema creation happens on open. Work is done through transaction(),
    which commits on success and rolls back on any error. Transactions do
    not nest.
    """

    def __init__(self, engine, location: str):
        self.engine = engine
        self.location = location
        self.session_factory = get_session_factory(engine)
        self._in_transaction = False
        self._closed = False

    @classmethod
    def open(cls, location: Union[str, Path], echo: Optional[bool] = None) -> "Database":
        """Open (creating if needed) the database at a location.

        Args:
            location: Filesystem path, ":memory:" or a sqlite URL.
            echo: Log every SQL statement. Defaults to config.sql_echo.

        Raises:
            StorageUnavailableError: If the location cannot be opened or
                the schema cannot be created.
        """
        location = str(location)
        if echo is None:
            echo = config.sql_echo
        try:
            engine = create_db_engine(location, echo=echo)
        except (SQLAlchemyError, OSError) as e:
            raise StorageUnavailableError(
                f"Cannot open database: {e}",
                location=location,
                original_error=e,
            ) from e

        try:
            init_db(engine)
        except SQLAlchemyError as e:
            engine.dispose()
            raise StorageUnavailableError(
                f"Cannot initialize database schema: {e}",
                location=location,
                original_error=e,
            ) from e

        logger.info(f"Database opened: {engine.url}")
        return cls(engine, location)

    @property
    def closed(self) -> bool:
        return self._closed

    def table_names(self):
        """Names of the tables present in the database."""
        self._ensure_open("inspect")
        return inspect(self.engine).get_table_names()

    @contextmanager
    def transaction(
        self,
        operation: str = "transaction",
        code: ErrorCode = ErrorCode.STORAGE_WRITE_FAILED,
    ) -> Iterator[Session]:
        """Run a unit of work in a single transaction.

        Args:
            operation: Operation name reported in errors and logs.
            code: Error code used when the database rejects the work.

        Yields:
            A session bound to the open transaction.

        Raises:
            StorageError: If the database fails, or a transaction is
                already open.
        """
        self._ensure_open(operation)
        if self._in_transaction:
            raise StorageError(
                "Nested transactions are not supported",
                operation=operation,
                code=code,
            )

        self._in_transaction = True
        session = self.session_factory()
        try:
            with session.begin():
                yield session
        except RecapError:
            raise
        except SQLAlchemyError as e:
            logger.error(f"{operation} failed, transaction rolled back: {e}")
            raise StorageError(
                f"{operation} failed: {e}",
                operation=operation,
                code=code,
                original_error=e,
            ) from e
        finally:
            session.close()
            self._in_transaction = False

    def close(self) -> None:
        """Release the connection pool. Safe to call more than once."""
        if self._closed:
            return
        self.engine.dispose()
        self._closed = True
        logger.debug(f"Database closed: {self.location}")

    def _ensure_open(self, operation: str) -> None:
        if self._closed:
            raise StorageError(
                "Database is closed",
                operation=operation,
                code=ErrorCode.STORAGE_READ_FAILED,
            )

    def __enter__(self) -> "Database":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
