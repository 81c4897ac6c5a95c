"""
Database Connection Module.

This module provides:
- SQLAlchemy engine creation for MySQL (PyMySQL driver)
- Bounded connection checkout guarded by a semaphore
- Statement execution with driver errors mapped to DatabaseFault
- Connection health checking
"""

import logging
import threading
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Generator, List, Optional, Tuple

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import (
    DBAPIError,
    InterfaceError,
    OperationalError,
    SQLAlchemyError,
    TimeoutError as PoolTimeoutError,
)
from sqlalchemy.pool import QueuePool

from config import DatabaseConfig
from errors import DatabaseFault, PoolUnavailable
from sql.builder import Statement

logger = logging.getLogger(__name__)


@dataclass
class QueryResult:
    """Column names and raw rows of one executed statement."""
    keys: List[str] = field(default_factory=list)
    rows: List[Tuple[Any, ...]] = field(default_factory=list)


def _is_poisoning(error: BaseException) -> bool:
    """Driver errors that leave the connection unusable."""
    if not isinstance(error, DBAPIError):
        return False
    if error.connection_invalidated:
        # The pool already discarded it
        return False
    return isinstance(error, (OperationalError, InterfaceError))


class ConnectionManager:
    """
    Leases pooled connections to requests.

    Checkout is limited by a BoundedSemaphore sized to the pool capacity,
    so distinct requests acquire connections concurrently and only wait
    once every connection is in use.
    """

    def __init__(
        self,
        db_config: Optional[DatabaseConfig] = None,
        engine: Optional[Engine] = None,
        acquire_timeout: Optional[float] = None,
    ):
        """
        Initialize the connection manager.

        Args:
            db_config: Database configuration. Read from the environment if not provided.
            engine: Pre-built SQLAlchemy engine (tests inject one).
            acquire_timeout: Seconds to wait for a free slot. Defaults to the pool timeout.
        """
        self.config = db_config or DatabaseConfig()
        self._engine: Optional[Engine] = engine
        self.capacity = self.config.max_connections
        self.acquire_timeout = (
            acquire_timeout if acquire_timeout is not None else float(self.config.pool_timeout)
        )
        self._slots = threading.BoundedSemaphore(self.capacity)
        self._engine_lock = threading.Lock()

    def _create_engine(self) -> Engine:
        """
        Create the SQLAlchemy engine.

        Returns:
            Configured SQLAlchemy Engine instance
        """
        connect_args = {}
        if self.config.ssl_ca:
            connect_args["ssl"] = {
                "ca": self.config.ssl_ca,
                "check_hostname": True,
                "verify_mode": True
            }

        return create_engine(
            self.config.connection_string,
            poolclass=QueuePool,
            pool_size=self.config.pool_size,
            max_overflow=self.config.max_overflow,
            pool_timeout=self.config.pool_timeout,
            pool_recycle=self.config.pool_recycle,
            pool_pre_ping=True,
            connect_args=connect_args,
            echo=False
        )

    @property
    def engine(self) -> Engine:
        """Get or create the SQLAlchemy engine; safe to call from many threads."""
        if self._engine is None:
            with self._engine_lock:
                if self._engine is None:
                    self._engine = self._create_engine()
        return self._engine

    @contextmanager
    def acquire(self) -> Generator[Connection, None, None]:
        """
        Lease one connection for the duration of the block.

        The connection goes back to the pool when the block exits, or is
        discarded if the block failed with a connection-level error.

        Raises:
            PoolUnavailable: no slot within acquire_timeout, or the pool
                could not produce a live connection

        Example:
            with manager.acquire() as conn:
                result = manager.execute(conn, statement)
        """
        if not self._slots.acquire(timeout=self.acquire_timeout):
            logger.error(f"Connection pool exhausted ({self.capacity} connections in use)")
            raise PoolUnavailable("Connection pool exhausted")

        try:
            try:
                connection = self.engine.connect()
            except PoolTimeoutError as e:
                logger.error(f"Timed out checking out a connection: {e}")
                raise PoolUnavailable(f"Timed out checking out a connection: {e}") from e
            except SQLAlchemyError as e:
                logger.error(f"Could not connect to database: {e}")
                raise PoolUnavailable(f"Could not connect to database: {e}") from e

            try:
                yield connection
            except Exception as e:
                cause = e.__cause__ if isinstance(e, DatabaseFault) else e
                if _is_poisoning(cause):
                    logger.warning("Discarding connection after driver error")
                    connection.invalidate()
                raise
            finally:
                connection.close()
        finally:
            self._slots.release()

    def execute(self, connection: Connection, statement: Statement) -> QueryResult:
        """
        Execute a built statement on a leased connection.

        Args:
            connection: Connection obtained from acquire()
            statement: SQL text plus bound parameters

        Returns:
            QueryResult with column names in result-set order
        """
        try:
            result = connection.execute(text(statement.sql), statement.params)
            keys = [str(key) for key in result.keys()]
            rows = [tuple(row) for row in result.fetchall()]
        except SQLAlchemyError as e:
            logger.error(f"Statement failed: {statement.sql}: {e}")
            raise DatabaseFault(f"Statement failed: {e}") from e
        return QueryResult(keys=keys, rows=rows)

    def test_connection(self) -> tuple[bool, str]:
        """
        Test database connectivity.

        Returns:
            tuple: (success: bool, message: str)
        """
        try:
            with self.acquire() as conn:
                result = self.execute(conn, Statement("SELECT 1 AS health_check"))
                if result.rows and result.rows[0][0] == 1:
                    return True, "MySQL connection successful"
                return False, "Unexpected result from health check query"
        except DatabaseFault as e:
            logger.error(f"Database connection failed: {e}")
            return False, f"Connection failed: {e}"

    def close(self):
        """Close all connections and dispose of the engine."""
        with self._engine_lock:
            engine, self._engine = self._engine, None
        if engine is not None:
            engine.dispose()
            logger.info("Database connections closed")
