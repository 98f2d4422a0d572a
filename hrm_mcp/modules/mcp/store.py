"""Read-only statement execution against the relational store."""

from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Any, Iterator

from loguru import logger
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import DBAPIError, OperationalError

from .errors import QueryTimeout

POSTGRES_QUERY_CANCELED = "57014"


class SqlStore:
    """
    Thin handle over a SQLAlchemy engine for guarded statements.

    Every call runs in its own short transaction that is rolled back at the
    end, so nothing a statement does can be committed. On PostgreSQL the
    transaction is also ``READ ONLY`` and carries a server-side
    ``statement_timeout``; on SQLite the timeout interrupts the connection.
    The database role used by the engine is expected to be read-only too.
    """

    def __init__(self, engine: Engine):
        self.engine = engine

    @property
    def dialect(self) -> str:
        return self.engine.dialect.name

    def fetch_rows(
        self,
        sql: str,
        *,
        timeout_seconds: float,
        max_rows: int | None = None,
    ) -> list[dict[str, Any]]:
        """
        Run ``sql`` and return at most ``max_rows`` rows as dicts.

        With ``max_rows`` the result is streamed (a server-side cursor on
        PostgreSQL), so rows past the cap are never loaded into memory.
        """
        with self._guarded_connection(timeout_seconds) as conn:
            options = {"no_parameters": True}
            if max_rows:
                options.update(stream_results=True, max_row_buffer=max_rows)
            result = conn.execution_options(**options).exec_driver_sql(sql)
            if not result.returns_rows:
                return []
            fetched = result.fetchmany(max_rows) if max_rows else result.fetchall()
            return [dict(row._mapping) for row in fetched]

    def ping(self) -> bool:
        try:
            with self.engine.connect() as conn:
                conn.exec_driver_sql("SELECT 1")
            return True
        except DBAPIError as exc:
            logger.warning(f"Database ping failed: {exc}")
            return False

    @contextmanager
    def _guarded_connection(self, timeout_seconds: float) -> Iterator[Connection]:
        with self.engine.connect() as conn:
            transaction = conn.begin()
            timer: threading.Timer | None = None
            try:
                if self.dialect == "postgresql":
                    conn.exec_driver_sql("SET TRANSACTION READ ONLY")
                    conn.exec_driver_sql(
                        f"SET LOCAL statement_timeout = {int(timeout_seconds * 1000)}"
                    )
                elif self.dialect == "sqlite":
                    timer = self._start_sqlite_interrupt(conn, timeout_seconds)
                else:
                    logger.warning(
                        f"No driver-level timeout available for dialect {self.dialect}"
                    )
                yield conn
            except OperationalError as exc:
                if self._is_timeout(exc):
                    raise QueryTimeout(timeout_seconds) from exc
                raise
            finally:
                if timer is not None:
                    timer.cancel()
                transaction.rollback()

    @staticmethod
    def _start_sqlite_interrupt(conn: Connection, timeout_seconds: float) -> threading.Timer:
        raw = conn.connection.dbapi_connection
        timer = threading.Timer(timeout_seconds, raw.interrupt)
        timer.daemon = True
        timer.start()
        return timer

    @staticmethod
    def _is_timeout(exc: OperationalError) -> bool:
        orig = exc.orig
        code = getattr(orig, "pgcode", None) or getattr(orig, "sqlstate", None)
        if code == POSTGRES_QUERY_CANCELED:
            return True
        return "interrupted" in str(orig).lower()
