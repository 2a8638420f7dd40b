"""
core/executor.py
----------------
Apply a multi-statement SQL script to one database, all or nothing.

Design Decisions:
    * The runner is a plain class with an injected :class:`ConnectionManager`.
      A manager can be shared by many runners/calls against the same
      database, or created and owned per call via ``from_descriptor``.
    * Order of work: validate → split → borrow a connection → one transaction
      → statements strictly in order → commit or roll back.
    * The commit/rollback decision is driven by a local ``committed`` flag in
      a ``finally`` block, so every exit path (statement error, commit error,
      anything unexpected) rolls back.
    * Failures raise a :class:`MigrationError` subclass carrying the failed
      :class:`MigrationResult` as ``.result``. A failed result never reports
      tables or rows, since nothing of the script was committed.
"""
from __future__ import annotations

import time

import psycopg2
from psycopg2 import sql as pgsql

from core.accumulator import ResultAccumulator
from core.connection import ConnectionManager
from core.exceptions import (
    CommitError,
    MigrationError,
    StatementExecutionError,
    ValidationError,
)
from core.splitter import split_sql_statements
from core.validator import validate_sql
from logger import get_logger
from models.migration import ExecutionOutcome, MigrationResult
from models.target import ConnectionDescriptor

log = get_logger(__name__)

EXCERPT_LENGTH = 100


def statement_excerpt(stmt: str, limit: int = EXCERPT_LENGTH) -> str:
    """First *limit* characters of the trimmed statement."""
    return stmt.strip()[:limit]


class MigrationRunner:
    """
    Runs SQL scripts against the database behind *manager*.

    Args:
        manager:       Connection manager for the target database.
        owns_manager:  Close *manager* when the runner is closed.

    Example::

        with MigrationRunner.from_descriptor(descriptor) as runner:
            result = runner.apply_migration(script)
            print(result.tables_created)
    """

    def __init__(self, manager: ConnectionManager, owns_manager: bool = False) -> None:
        self._manager = manager
        self._owns_manager = owns_manager

    # ------------------------------------------------------------------
    # Factory helpers
    # ------------------------------------------------------------------

    @classmethod
    def from_dsn(cls, dsn: str, **pool_options) -> "MigrationRunner":
        """Open a dedicated, verified pool for *dsn* and wrap it in a runner."""
        manager = ConnectionManager(dsn, **pool_options)
        manager.open()
        return cls(manager, owns_manager=True)

    @classmethod
    def from_descriptor(
        cls, descriptor: ConnectionDescriptor, **pool_options
    ) -> "MigrationRunner":
        return cls.from_dsn(descriptor.dsn, **pool_options)

    # ------------------------------------------------------------------
    # Context manager
    # ------------------------------------------------------------------

    def __enter__(self) -> "MigrationRunner":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        self.close()
        return False

    def close(self) -> None:
        """Release the owned connection manager. Safe to call repeatedly."""
        if self._owns_manager:
            self._manager.close()

    # ------------------------------------------------------------------
    # Migration
    # ------------------------------------------------------------------

    def apply_migration(self, script: str) -> MigrationResult:
        """
        Validate, split and execute *script* inside a single transaction.

        Returns:
            A successful :class:`MigrationResult`.

        Raises:
            ValidationError:          Empty or denylisted script; no
                                      transaction was opened.
            DatabaseConnectionError:  No connection could be borrowed.
            StatementExecutionError:  A statement failed; rolled back.
            CommitError:              Commit failed; nothing is durable.
        """
        started = time.perf_counter()
        result = MigrationResult()

        try:
            validate_sql(script)
        except ValidationError as exc:
            result.error = f"SQL validation failed: {exc}"
            result.execution_time = time.perf_counter() - started
            exc.result = result
            log.warning("Migration rejected: %s", exc)
            raise

        statements = split_sql_statements(script)
        if not statements:
            log.info("Script has no executable statements; nothing to do.")
            result.success = True
            result.execution_time = time.perf_counter() - started
            return result

        log.info("Applying migration (%d statements)", len(statements))
        accumulator = ResultAccumulator()
        try:
            with self._manager.connection() as conn:
                self._run_in_transaction(conn, statements, accumulator, result)
        except MigrationError as exc:
            result.execution_time = time.perf_counter() - started
            result.error = result.error or str(exc)
            exc.result = result
            raise

        result.success = True
        result.tables_created = accumulator.tables_created
        result.rows_inserted = accumulator.rows_inserted
        result.execution_time = time.perf_counter() - started
        log.info(
            "Migration committed: %d statements, %d tables, %d rows in %.3fs",
            result.statements_run, len(result.tables_created),
            result.rows_inserted, result.execution_time,
        )
        return result

    def _run_in_transaction(
        self,
        conn,
        statements: list[str],
        accumulator: ResultAccumulator,
        result: MigrationResult,
    ) -> None:
        committed = False
        try:
            with conn.cursor() as cursor:
                for index, stmt in enumerate(statements, start=1):
                    result.statements_run = index
                    try:
                        cursor.execute(stmt)
                    except Exception as exc:
                        # Driver errors, and anything else raised while sending the
                        # statement (e.g. UnicodeEncodeError for the client encoding).
                        outcome = ExecutionOutcome(
                            success=False, error=str(exc).strip() or type(exc).__name__
                        )
                        accumulator.record(stmt, outcome)
                        excerpt = statement_excerpt(stmt)
                        result.error = (
                            f"statement {index} failed: {outcome.error}\nStatement: {excerpt}"
                        )
                        log.error("Statement %d failed: %s", index, outcome.error)
                        raise StatementExecutionError(
                            f"failed to execute statement {index}: {outcome.error}",
                            index=index,
                            excerpt=excerpt,
                        ) from exc
                    accumulator.record(
                        stmt, ExecutionOutcome(success=True, rows_affected=cursor.rowcount)
                    )
            try:
                conn.commit()
            except psycopg2.Error as exc:
                detail = str(exc).strip()
                result.error = f"failed to commit transaction: {detail}"
                log.error("Commit failed: %s", detail)
                raise CommitError(result.error) from exc
            committed = True
        finally:
            if not committed:
                self._safe_rollback(conn)

    @staticmethod
    def _safe_rollback(conn) -> None:
        try:
            if not conn.closed:
                conn.rollback()
                log.info("Transaction rolled back.")
        except psycopg2.Error as exc:
            log.warning("Rollback failed: %s", exc)

    # ------------------------------------------------------------------
    # Inspection helpers
    # ------------------------------------------------------------------

    def test_connection(self) -> None:
        """Probe the database once; raises the driver error on failure."""
        self._manager.ping()

    def get_tables(self) -> list[str]:
        """Base tables in schema ``public``, sorted by name."""
        query = """
            SELECT table_name
            FROM information_schema.tables
            WHERE table_schema = 'public'
              AND table_type = 'BASE TABLE'
            ORDER BY table_name
        """
        with self._manager.connection() as conn:
            try:
                with conn.cursor() as cursor:
                    cursor.execute(query)
                    return [row[0] for row in cursor.fetchall()]
            finally:
                conn.rollback()

    def get_row_count(self, table_name: str) -> int:
        """Return ``COUNT(*)`` for *table_name* (optionally ``schema.table``)."""
        identifier = pgsql.Identifier(*table_name.split(".", 1))
        query = pgsql.SQL("SELECT COUNT(*) FROM {}").format(identifier)
        with self._manager.connection() as conn:
            try:
                with conn.cursor() as cursor:
                    cursor.execute(query)
                    row = cursor.fetchone()
                    return row[0] if row else 0
            finally:
                conn.rollback()
