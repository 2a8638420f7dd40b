"""
core/exceptions.py
------------------
Error taxonomy for the migration engine.

Every failure of :meth:`core.executor.MigrationRunner.apply_migration`
raises one of these with the failed :class:`~models.migration.MigrationResult`
attached as ``.result``, so callers get both the structured outcome and the
error without a second channel.
"""
from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from models.migration import MigrationResult


class MigrationError(Exception):
    """Base class for all engine failures."""

    def __init__(self, message: str, result: "MigrationResult | None" = None) -> None:
        super().__init__(message)
        self.result = result


class ValidationError(MigrationError):
    """Script is empty or contains a denylisted destructive phrase."""


class DatabaseConnectionError(MigrationError):
    """Target database unreachable after bounded retries, or pool exhausted."""


class StatementExecutionError(MigrationError):
    """One statement failed mid-transaction; the transaction was rolled back."""

    def __init__(
        self,
        message: str,
        index: int,
        excerpt: str,
        result: "MigrationResult | None" = None,
    ) -> None:
        super().__init__(message, result)
        self.index = index
        self.excerpt = excerpt


class CommitError(MigrationError):
    """Every statement succeeded but the transaction failed to commit."""
