"""core/__init__.py"""
from core.accumulator import ResultAccumulator, extract_table_name
from core.connection import ConnectionManager
from core.exceptions import (
    CommitError,
    DatabaseConnectionError,
    MigrationError,
    StatementExecutionError,
    ValidationError,
)
from core.executor import MigrationRunner
from core.splitter import TokenizerMode, TokenizerState, split_sql_statements
from core.validator import DANGEROUS_OPERATIONS, validate_sql

__all__ = [
    "CommitError",
    "ConnectionManager",
    "DANGEROUS_OPERATIONS",
    "DatabaseConnectionError",
    "MigrationError",
    "MigrationRunner",
    "ResultAccumulator",
    "StatementExecutionError",
    "TokenizerMode",
    "TokenizerState",
    "ValidationError",
    "extract_table_name",
    "split_sql_statements",
    "validate_sql",
]
