"""models/__init__.py"""
from models.migration import ExecutionOutcome, MigrationResult
from models.target import ConnectionDescriptor, safe_dsn

__all__ = [
    "ConnectionDescriptor",
    "ExecutionOutcome",
    "MigrationResult",
    "safe_dsn",
]
