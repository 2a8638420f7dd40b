"""
models/migration.py
-------------------
Result types produced by one migration run.

Design Decision:
    Plain ``@dataclass`` records with an explicit ``to_dict`` keep the core
    free of any web framework; the request layer turns them into JSON.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass
class ExecutionOutcome:
    """Outcome of executing one statement."""
    success: bool
    rows_affected: int = 0
    error: str | None = None


@dataclass
class MigrationResult:
    """
    Outcome of applying one SQL script.

    Attributes:
        success:         True only when every statement ran and the
                         transaction committed.
        tables_created:  Table names from ``CREATE TABLE`` statements, in
                         script order. Empty on failure.
        rows_inserted:   Sum of affected rows over ``INSERT`` statements.
                         Zero on failure.
        statements_run:  Number of statements attempted.
        execution_time:  Wall-clock duration in seconds.
        error:           Failure description, None on success.
    """
    success: bool = False
    tables_created: list[str] = field(default_factory=list)
    rows_inserted: int = 0
    statements_run: int = 0
    execution_time: float = 0.0
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "success": self.success,
            "tables_created": list(self.tables_created),
            "rows_inserted": self.rows_inserted,
            "statements_run": self.statements_run,
            "execution_time": round(self.execution_time, 6),
        }
        if self.error is not None:
            data["error"] = self.error
        return data

    def __str__(self) -> str:
        status = "OK" if self.success else "FAILED"
        parts = [
            f"[{status}] {self.statements_run} statements in {self.execution_time:.3f}s"
        ]
        if self.tables_created:
            parts.append(f"  Tables: {', '.join(self.tables_created)}")
        if self.rows_inserted:
            parts.append(f"  Rows inserted: {self.rows_inserted}")
        if self.error:
            parts.append(f"  Error: {self.error}")
        return "\n".join(parts)
