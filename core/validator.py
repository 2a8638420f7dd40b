"""
core/validator.py
-----------------
Pre-execution guard against whole-database destructive operations.

This is a textual check on the upper-cased script, not a parser: a
denylisted phrase inside a string literal or comment is rejected too.
"""
from __future__ import annotations

from core.exceptions import ValidationError

DANGEROUS_OPERATIONS: tuple[str, ...] = (
    "DROP DATABASE",
    "DROP SCHEMA",
    "TRUNCATE DATABASE",
)


def validate_sql(sql: str) -> None:
    """
    Raise :class:`ValidationError` if *sql* must not be executed.

    Raises:
        ValidationError: The script is empty after trimming, or contains one
            of :data:`DANGEROUS_OPERATIONS` in any letter case.
    """
    sql = sql.strip()
    if not sql:
        raise ValidationError("SQL cannot be empty")

    upper_sql = sql.upper()
    for danger in DANGEROUS_OPERATIONS:
        if danger in upper_sql:
            raise ValidationError(f"dangerous operation detected: {danger}")
