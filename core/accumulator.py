"""
core/accumulator.py
-------------------
Best-effort provenance for a migration run: which tables were created and
how many rows were inserted.

Both are derived from statement text prefixes only (``CREATE TABLE`` and
``INSERT``), never from the catalog. Statements starting with ``WITH``,
``CREATE TEMP TABLE`` or unusual spacing are not counted.
"""
from __future__ import annotations

from models.migration import ExecutionOutcome

_QUOTE_CHARS = "\"`"


def extract_table_name(stmt: str) -> str:
    """
    Return the table name of a ``CREATE TABLE`` statement, or "".

    Example::

        >>> extract_table_name('CREATE TABLE IF NOT EXISTS public."users" (id int)')
        'users'
    """
    if not stmt.strip().upper().startswith("CREATE TABLE"):
        return ""

    parts = stmt.split()
    if parts[1].upper() != "TABLE":  # CREATE TABLESPACE ...
        return ""
    pos = 2
    if pos < len(parts) and parts[pos].upper() == "IF":
        pos += 3  # IF NOT EXISTS
    if pos >= len(parts):
        return ""

    name = parts[pos].partition("(")[0]
    name = name.rpartition(".")[2]
    return name.strip(_QUOTE_CHARS)


class ResultAccumulator:
    """Running totals fed one statement at a time, in execution order."""

    def __init__(self) -> None:
        self.tables_created: list[str] = []
        self.rows_inserted = 0

    def record(self, stmt: str, outcome: ExecutionOutcome) -> None:
        if not outcome.success:
            return
        upper = stmt.strip().upper()
        if upper.startswith("INSERT"):
            self.rows_inserted += max(outcome.rows_affected, 0)
        if upper.startswith("CREATE TABLE"):
            table_name = extract_table_name(stmt)
            if table_name:
                self.tables_created.append(table_name)
