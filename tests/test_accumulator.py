"""
tests/test_accumulator.py
-------------------------
Unit tests for core/accumulator.py.
Run with: python -m pytest tests/
"""
from __future__ import annotations

import pytest

from core.accumulator import ResultAccumulator, extract_table_name
from models.migration import ExecutionOutcome


class TestExtractTableName:
    @pytest.mark.parametrize("stmt,expected", [
        ("CREATE TABLE users (id int)", "users"),
        ("create table users (id int)", "users"),
        ("CREATE TABLE IF NOT EXISTS users (id int)", "users"),
        ("CREATE TABLE public.orders (id int)", "orders"),
        ('CREATE TABLE "Audit" (id int)', "Audit"),
        ('CREATE TABLE IF NOT EXISTS public."events" (id int)', "events"),
        ("CREATE TABLE items(id int)", "items"),
        ("CREATE TABLE items( id int)", "items"),
        ("CREATE TABLE analytics.daily.stats (id int)", "stats"),
        ("  CREATE TABLE\n  spaced\n(id int)", "spaced"),
    ])
    def test_extracts_name(self, stmt: str, expected: str) -> None:
        assert extract_table_name(stmt) == expected

    @pytest.mark.parametrize("stmt", [
        "INSERT INTO users VALUES (1)",
        "CREATE INDEX idx ON users (id)",
        "CREATE TABLESPACE fast LOCATION '/ssd'",
        "CREATE TABLE IF NOT EXISTS",
        "CREATE TABLE",
        "CREATE TEMP TABLE scratch (id int)",
    ])
    def test_returns_empty_when_not_applicable(self, stmt: str) -> None:
        assert extract_table_name(stmt) == ""


class TestResultAccumulator:
    def test_counts_inserted_rows(self) -> None:
        acc = ResultAccumulator()
        acc.record("INSERT INTO t VALUES (1), (2)", ExecutionOutcome(True, 2))
        acc.record("insert into t values (3)", ExecutionOutcome(True, 1))
        assert acc.rows_inserted == 3

    def test_ignores_rows_of_other_statements(self) -> None:
        acc = ResultAccumulator()
        acc.record("UPDATE t SET a = 1", ExecutionOutcome(True, 10))
        acc.record("DELETE FROM t", ExecutionOutcome(True, 4))
        assert acc.rows_inserted == 0

    def test_negative_rowcount_treated_as_zero(self) -> None:
        acc = ResultAccumulator()
        acc.record("INSERT INTO t SELECT 1", ExecutionOutcome(True, -1))
        assert acc.rows_inserted == 0

    def test_tables_in_order_with_duplicates(self) -> None:
        acc = ResultAccumulator()
        acc.record("CREATE TABLE b (id int)", ExecutionOutcome(True))
        acc.record("CREATE TABLE a (id int)", ExecutionOutcome(True))
        acc.record("CREATE TABLE IF NOT EXISTS b (id int)", ExecutionOutcome(True))
        assert acc.tables_created == ["b", "a", "b"]

    def test_failed_outcome_not_recorded(self) -> None:
        acc = ResultAccumulator()
        acc.record("CREATE TABLE a (id int)", ExecutionOutcome(False, error="boom"))
        acc.record("INSERT INTO a VALUES (1)", ExecutionOutcome(False, 1, "boom"))
        assert acc.tables_created == []
        assert acc.rows_inserted == 0

    def test_cte_insert_not_counted(self) -> None:
        # Prefix matching only: statements starting with WITH are not seen.
        acc = ResultAccumulator()
        acc.record("WITH x AS (SELECT 1) INSERT INTO t SELECT * FROM x",
                   ExecutionOutcome(True, 1))
        assert acc.rows_inserted == 0
