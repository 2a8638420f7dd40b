"""
core/splitter.py
----------------
Split a multi-statement SQL script into individually executable statements.

Design Decisions:
    * One left-to-right pass over the script with a single state value.
      The state is one of four mutually exclusive modes; a dollar quote
      additionally remembers its exact opening tag, so only the same tag
      closes it (``$$`` and ``$body$`` never close each other).
    * Dollar-quote detection runs before comment and string detection.
    * Line comments are not executable content: their text is dropped from
      the emitted statement (the terminating newline is kept). A script made
      only of comments, whitespace and semicolons therefore yields nothing.
    * Only a semicolon seen in NORMAL mode ends a statement. The semicolon
      itself is not part of the emitted statement.
    * Block comments (``/* */``) and backslash escapes in ``E''`` strings are
      not recognised.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

_TAG_CHARS = frozenset(
    "abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789_"
)


class TokenizerMode(str, Enum):
    NORMAL = "normal"
    IN_LINE_COMMENT = "in_line_comment"
    IN_STRING_LITERAL = "in_string_literal"
    IN_DOLLAR_QUOTE = "in_dollar_quote"


@dataclass(frozen=True)
class TokenizerState:
    """Current scanner mode; ``tag`` is set only for IN_DOLLAR_QUOTE."""
    mode: TokenizerMode = TokenizerMode.NORMAL
    tag: str | None = None

    @classmethod
    def dollar_quote(cls, tag: str) -> "TokenizerState":
        return cls(TokenizerMode.IN_DOLLAR_QUOTE, tag)


NORMAL = TokenizerState()
IN_LINE_COMMENT = TokenizerState(TokenizerMode.IN_LINE_COMMENT)
IN_STRING_LITERAL = TokenizerState(TokenizerMode.IN_STRING_LITERAL)


def match_dollar_tag(sql: str, pos: int) -> str | None:
    """
    Return the dollar-quote tag starting at ``sql[pos]`` (e.g. ``"$$"`` or
    ``"$fn_body$"``), or None when the ``$`` at *pos* does not open a tag.
    """
    if sql[pos] != "$":
        return None
    end = pos + 1
    while end < len(sql) and sql[end] in _TAG_CHARS:
        end += 1
    if end < len(sql) and sql[end] == "$":
        return sql[pos:end + 1]
    return None


def split_sql_statements(sql: str) -> list[str]:
    """
    Split *sql* into trimmed, non-empty statements in source order.

    Args:
        sql: Raw script text.

    Returns:
        List of statements without their terminating semicolons.

    Example::

        >>> split_sql_statements("INSERT INTO t VALUES ('a;b''c'); SELECT 1")
        ["INSERT INTO t VALUES ('a;b''c')", 'SELECT 1']
    """
    statements: list[str] = []
    buf: list[str] = []
    state = NORMAL
    i = 0
    n = len(sql)

    def flush() -> None:
        stmt = "".join(buf).strip()
        if stmt:
            statements.append(stmt)
        buf.clear()

    while i < n:
        char = sql[i]
        mode = state.mode

        if mode is TokenizerMode.IN_LINE_COMMENT:
            if char == "\n":
                buf.append(char)
                state = NORMAL
            i += 1
            continue

        if char == "$" and mode is not TokenizerMode.IN_STRING_LITERAL:
            tag = match_dollar_tag(sql, i)
            if tag is not None:
                if mode is TokenizerMode.NORMAL:
                    state = TokenizerState.dollar_quote(tag)
                    buf.append(tag)
                    i += len(tag)
                    continue
                if tag == state.tag:
                    state = NORMAL
                    buf.append(tag)
                    i += len(tag)
                    continue

        if mode is TokenizerMode.IN_DOLLAR_QUOTE:
            buf.append(char)
            i += 1
            continue

        if mode is TokenizerMode.IN_STRING_LITERAL:
            buf.append(char)
            if char == "'":
                if i + 1 < n and sql[i + 1] == "'":
                    buf.append("'")
                    i += 2
                    continue
                state = NORMAL
            i += 1
            continue

        # NORMAL
        if char == "-" and i + 1 < n and sql[i + 1] == "-":
            state = IN_LINE_COMMENT
            i += 2
            continue
        if char == "'":
            state = IN_STRING_LITERAL
        elif char == ";":
            flush()
            i += 1
            continue
        buf.append(char)
        i += 1

    flush()
    return statements
