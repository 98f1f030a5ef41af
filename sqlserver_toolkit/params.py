"""
Positional placeholder handling.

Placeholders are located with the sqlglot tokenizer of the adapter's dialect,
so `?` characters inside string literals, quoted identifiers or comments are
never mistaken for bind markers.
"""

from __future__ import annotations

from typing import List, Optional, Sequence

from sqlglot.tokens import TokenType

from sqlserver_toolkit.lexer import tokenize


def placeholder_offsets(sql: str, dialect: str = "tsql") -> Optional[List[int]]:
    """
    Return the character offsets of every `?` bind marker in `sql`.

    Returns None when the statement cannot be tokenized; callers then leave
    parameter handling to the driver.
    """
    tokens = tokenize(sql, dialect)
    if tokens is None:
        return None

    offsets: List[int] = []
    for tok in tokens:
        if tok.token_type != TokenType.PLACEHOLDER or tok.text != "?":
            continue
        if sql[tok.start : tok.end + 1] != "?":
            # token positions do not line up with the source text
            return None
        offsets.append(tok.start)
    return offsets


def count_placeholders(sql: str, dialect: str = "tsql") -> Optional[int]:
    offsets = placeholder_offsets(sql, dialect)
    return None if offsets is None else len(offsets)


def check_parameter_count(
    sql: str, params: Sequence[object], dialect: str = "tsql"
) -> Optional[str]:
    """Return a mismatch message, or None when counts agree or are unknown."""
    expected = count_placeholders(sql, dialect)
    if expected is None or expected == len(params):
        return None
    return (
        f"Parameter count mismatch: the query has {expected} positional "
        f"placeholder(s) (?) but {len(params)} parameter(s) were supplied."
    )


def qmark_to_pyformat(sql: str, dialect: str = "tsql") -> str:
    """
    Rewrite `?` bind markers to `%s` for drivers using the pyformat paramstyle.

    Literal `%` characters are doubled: the driver interpolates the whole
    statement once parameters are supplied.
    """
    offsets = placeholder_offsets(sql, dialect)
    if offsets is None:
        raise ValueError("Statement could not be tokenized for parameter binding")

    marks = set(offsets)
    out: List[str] = []
    for i, ch in enumerate(sql):
        if i in marks:
            out.append("%s")
        elif ch == "%":
            out.append("%%")
        else:
            out.append(ch)
    return "".join(out)
