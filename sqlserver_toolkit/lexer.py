"""
Token-level view of a statement, shared by validation and parameter binding.

The sqlglot tokenizer knows string literals, quoted identifiers and comments,
so `--`, `/*` or `?` inside a literal are never mistaken for syntax.
"""

from __future__ import annotations

import logging
from typing import List, Optional

from sqlglot.dialects.dialect import Dialect
from sqlglot.errors import SqlglotError
from sqlglot.tokens import Token

log = logging.getLogger(__name__)


def tokenize(sql: str, dialect: str = "tsql") -> Optional[List[Token]]:
    """Tokens of `sql`, or None when the text cannot be tokenized."""
    try:
        return list(Dialect.get_or_raise(dialect).tokenize(sql))
    except SqlglotError as exc:
        log.debug("Could not tokenize statement", extra={"error": str(exc)})
        return None


def strip_comments(sql: str, dialect: str = "tsql") -> Optional[str]:
    """
    Rebuild `sql` from its tokens, dropping comments.

    Any gap between two tokens (whitespace and/or comments) becomes a single
    space. Returns None when the text cannot be tokenized.
    """
    tokens = tokenize(sql, dialect)
    if tokens is None:
        return None

    parts: List[str] = []
    prev_end: Optional[int] = None
    for tok in tokens:
        if tok.start > tok.end + 1 or (prev_end is not None and tok.start <= prev_end):
            # token positions do not line up with the source text
            return None
        if prev_end is not None and tok.start > prev_end + 1:
            parts.append(" ")
        parts.append(sql[tok.start : tok.end + 1])
        prev_end = tok.end
    return "".join(parts)
