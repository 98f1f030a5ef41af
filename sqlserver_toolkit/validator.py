from __future__ import annotations

import logging
import re
from typing import Dict, Optional, Pattern, Tuple

from adapters.metrics.base import Metrics
from adapters.metrics.prometheus import PrometheusMetrics
from sqlserver_toolkit.lexer import strip_comments
from sqlserver_toolkit.policy import CheckOrder, ValidationPolicy
from sqlserver_toolkit.types import ValidationVerdict

log = logging.getLogger(__name__)


# ------------------------------- regexes -------------------------------------

_WHITESPACE_RE = re.compile(r"\s+")
_LEADING_WORD_RE = re.compile(r"^\s*(\w+)")


def normalize(sql: str, dialect: str = "tsql") -> str:
    """
    Strip `--` and `/* */` comments, collapse whitespace runs, trim.

    Comments are found by the tokenizer, so comment markers inside string
    literals stay part of the text. Text that cannot be tokenized is scanned
    with its comments in place. Only used for scanning; the original text is
    what gets executed.
    """
    text = sql or ""
    stripped = strip_comments(text, dialect)
    if stripped is None:
        stripped = text
    return _WHITESPACE_RE.sub(" ", stripped).strip()


def leading_keyword(sql: str) -> str:
    m = _LEADING_WORD_RE.match(sql or "")
    return m.group(1).upper() if m else ""


def _keyword_pattern(keyword: str) -> Pattern[str]:
    # word boundaries: a column named `dropdown` must not trip DROP
    return re.compile(rf"\b{re.escape(keyword)}\b", re.IGNORECASE)


class QueryValidator:
    """
    Policy-driven statement check: allowed leading keyword plus a
    whole-word, case-insensitive forbidden keyword scan.

    Never raises; every input yields a verdict.
    """

    name = "validator"

    def __init__(
        self,
        policy: ValidationPolicy,
        metrics: Optional[Metrics] = None,
        *,
        dialect: str = "tsql",
    ) -> None:
        self.policy = policy
        self.dialect = dialect
        self.metrics = metrics or PrometheusMetrics()
        self._patterns: Dict[str, Pattern[str]] = {
            kw: _keyword_pattern(kw) for kw in policy.forbidden_keywords
        }

    @property
    def profile(self) -> str:
        return self.policy.profile.value

    def _find_forbidden(self, text: str) -> Optional[str]:
        for kw, rx in self._patterns.items():
            if rx.search(text):
                return kw
        return None

    def _reject(self, keyword: str, reason: str, offending: str) -> ValidationVerdict:
        self.metrics.inc_validation_block(profile=self.profile, reason=reason)
        self.metrics.inc_validation_check(profile=self.profile, ok=False)
        log.debug(
            "Statement rejected",
            extra={"profile": self.profile, "reason": reason, "keyword": offending},
        )
        return ValidationVerdict(
            ok=False, leading_keyword=keyword, reason=reason, keyword=offending
        )

    def _scan_texts(self, sql: str) -> Tuple[str, str]:
        """Return (text used for the leading keyword, text used for the scan)."""
        if self.policy.scan_normalized:
            clean = normalize(sql, self.dialect)
            return clean, clean
        return sql or "", sql or ""

    def validate(self, sql: str) -> ValidationVerdict:
        head_text, scan_text = self._scan_texts(sql)
        keyword = leading_keyword(head_text)

        leading_ok = keyword in self.policy.leading_keywords
        if self.policy.check_order is CheckOrder.LEADING_FIRST and not leading_ok:
            return self._reject(keyword, "leading_keyword", keyword)

        forbidden = self._find_forbidden(scan_text)
        if forbidden is not None:
            return self._reject(keyword, "forbidden_keyword", forbidden)

        if not leading_ok:
            return self._reject(keyword, "leading_keyword", keyword)

        self.metrics.inc_validation_check(profile=self.profile, ok=True)
        return ValidationVerdict(ok=True, leading_keyword=keyword)
