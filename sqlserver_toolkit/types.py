from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

from sqlserver_toolkit.errors.codes import ErrorCode


# =====================
# Tracing / Observability
# =====================


@dataclass(frozen=True)
class StageTrace:
    stage: str
    duration_ms: float
    summary: str = ""
    notes: Optional[Dict[str, Any]] = None


# =====================
# Validation
# =====================


@dataclass(frozen=True)
class ValidationVerdict:
    ok: bool
    leading_keyword: str = ""

    # Only set on rejection: "leading_keyword" or "forbidden_keyword"
    reason: Optional[str] = None
    keyword: Optional[str] = None


# =====================
# Execution outcomes
# =====================


@dataclass(frozen=True)
class Rows:
    """Successful read. Zero rows is a valid answer, not a failure."""

    rows: List[Dict[str, Any]]
    columns: List[str] = field(default_factory=list)
    trace: Optional[StageTrace] = None

    ok = True

    @property
    def row_count(self) -> int:
        return len(self.rows)


@dataclass(frozen=True)
class WriteResult:
    affected_rows: int
    last_insert_id: Optional[Union[int, float]] = None
    trace: Optional[StageTrace] = None

    ok = True


@dataclass(frozen=True)
class Failure:
    message: str
    error_code: Optional[ErrorCode] = None
    retryable: bool = False
    trace: Optional[StageTrace] = None

    ok = False


ExecutionOutcome = Union[Rows, WriteResult, Failure]
