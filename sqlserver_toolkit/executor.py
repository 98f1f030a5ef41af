from __future__ import annotations

import logging
import time
from decimal import Decimal
from typing import Any, Dict, List, Optional, Sequence, Union

from adapters.db.base import DBAdapter
from adapters.metrics.base import Metrics
from adapters.metrics.prometheus import PrometheusMetrics
from sqlserver_toolkit.best_effort import BestEffort
from sqlserver_toolkit.errors.codes import ErrorCode
from sqlserver_toolkit.params import check_parameter_count
from sqlserver_toolkit.policy import READ_ONLY_POLICY, WRITE_POLICY
from sqlserver_toolkit.types import Failure, Rows, StageTrace, WriteResult
from sqlserver_toolkit.validator import QueryValidator

log = logging.getLogger(__name__)

READ_REJECTION_MESSAGE = (
    "The query was rejected for security reasons. "
    "It looks like you are trying to run a write query or dangerous operation "
    "using the read-only query tool."
)

UNKNOWN_DB_ERROR = "Unknown database error"


def _ms(t0: float) -> float:
    return (time.perf_counter() - t0) * 1000


def _driver_message(exc: BaseException) -> str:
    return str(exc).strip() or UNKNOWN_DB_ERROR


def _coerce_identity(value: Any) -> Optional[Union[int, float]]:
    """Keep only positive numeric identity values; anything else is absent."""
    if value is None or isinstance(value, bool):
        return None
    try:
        number = Decimal(str(value))
    except ArithmeticError:
        return None
    if not number.is_finite() or number <= 0:
        return None
    if number == number.to_integral_value():
        return int(number)
    return float(number)


class _StatementExecutor:
    name = "executor"

    def __init__(
        self,
        db: DBAdapter,
        validator: QueryValidator,
        *,
        strict_parameter_count: bool = True,
        metrics: Optional[Metrics] = None,
    ) -> None:
        self.db = db
        self.validator = validator
        self.strict_parameter_count = strict_parameter_count
        self.metrics = metrics or PrometheusMetrics()

    def _trace(self, t0: float, summary: str, **notes: Any) -> StageTrace:
        dt = _ms(t0)
        self.metrics.observe_stage_duration_ms(stage=self.name, dt_ms=dt)
        return StageTrace(stage=self.name, duration_ms=dt, summary=summary, notes=notes or None)

    def _fail(
        self,
        t0: float,
        message: str,
        *,
        code: ErrorCode,
        status: str = "error",
        **notes: Any,
    ) -> Failure:
        self.metrics.inc_execution(stage=self.name, status=status)  # type: ignore[arg-type]
        return Failure(
            message=message,
            error_code=code,
            retryable=False,
            trace=self._trace(t0, status, **notes),
        )

    def _check_params(self, t0: float, sql: str, params: Sequence[Any]) -> Optional[Failure]:
        if not self.strict_parameter_count:
            return None
        mismatch = check_parameter_count(sql, params, self.db.dialect)
        if mismatch is None:
            return None
        return self._fail(
            t0,
            mismatch,
            code=ErrorCode.PARAMETER_MISMATCH,
            status="rejected",
            param_count=len(params),
        )


class ReadExecutor(_StatementExecutor):
    """Validate with the read-only policy, bind positionally, return rows."""

    name = "read_executor"

    def __init__(
        self,
        db: DBAdapter,
        validator: Optional[QueryValidator] = None,
        *,
        strict_parameter_count: bool = True,
        metrics: Optional[Metrics] = None,
    ) -> None:
        metrics = metrics or PrometheusMetrics()
        super().__init__(
            db,
            validator or QueryValidator(READ_ONLY_POLICY, metrics=metrics, dialect=db.dialect),
            strict_parameter_count=strict_parameter_count,
            metrics=metrics,
        )

    def run(self, sql: str, params: Optional[Sequence[Any]] = None) -> Union[Rows, Failure]:
        t0 = time.perf_counter()
        params = list(params or [])

        verdict = self.validator.validate(sql)
        if not verdict.ok:
            return self._fail(
                t0,
                READ_REJECTION_MESSAGE,
                code=ErrorCode.VALIDATION_REJECTED,
                status="rejected",
                reason=verdict.reason,
                keyword=verdict.keyword,
            )

        mismatch = self._check_params(t0, sql, params)
        if mismatch is not None:
            return mismatch

        try:
            raw_rows, cols = self.db.query(sql, params)
        except Exception as e:
            log.debug("Read query failed", extra={"error": str(e)})
            return self._fail(
                t0,
                _driver_message(e),
                code=ErrorCode.DRIVER_FAILURE,
                error_type=type(e).__name__,
            )

        rows: List[Dict[str, Any]] = [dict(zip(cols, r)) for r in raw_rows]
        self.metrics.inc_execution(stage=self.name, status="ok")
        return Rows(
            rows=rows,
            columns=list(cols),
            trace=self._trace(t0, "ok", row_count=len(rows), col_count=len(cols)),
        )


class WriteExecutor(_StatementExecutor):
    """
    Validate with the write policy, bind positionally, report affected rows.

    An INSERT goes through the adapter's `insert`, which reads the generated
    identity in the same round trip as a best-effort extra; a failed lookup
    never turns the write into a failure.
    """

    name = "write_executor"

    def __init__(
        self,
        db: DBAdapter,
        validator: Optional[QueryValidator] = None,
        *,
        strict_parameter_count: bool = True,
        metrics: Optional[Metrics] = None,
    ) -> None:
        metrics = metrics or PrometheusMetrics()
        super().__init__(
            db,
            validator or QueryValidator(WRITE_POLICY, metrics=metrics, dialect=db.dialect),
            strict_parameter_count=strict_parameter_count,
            metrics=metrics,
        )

    @property
    def rejection_message(self) -> str:
        policy = self.validator.policy
        return (
            "The query was rejected for security reasons: it contains forbidden "
            f"statements ({', '.join(policy.forbidden_keywords)}). "
            f"Only {', '.join(policy.leading_keywords)} statements are accepted."
        )

    def _last_insert_id(self, lookup: Optional[BestEffort[Any]]) -> Optional[Union[int, float]]:
        if lookup is None:
            return None
        if not lookup.ok:
            self.metrics.inc_best_effort_failure(operation=lookup.operation)
            return None
        return _coerce_identity(lookup.value)

    def run(self, sql: str, params: Optional[Sequence[Any]] = None) -> Union[WriteResult, Failure]:
        t0 = time.perf_counter()
        params = list(params or [])

        verdict = self.validator.validate(sql)
        if not verdict.ok:
            return self._fail(
                t0,
                self.rejection_message,
                code=ErrorCode.VALIDATION_REJECTED,
                status="rejected",
                reason=verdict.reason,
                keyword=verdict.keyword,
            )

        mismatch = self._check_params(t0, sql, params)
        if mismatch is not None:
            return mismatch

        lookup: Optional[BestEffort[Any]] = None
        try:
            if verdict.leading_keyword == "INSERT":
                affected, lookup = self.db.insert(sql, params)
            else:
                affected = self.db.execute(sql, params)
        except Exception as e:
            log.debug("Write query failed", extra={"error": str(e)})
            return self._fail(
                t0,
                _driver_message(e),
                code=ErrorCode.DRIVER_FAILURE,
                error_type=type(e).__name__,
            )

        last_id = self._last_insert_id(lookup)

        self.metrics.inc_execution(stage=self.name, status="ok")
        return WriteResult(
            affected_rows=affected,
            last_insert_id=last_id,
            trace=self._trace(t0, "ok", affected_rows=affected, last_insert_id=last_id),
        )
