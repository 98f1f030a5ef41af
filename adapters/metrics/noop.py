from __future__ import annotations

from adapters.metrics.base import ExecutionStatus, Metrics


class NoOpMetrics(Metrics):
    def observe_stage_duration_ms(self, *, stage: str, dt_ms: float) -> None:
        return

    def inc_validation_check(self, *, profile: str, ok: bool) -> None:
        return

    def inc_validation_block(self, *, profile: str, reason: str) -> None:
        return

    def inc_execution(self, *, stage: str, status: ExecutionStatus) -> None:
        return

    def inc_best_effort_failure(self, *, operation: str) -> None:
        return
