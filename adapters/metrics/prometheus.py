from __future__ import annotations

from prometheus_client import Counter, Histogram
from sqlserver_toolkit.prom import REGISTRY

from adapters.metrics.base import ExecutionStatus, Metrics

# -----------------------------------------------------------------------------
# Stage-level metrics
# -----------------------------------------------------------------------------
stage_duration_ms = Histogram(
    "toolkit_stage_duration_ms",
    "Duration (ms) of each toolkit stage",
    ["stage"],  # read_executor|write_executor
    buckets=(1, 2, 5, 10, 20, 50, 100, 200, 500, 1000, 2000, 5000, 10000, 30000),
    registry=REGISTRY,
)

# -----------------------------------------------------------------------------
# Validation metrics
# -----------------------------------------------------------------------------
validation_checks_total = Counter(
    "validation_checks_total",
    "Total statements checked by the query validator",
    ["profile", "ok"],
    registry=REGISTRY,
)

validation_blocks_total = Counter(
    "validation_blocks_total",
    "Count of statements rejected by the query validator",
    ["profile", "reason"],  # leading_keyword | forbidden_keyword
    registry=REGISTRY,
)

# -----------------------------------------------------------------------------
# Executor metrics
# -----------------------------------------------------------------------------
executions_total = Counter(
    "executions_total",
    "Executor runs labeled by stage and status",
    ["stage", "status"],  # ok | rejected | error
    registry=REGISTRY,
)

best_effort_failures_total = Counter(
    "best_effort_failures_total",
    "Swallowed failures of optional follow-up operations",
    ["operation"],
    registry=REGISTRY,
)


class PrometheusMetrics(Metrics):
    def observe_stage_duration_ms(self, *, stage: str, dt_ms: float) -> None:
        stage_duration_ms.labels(stage=stage).observe(float(dt_ms))

    def inc_validation_check(self, *, profile: str, ok: bool) -> None:
        validation_checks_total.labels(
            profile=profile, ok=("true" if ok else "false")
        ).inc()

    def inc_validation_block(self, *, profile: str, reason: str) -> None:
        validation_blocks_total.labels(profile=profile, reason=reason).inc()

    def inc_execution(self, *, stage: str, status: ExecutionStatus) -> None:
        executions_total.labels(stage=stage, status=status).inc()

    def inc_best_effort_failure(self, *, operation: str) -> None:
        best_effort_failures_total.labels(operation=operation).inc()


# -----------------------------------------------------------------------------
# Label priming to keep exported series stable
# -----------------------------------------------------------------------------
for profile in ("read_only", "write"):
    for ok in ("true", "false"):
        validation_checks_total.labels(profile=profile, ok=ok).inc(0)
    for reason in ("leading_keyword", "forbidden_keyword"):
        validation_blocks_total.labels(profile=profile, reason=reason).inc(0)

for stage in ("read_executor", "write_executor"):
    for status in ("ok", "rejected", "error"):
        executions_total.labels(stage=stage, status=status).inc(0)

best_effort_failures_total.labels(operation="last_insert_id").inc(0)
