from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Generic, Optional, Tuple, Type, TypeVar

from adapters.metrics.base import Metrics

log = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class BestEffort(Generic[T]):
    """Outcome of an optional operation: a value, or the error that was discarded."""

    operation: str
    value: Optional[T] = None
    error: Optional[BaseException] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def best_effort(
    operation: str,
    fn: Callable[[], T],
    *,
    metrics: Optional[Metrics] = None,
    suppress: Tuple[Type[Exception], ...] = (Exception,),
) -> BestEffort[T]:
    """
    Run `fn` and discard any error in `suppress`.

    The primary operation's result must never depend on this call; the
    returned BestEffort records what was swallowed.
    """
    try:
        return BestEffort(operation=operation, value=fn())
    except suppress as exc:
        log.debug(
            "Best-effort operation failed; ignoring",
            extra={"operation": operation, "error": str(exc)},
        )
        if metrics is not None:
            metrics.inc_best_effort_failure(operation=operation)
        return BestEffort(operation=operation, error=exc)
