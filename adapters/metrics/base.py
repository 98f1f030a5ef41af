from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Literal

ExecutionStatus = Literal["ok", "rejected", "error"]


class Metrics(ABC):
    @abstractmethod
    def observe_stage_duration_ms(self, *, stage: str, dt_ms: float) -> None: ...

    @abstractmethod
    def inc_validation_check(self, *, profile: str, ok: bool) -> None: ...

    @abstractmethod
    def inc_validation_block(self, *, profile: str, reason: str) -> None: ...

    @abstractmethod
    def inc_execution(self, *, stage: str, status: ExecutionStatus) -> None: ...

    @abstractmethod
    def inc_best_effort_failure(self, *, operation: str) -> None: ...
