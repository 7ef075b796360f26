from __future__ import annotations
from enum import Enum
from typing import Any, Dict, Optional


class TrendFilterError(Exception):
    """Base class for every error raised by tfboot."""


class InvalidInput(TrendFilterError, ValueError):
    """Bad order, negative lambda, series too short, bad confidence level, ..."""


class InsufficientReplicates(TrendFilterError, ValueError):
    """Fewer than two bootstrap replicates available; no variance can be estimated."""


class SolverErrorKind(str, Enum):
    INFEASIBLE = "infeasible"
    UNBOUNDED = "unbounded"
    NUMERICAL_FAILURE = "numerical_failure"
    TIMEOUT = "timeout"


class SolverError(TrendFilterError, RuntimeError):
    """
    Raised by a convex solver adapter when no optimal vector is available.

    `context` collects the fit parameters (n, order, lam) and the stage
    (point fit or replicate index) as the error travels up the stack.
    """

    def __init__(self, kind: SolverErrorKind, message: str = "",
                 context: Optional[Dict[str, Any]] = None) -> None:
        self.kind = SolverErrorKind(kind)
        self.message = message or self.kind.value
        self.context: Dict[str, Any] = dict(context or {})
        super().__init__(self.message)

    def with_context(self, **ctx: Any) -> "SolverError":
        self.context.update(ctx)
        return self

    def __str__(self) -> str:
        if not self.context:
            return f"[{self.kind.value}] {self.message}"
        ctx = ", ".join(f"{k}={v}" for k, v in self.context.items())
        return f"[{self.kind.value}] {self.message} ({ctx})"


class BootstrapFailed(TrendFilterError, RuntimeError):
    """A bootstrap replicate failed to fit under the abort policy."""

    def __init__(self, replicate: int, cause: SolverError) -> None:
        self.replicate = int(replicate)
        self.cause = cause
        super().__init__(f"bootstrap replicate {self.replicate} failed: {cause}")
