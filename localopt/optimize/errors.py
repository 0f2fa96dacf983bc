"""Exception types raised by the local optimization driver."""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from .core import EvaluationType, Result


class OptimizeError(Exception):
    """Base exception for optimization runs.

    ``result`` holds the best result obtained before the failure. It is
    ``None`` for failures detected before the first iteration.
    """

    def __init__(self, message: str, result: Optional["Result"] = None) -> None:
        super().__init__(message)
        self.result = result


class EmptyInitialPointError(OptimizeError, ValueError):
    """Raised when the initial point has no parameters."""


class InvalidInitialValueError(OptimizeError, ValueError):
    """Raised when the initial function value is NaN or +inf."""


class DimensionMismatchError(OptimizeError, ValueError):
    """Raised when a supplied gradient does not match the problem dimension."""


class NoDefaultMethodError(OptimizeError):
    """Raised when no method is given and the objective has no gradient."""


class CapabilityMismatchError(OptimizeError):
    """Raised when an evaluation cannot be served by the objective."""

    def __init__(
        self,
        message: str,
        eval_type: Optional["EvaluationType"] = None,
        result: Optional["Result"] = None,
    ) -> None:
        super().__init__(message, result)
        self.eval_type = eval_type


class RecorderError(OptimizeError):
    """Raised when the recorder fails to initialize or record."""


class ObjectiveError(OptimizeError):
    """Raised when the objective fails while the run is in progress."""


class MethodError(OptimizeError):
    """Raised when the method fails while the run is in progress."""


class LinesearchError(MethodError):
    """Raised when a line search cannot make progress."""


__all__ = [
    "CapabilityMismatchError",
    "DimensionMismatchError",
    "EmptyInitialPointError",
    "InvalidInitialValueError",
    "LinesearchError",
    "MethodError",
    "NoDefaultMethodError",
    "ObjectiveError",
    "OptimizeError",
    "RecorderError",
]
